"""Payment charge endpoint."""

from fastapi import APIRouter, Request

from app.models import PaymentRequest, PaymentResponse
from app.screening.processor import PaymentProcessor

router = APIRouter(prefix="/api/payment")


def _get_processor(request: Request) -> PaymentProcessor:
    """Retrieve the payment processor from application state."""
    return request.app.state.processor


@router.post("/charge", response_model=PaymentResponse)
async def charge(
    payment: PaymentRequest,
    request: Request,
) -> PaymentResponse:
    """Score a payment, route it to a provider (or block it) and record it."""
    processor = _get_processor(request)
    return await processor.process(payment)
