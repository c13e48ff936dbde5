"""Fraud rule configuration endpoints for reading and updating thresholds."""

from fastapi import APIRouter, HTTPException, Request

from app.models import FraudConfig, FraudConfigUpdate
from app.screening.engine import RiskEngine

router = APIRouter(prefix="/api")


def _get_engine(request: Request) -> RiskEngine:
    """Retrieve the risk engine from application state."""
    return request.app.state.engine


@router.get("/rules", response_model=FraudConfig)
async def get_rules(request: Request) -> FraudConfig:
    """Return the current fraud detection configuration."""
    return _get_engine(request).get_config()


@router.patch("/rules", response_model=FraudConfig)
async def update_rules(
    changes: FraudConfigUpdate,
    request: Request,
) -> FraudConfig:
    """Merge the given fields into the current configuration.

    Fields left out keep their current values. Subsequent payments are
    scored with the new values immediately.
    """
    try:
        return _get_engine(request).update_config(**changes.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e
