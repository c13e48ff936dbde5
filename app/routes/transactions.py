"""Transaction ledger lookup endpoints."""

import math
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request

from app.exceptions import TransactionNotFoundError
from app.models import (
    Pagination,
    PaymentStatus,
    Provider,
    SortableField,
    SortOrder,
    Transaction,
    TransactionListResponse,
    TransactionQuery,
    TransactionStats,
)
from app.storage.memory import TransactionLedger

router = APIRouter(prefix="/api/payment")


def _get_ledger(request: Request) -> TransactionLedger:
    """Retrieve the transaction ledger from application state."""
    return request.app.state.ledger


@router.get("/transactions", response_model=TransactionListResponse)
async def list_transactions(
    request: Request,
    email: Optional[str] = Query(default=None),
    status: Optional[PaymentStatus] = Query(default=None),
    provider: Optional[Provider] = Query(default=None),
    start_date: Optional[datetime] = Query(default=None, alias="startDate"),
    end_date: Optional[datetime] = Query(default=None, alias="endDate"),
    page: Optional[int] = Query(default=None, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    sort_by: Optional[SortableField] = Query(default=None, alias="sortBy"),
    sort_order: SortOrder = Query(default="desc", alias="sortOrder"),
) -> TransactionListResponse:
    """Query the ledger with optional filters, sorting and pagination.

    Filters:
      - email: case-insensitive substring match
      - status / provider: exact match
      - startDate / endDate: inclusive timestamp bounds
    """
    ledger = _get_ledger(request)
    query = TransactionQuery(
        email=email,
        status=status,
        provider=provider,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    if (
        query.start_date is not None
        and query.end_date is not None
        and query.end_date < query.start_date
    ):
        raise HTTPException(status_code=422, detail="endDate must not be before startDate")

    pagination = None
    if page and limit:
        total = len(ledger)
        pagination = Pagination(
            page=page,
            limit=limit,
            total=total,
            total_pages=math.ceil(total / limit),
        )

    return TransactionListResponse(
        transactions=ledger.query(query),
        stats=ledger.stats(),
        pagination=pagination,
    )


@router.get("/transactions/stats", response_model=TransactionStats)
async def transaction_stats(request: Request) -> TransactionStats:
    """Aggregate counts by status and provider, plus amount totals."""
    return _get_ledger(request).stats()


@router.get("/transactions/{transaction_id}", response_model=Transaction)
async def get_transaction(transaction_id: str, request: Request) -> Transaction:
    """Return a single transaction by id."""
    try:
        return _get_ledger(request).require(transaction_id)
    except TransactionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
