"""Pydantic models for the payment risk-routing API."""

from datetime import datetime, timezone
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


SUPPORTED_CURRENCIES = ("USD", "EUR", "GBP", "CAD", "AUD", "JPY")

SortableField = Literal["timestamp", "amount", "riskScore", "email"]
SortOrder = Literal["asc", "desc"]


def as_utc(value: datetime) -> datetime:
    """Treat a naive datetime as UTC; aware values pass through."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class CamelModel(BaseModel):
    """Base model serialised with camelCase field names."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Provider(str, Enum):
    STRIPE = "stripe"
    PAYPAL = "paypal"
    BLOCKED = "blocked"


class PaymentStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    BLOCKED = "blocked"


class PaymentRequest(BaseModel):
    """Incoming payment to be scored and routed."""
    amount: float = Field(gt=0, le=1_000_000)
    currency: str
    source: str = Field(min_length=1, max_length=100)
    email: str = Field(max_length=255, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

    @field_validator("currency", mode="before")
    @classmethod
    def _normalize_currency(cls, value: str) -> str:
        if isinstance(value, str):
            value = value.strip().upper()
        if value not in SUPPORTED_CURRENCIES:
            raise ValueError(
                f"Currency must be one of: {', '.join(SUPPORTED_CURRENCIES)}"
            )
        return value


class AmountContext(CamelModel):
    """Historical and reference signals about a payer's amounts."""
    model_config = ConfigDict(frozen=True)

    amount: float
    currency: str
    previous_amounts: list[float] = Field(default_factory=list)  # chronological
    user_average_amount: float = 0.0
    user_standard_deviation: float = 0.0
    merchant_category: str = "retail"
    is_first_time_transaction: bool = True
    credit_card_limit: Optional[float] = None
    reporting_threshold: float = 10_000


class FraudAnalysisData(CamelModel):
    """Immutable input to risk scoring."""
    model_config = ConfigDict(frozen=True)

    amount: float
    currency: str
    email: str
    domain: str
    timestamp: datetime
    source: str = ""
    amount_context: Optional[AmountContext] = None


class RiskResult(CamelModel):
    """Outcome of evaluating the rule table."""
    risk_score: float = Field(ge=0, le=1)
    triggered_rules: list[str]
    is_high_risk: bool


class RouteDecision(BaseModel):
    provider: Provider
    status: PaymentStatus


class TransactionMetadata(CamelModel):
    model_config = ConfigDict(frozen=True)

    triggered_rules: list[str] = Field(default_factory=list)
    is_high_risk: bool = False


class Transaction(CamelModel):
    """A completed routing decision recorded in the ledger."""
    model_config = ConfigDict(frozen=True)

    id: str
    amount: float
    currency: str
    email: str
    source: str
    provider: Provider
    status: PaymentStatus
    risk_score: float
    explanation: str
    timestamp: datetime
    metadata: Optional[TransactionMetadata] = None


class PaymentResponse(CamelModel):
    """Result returned to the caller of the charge endpoint."""
    transaction_id: str
    provider: Provider
    status: PaymentStatus
    risk_score: float
    explanation: str
    timestamp: datetime


class TransactionQuery(CamelModel):
    """Filter, sort and pagination options for ledger queries."""
    email: Optional[str] = None
    status: Optional[PaymentStatus] = None
    provider: Optional[Provider] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    page: Optional[int] = Field(default=None, ge=1)
    limit: Optional[int] = Field(default=None, ge=1)
    sort_by: Optional[SortableField] = None
    sort_order: Optional[SortOrder] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def bounds_as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return None if value is None else as_utc(value)


class TransactionStats(CamelModel):
    """Aggregate counts and totals over the whole ledger."""
    total: int
    by_status: dict[str, int]
    by_provider: dict[str, int]
    total_amount: float
    average_amount: float


class Pagination(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TransactionListResponse(CamelModel):
    transactions: list[Transaction]
    stats: TransactionStats
    pagination: Optional[Pagination] = None


class FraudConfig(CamelModel):
    """Tunable thresholds consumed by the risk engine."""
    model_config = ConfigDict(frozen=True)

    threshold: float = Field(default=0.5, ge=0, le=1)
    large_amount_threshold: float = Field(default=5000, ge=0)
    suspicious_domains: list[str] = Field(
        default_factory=lambda: [".ru", "test.com", "example.com"]
    )
    rapid_fire_enabled: bool = False
    rapid_fire_window_seconds: float = Field(default=45, gt=0)


class FraudConfigUpdate(CamelModel):
    """Partial update merged into the current FraudConfig."""
    threshold: Optional[float] = Field(default=None, ge=0, le=1)
    large_amount_threshold: Optional[float] = Field(default=None, ge=0)
    suspicious_domains: Optional[list[str]] = None
    rapid_fire_enabled: Optional[bool] = None
    rapid_fire_window_seconds: Optional[float] = Field(default=None, gt=0)
