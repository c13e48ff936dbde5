"""Shared fixtures for the test suite."""

import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient

from app.config import settings
from app.main import app
from app.models import (
    AmountContext,
    FraudAnalysisData,
    FraudConfig,
    PaymentStatus,
    Provider,
    Transaction,
    TransactionMetadata,
)
from app.screening.amount_context import AmountPatternAnalyzer
from app.screening.engine import RiskEngine
from app.screening.processor import PaymentProcessor
from app.storage.memory import TransactionLedger


@pytest.fixture
def config():
    return FraudConfig()


@pytest.fixture
def ledger():
    return TransactionLedger()


@pytest.fixture
def engine(config):
    return RiskEngine(config=config)


@pytest.fixture
def analyzer(ledger):
    return AmountPatternAnalyzer(ledger=ledger)


@pytest.fixture
def processor(engine, analyzer, ledger):
    return PaymentProcessor(engine=engine, analyzer=analyzer, ledger=ledger)


@pytest.fixture
def client(monkeypatch):
    # Never call a real explanation service from tests
    monkeypatch.setattr(settings, "openai_api_key", None)
    with TestClient(app) as c:
        yield c


def parse_ts(timestamp: str) -> datetime:
    return datetime.fromisoformat(timestamp.replace("Z", "+00:00"))


def make_context(
    amount=50.0,
    currency="USD",
    previous_amounts=None,
    average=None,
    std_dev=0.0,
    merchant_category="retail",
    credit_card_limit=None,
    reporting_threshold=10000,
) -> AmountContext:
    previous_amounts = list(previous_amounts or [])
    if average is None:
        average = sum(previous_amounts) / len(previous_amounts) if previous_amounts else 0.0
    return AmountContext(
        amount=amount,
        currency=currency,
        previous_amounts=previous_amounts,
        user_average_amount=average,
        user_standard_deviation=std_dev,
        merchant_category=merchant_category,
        is_first_time_transaction=not previous_amounts,
        credit_card_limit=credit_card_limit,
        reporting_threshold=reporting_threshold,
    )


def make_data(
    amount=50.25,
    email="user@trusted.com",
    domain=None,
    currency="USD",
    source="card_1",
    timestamp="2026-02-22T10:00:00Z",
    context=None,
) -> FraudAnalysisData:
    if domain is None:
        domain = email.split("@", 1)[1] if "@" in email else ""
    return FraudAnalysisData(
        amount=amount,
        currency=currency,
        email=email,
        domain=domain,
        timestamp=parse_ts(timestamp),
        source=source,
        amount_context=context,
    )


def make_transaction(
    amount=100.0,
    email="alice@shop.com",
    provider=Provider.STRIPE,
    status=PaymentStatus.SUCCESS,
    risk_score=0.1,
    timestamp="2026-02-22T10:00:00Z",
    tx_id="tx-1",
) -> Transaction:
    return Transaction(
        id=tx_id,
        amount=amount,
        currency="USD",
        email=email,
        source="card_1",
        provider=provider,
        status=status,
        risk_score=risk_score,
        explanation="test",
        timestamp=parse_ts(timestamp),
        metadata=TransactionMetadata(triggered_rules=[], is_high_risk=False),
    )
