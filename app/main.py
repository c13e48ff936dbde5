"""Payment Risk Routing API.

Scores incoming payments for fraud risk, routes them to a payment
provider (or blocks them), explains each decision and keeps a
queryable ledger of past decisions.

Run with:
    python3 -m uvicorn app.main:app --host 0.0.0.0 --port 8000
"""

import logging
from typing import Dict, Optional

from fastapi import FastAPI

from app.config import settings
from app.observability import setup_logging
from app.routes import payments, rules, transactions
from app.screening.amount_context import AmountPatternAnalyzer
from app.screening.engine import RiskEngine
from app.screening.explainer import CachedExplainer, ChatCompletionExplainer, Explainer
from app.screening.processor import PaymentProcessor
from app.storage.memory import TransactionLedger

setup_logging(settings.log_level, settings.service_name)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Payment Risk Routing API",
    description=(
        "Rule-based fraud scoring and provider routing for payments. "
        "Checks amounts, email domains and payer history, then routes "
        "to Stripe or PayPal, or blocks the payment."
    ),
    version="1.0.0",
)


def build_explainer() -> Optional[Explainer]:
    """Explanation service client, or None when no API key is configured."""
    if not settings.openai_api_key:
        logger.info("No explanation API key configured; using fallback explanations")
        return None
    return CachedExplainer(
        ChatCompletionExplainer(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            model=settings.openai_model,
            timeout=settings.llm_timeout_seconds,
        ),
        max_size=settings.explanation_cache_size,
    )


@app.on_event("startup")
async def startup() -> None:
    """Initialize the ledger, risk engine and payment pipeline."""
    ledger = TransactionLedger()
    engine = RiskEngine(config=settings.fraud_config())
    analyzer = AmountPatternAnalyzer(
        ledger=ledger,
        merchant_category=settings.default_merchant_category,
        credit_card_limit=settings.default_credit_limit,
    )
    processor = PaymentProcessor(
        engine=engine,
        analyzer=analyzer,
        ledger=ledger,
        explainer=build_explainer(),
    )

    # Attach to app state for dependency injection in routes
    app.state.ledger = ledger
    app.state.engine = engine
    app.state.processor = processor
    logger.info("Payment risk routing service started", extra={"rules": len(engine.rules)})


# Mount all API routers
app.include_router(payments.router)
app.include_router(transactions.router)
app.include_router(rules.router)


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy", "service": settings.service_name}
