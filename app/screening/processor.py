"""Payment processing pipeline.

For each payment:
  1. Extract the email domain
  2. Build amount context from the payer's ledger history
  3. Score the payment with the risk engine
  4. Route it (stripe, paypal or blocked)
  5. Ask the explainer for a human-readable explanation
  6. Record the decision in the ledger

The explanation call is the only step that awaits. If it fails, the
deterministic fallback text is used and the payment still completes.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from app.models import (
    FraudAnalysisData,
    PaymentRequest,
    PaymentResponse,
    PaymentStatus,
    Provider,
    RiskResult,
    TransactionMetadata,
)
from app.observability import log_decision
from app.screening.amount_context import AmountPatternAnalyzer
from app.screening.engine import RiskEngine
from app.screening.explainer import Explainer, fallback_explanation
from app.screening.routing import route
from app.screening.rules.identity import extract_domain
from app.storage.memory import TransactionLedger

logger = logging.getLogger(__name__)


class PaymentProcessor:
    """Orchestrates scoring, routing, explanation and recording of payments."""

    def __init__(
        self,
        engine: RiskEngine,
        analyzer: AmountPatternAnalyzer,
        ledger: TransactionLedger,
        explainer: Optional[Explainer] = None,
    ) -> None:
        self.engine = engine
        self.analyzer = analyzer
        self.ledger = ledger
        self.explainer = explainer

    async def process(self, request: PaymentRequest) -> PaymentResponse:
        """Score, route and record a single payment."""
        data = FraudAnalysisData(
            amount=request.amount,
            currency=request.currency,
            email=request.email,
            domain=extract_domain(request.email),
            timestamp=datetime.now(timezone.utc),
            source=request.source,
            amount_context=self.analyzer.build(request.email, request.amount, request.currency),
        )

        result = self.engine.analyze_risk(data)
        decision = route(result)

        explanation = await self._explain(data, result, decision.provider, decision.status)

        transaction = self.ledger.create(
            amount=request.amount,
            currency=request.currency,
            email=request.email,
            source=request.source,
            provider=decision.provider,
            status=decision.status,
            risk_score=result.risk_score,
            explanation=explanation,
            metadata=TransactionMetadata(
                triggered_rules=result.triggered_rules,
                is_high_risk=result.is_high_risk,
            ),
        )
        self.ledger.append(transaction)
        log_decision(transaction)

        return PaymentResponse(
            transaction_id=transaction.id,
            provider=transaction.provider,
            status=transaction.status,
            risk_score=transaction.risk_score,
            explanation=transaction.explanation,
            timestamp=transaction.timestamp,
        )

    async def _explain(
        self,
        data: FraudAnalysisData,
        result: RiskResult,
        provider: Provider,
        status: PaymentStatus,
    ) -> str:
        if self.explainer is None:
            return fallback_explanation(result, provider, status)
        try:
            return await self.explainer.explain(data, result, provider, status)
        except Exception as e:
            logger.warning(
                "Explanation unavailable, using fallback",
                extra={"error": str(e)},
                exc_info=True,
            )
            return fallback_explanation(result, provider, status)
