"""Core risk engine.

Evaluates every rule of the rule table in registration order against a
payment and sums the weights of the rules that fire. The order of the
table is observable: it is the order of `triggered_rules`. Rapid-fire
detection is appended after the default table only when enabled in
the config.

Rules that need amount context never fire when the payment carries
none. Rules read the engine's current config when evaluated, so a
config update applies to the next payment without rebuilding anything.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from app.models import AmountContext, FraudAnalysisData, FraudConfig, RiskResult
from app.screening.rules import amount, history, identity, limits
from app.screening.rules.velocity import RapidFireTracker, rapid_fire_key
from app.screening.scorer import aggregate_results

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FraudRule:
    """A named, weighted predicate over a payment."""
    name: str
    weight: float
    condition: Callable[[FraudAnalysisData], bool]
    description: str


def _with_context(
    check: Callable[[FraudAnalysisData, AmountContext], bool],
) -> Callable[[FraudAnalysisData], bool]:
    """Wrap a context rule so it is a no-op when no amount context is present."""

    def condition(data: FraudAnalysisData) -> bool:
        if data.amount_context is None:
            return False
        return check(data, data.amount_context)

    return condition


class RiskEngine:
    """Scores payments against the weighted rule table."""

    def __init__(
        self,
        config: Optional[FraudConfig] = None,
        tracker: Optional[RapidFireTracker] = None,
    ) -> None:
        self.config = config or FraudConfig()
        self.tracker = tracker or RapidFireTracker()
        self._default_rules = self._build_default_rules()
        self._rapid_fire_rule = FraudRule(
            name="rapid_fire_transactions",
            weight=0.3,
            condition=self._is_rapid_fire,
            description="Multiple transactions in a short time frame",
        )

    @property
    def rules(self) -> list[FraudRule]:
        """The active rule table, in evaluation order."""
        if self.config.rapid_fire_enabled:
            return [*self._default_rules, self._rapid_fire_rule]
        return list(self._default_rules)

    def analyze_risk(self, data: FraudAnalysisData) -> RiskResult:
        """Evaluate every active rule and aggregate the triggered weights."""
        config = self.config
        triggered = [
            (rule.name, rule.weight)
            for rule in self.rules
            if rule.condition(data)
        ]
        result = aggregate_results(triggered, threshold=config.threshold)
        logger.debug(
            "Risk analysed",
            extra={
                "risk_score": result.risk_score,
                "triggered_rules": result.triggered_rules,
                "is_high_risk": result.is_high_risk,
            },
        )
        return result

    def get_config(self) -> FraudConfig:
        return self.config

    def update_config(self, **changes: Any) -> FraudConfig:
        """Merge a partial update into the current config.

        Unknown keys are rejected; values are validated like a fresh config.
        """
        unknown = set(changes) - set(FraudConfig.model_fields)
        if unknown:
            raise ValueError(f"Unknown config fields: {', '.join(sorted(unknown))}")
        merged = self.config.model_dump()
        merged.update(changes)
        self.config = FraudConfig.model_validate(merged)
        logger.info("Fraud config updated", extra={"fields": sorted(changes)})
        return self.config

    def _is_rapid_fire(self, data: FraudAnalysisData) -> bool:
        return self.tracker.is_rapid_fire(
            rapid_fire_key(data.source, data.domain),
            data.timestamp,
            self.config.rapid_fire_window_seconds,
        )

    def _build_default_rules(self) -> list[FraudRule]:
        return [
            FraudRule(
                name="large_amount",
                weight=0.3,
                condition=lambda data: amount.is_large_amount(
                    data.amount, self.config.large_amount_threshold
                ),
                description="Transaction amount exceeds large amount threshold",
            ),
            FraudRule(
                name="suspicious_domain",
                weight=0.4,
                condition=lambda data: identity.is_suspicious_domain(
                    data.domain, self.config.suspicious_domains
                ),
                description="Email domain is flagged as suspicious",
            ),
            FraudRule(
                name="test_domain",
                weight=0.2,
                condition=lambda data: identity.is_test_domain(data.domain),
                description="Email domain contains test or example keywords",
            ),
            FraudRule(
                name="high_value_currency",
                weight=0.1,
                condition=lambda data: amount.is_high_value(data.amount),
                description="High value transaction",
            ),
            FraudRule(
                name="suspicious_email_pattern",
                weight=0.2,
                condition=lambda data: identity.has_suspicious_email_pattern(data.email),
                description="Email address has suspicious patterns",
            ),
            FraudRule(
                name="round_number_amount",
                weight=0.15,
                condition=lambda data: amount.is_round_number(data.amount),
                description="Amount is an exact common denomination",
            ),
            FraudRule(
                name="gradual_amount_increase",
                weight=0.25,
                condition=_with_context(
                    lambda data, ctx: history.is_gradual_increase(
                        data.amount, ctx.previous_amounts
                    )
                ),
                description="Recent amounts keep increasing step by step",
            ),
            FraudRule(
                name="under_reporting_threshold",
                weight=0.3,
                condition=_with_context(
                    lambda data, ctx: limits.is_under_reporting_threshold(
                        data.amount, ctx.reporting_threshold
                    )
                ),
                description="Amount sits just below the reporting threshold",
            ),
            FraudRule(
                name="micro_to_large_transaction",
                weight=0.2,
                condition=_with_context(
                    lambda data, ctx: history.is_micro_to_large(
                        data.amount, ctx.previous_amounts
                    )
                ),
                description="Micro transaction followed by a large amount",
            ),
            FraudRule(
                name="exceeds_historical_average",
                weight=0.35,
                condition=_with_context(
                    lambda data, ctx: history.exceeds_historical_average(
                        data.amount,
                        ctx.user_average_amount,
                        ctx.user_standard_deviation,
                    )
                ),
                description="Amount is more than 3 standard deviations above the user's average",
            ),
            FraudRule(
                name="first_time_high_value",
                weight=0.25,
                condition=_with_context(
                    lambda data, ctx: history.is_first_time_high_value(
                        data.amount, ctx.is_first_time_transaction
                    )
                ),
                description="First transaction from this user with a high amount",
            ),
            FraudRule(
                name="inconsistent_merchant_category",
                weight=0.2,
                condition=_with_context(
                    lambda data, ctx: limits.is_inconsistent_with_category(
                        data.amount, ctx.merchant_category
                    )
                ),
                description="Amount is outside the merchant category's usual range",
            ),
            FraudRule(
                name="maximum_credit_limit",
                weight=0.4,
                condition=_with_context(
                    lambda data, ctx: limits.is_near_credit_limit(
                        data.amount, ctx.credit_card_limit
                    )
                ),
                description="Amount is at or near the credit card limit",
            ),
            FraudRule(
                name="odd_cent_patterns",
                weight=0.1,
                condition=lambda data: amount.has_odd_cents(data.amount),
                description="Amount ends in .00, .01 or .99",
            ),
            FraudRule(
                name="sequential_amount_testing",
                weight=0.3,
                condition=_with_context(
                    lambda data, ctx: history.is_sequential_testing(
                        data.amount, ctx.previous_amounts
                    )
                ),
                description="Near-identical amounts tried in sequence",
            ),
        ]
