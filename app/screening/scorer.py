"""Score aggregation.

The score is the sum of the weights of every triggered rule, capped at
1.0 and rounded to two decimals. Weights are summed, never
short-circuited, so rule order only affects the order of the reported
rule names. A payment is high risk when its rounded score reaches the
configured threshold.
"""

from typing import Sequence

from app.models import RiskResult

MAX_SCORE = 1.0


def aggregate_results(
    triggered: Sequence[tuple[str, float]],
    threshold: float,
) -> RiskResult:
    """Combine (rule name, weight) pairs of triggered rules into a RiskResult.

    Args:
        triggered: Triggered rules in evaluation order.
        threshold: Score at or above which the payment is high risk.
    """
    total_score = 0.0
    triggered_rules: list[str] = []

    for name, weight in triggered:
        total_score += weight
        triggered_rules.append(name)

    risk_score = round(min(total_score, MAX_SCORE), 2)

    return RiskResult(
        risk_score=risk_score,
        triggered_rules=triggered_rules,
        is_high_risk=risk_score >= threshold,
    )
