"""Routing decision table.

Maps a risk result to a (provider, status) pair:
  - high risk                 -> blocked / blocked
  - score < 0.2               -> stripe / success
  - 0.2 <= score < 0.4        -> paypal / success
  - 0.4 <= score < threshold  -> stripe / success
"""

from app.models import PaymentStatus, Provider, RiskResult, RouteDecision

STRIPE_MAX_SCORE = 0.2
PAYPAL_MAX_SCORE = 0.4


def route(result: RiskResult) -> RouteDecision:
    """Pick the downstream provider for a scored payment."""
    if result.is_high_risk:
        return RouteDecision(provider=Provider.BLOCKED, status=PaymentStatus.BLOCKED)
    if result.risk_score < STRIPE_MAX_SCORE:
        return RouteDecision(provider=Provider.STRIPE, status=PaymentStatus.SUCCESS)
    if result.risk_score < PAYPAL_MAX_SCORE:
        return RouteDecision(provider=Provider.PAYPAL, status=PaymentStatus.SUCCESS)
    return RouteDecision(provider=Provider.STRIPE, status=PaymentStatus.SUCCESS)
