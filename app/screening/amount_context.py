"""Amount pattern analysis.

Builds the AmountContext the history and limit rules score against:
the payer's previous amounts from the ledger (oldest first), their mean
and population standard deviation, plus merchant category, credit limit
and currency reporting threshold from static defaults.
"""

import statistics
from typing import Mapping, Optional

from app.models import AmountContext
from app.storage.memory import TransactionLedger

DEFAULT_REPORTING_THRESHOLD = 10_000

REPORTING_THRESHOLDS: dict[str, float] = {
    "USD": 10_000,
    "EUR": 10_000,
    "GBP": 10_000,
    "CAD": 10_000,
    "AUD": 10_000,
}


class AmountPatternAnalyzer:
    """Derives amount context for a payer from ledger history."""

    def __init__(
        self,
        ledger: TransactionLedger,
        merchant_category: str = "retail",
        credit_card_limit: Optional[float] = 5000,
        reporting_thresholds: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.ledger = ledger
        self.merchant_category = merchant_category
        # A non-positive limit means no card limit is known
        self.credit_card_limit = credit_card_limit if credit_card_limit and credit_card_limit > 0 else None
        self.reporting_thresholds = dict(reporting_thresholds or REPORTING_THRESHOLDS)

    def build(self, user_email: str, current_amount: float, current_currency: str) -> AmountContext:
        """Build the amount context for a payment about to be scored."""
        previous_amounts = [t.amount for t in self.ledger.by_email(user_email)]

        if previous_amounts:
            average = statistics.fmean(previous_amounts)
            std_dev = statistics.pstdev(previous_amounts, mu=average)
        else:
            average = 0.0
            std_dev = 0.0

        return AmountContext(
            amount=current_amount,
            currency=current_currency,
            previous_amounts=previous_amounts,
            user_average_amount=average,
            user_standard_deviation=std_dev,
            merchant_category=self.merchant_category,
            is_first_time_transaction=not previous_amounts,
            credit_card_limit=self.credit_card_limit,
            reporting_threshold=self.reporting_threshold(current_currency),
        )

    def reporting_threshold(self, currency: str) -> float:
        return self.reporting_thresholds.get(currency.upper(), DEFAULT_REPORTING_THRESHOLD)
