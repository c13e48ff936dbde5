"""Reference limit rules.

Check the amount against externally known limits: the regulatory
reporting threshold for the currency, the expected price band of the
merchant category, and the payer's credit limit. Amounts hugging a
limit from below are a strong structuring signal.
"""

from typing import Optional

# (min, max) expected amount per merchant category
MERCHANT_CATEGORY_RANGES: dict[str, tuple[float, float]] = {
    "grocery": (10, 200),
    "gas": (20, 100),
    "restaurant": (5, 150),
    "retail": (10, 1000),
    "electronics": (50, 5000),
    "jewelry": (100, 10000),
    "travel": (100, 5000),
    "utilities": (20, 500),
    "subscription": (5, 100),
    "digital_goods": (1, 200),
}

NEAR_LIMIT_RATIO = 0.99


def is_under_reporting_threshold(amount: float, reporting_threshold: float) -> bool:
    """Within 1% below the reporting threshold, but not at it."""
    return reporting_threshold * NEAR_LIMIT_RATIO <= amount < reporting_threshold


def is_inconsistent_with_category(amount: float, merchant_category: str) -> bool:
    """Outside the category's usual band. Unknown categories never match."""
    band = MERCHANT_CATEGORY_RANGES.get(merchant_category)
    if band is None:
        return False
    low, high = band
    return amount < low or amount > high


def is_near_credit_limit(amount: float, credit_limit: Optional[float]) -> bool:
    if credit_limit is None:
        return False
    return amount >= credit_limit * NEAR_LIMIT_RATIO
