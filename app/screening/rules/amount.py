"""Transaction amount shape rules.

Flag amounts that are large in absolute terms or that look hand-picked:
exact common denominations and whole or near-whole cent values are
typical of manually keyed fraud and of card testing, while organic
purchases usually land on arbitrary cents.
"""

HIGH_VALUE_AMOUNT = 1000

ROUND_NUMBER_AMOUNTS = frozenset(
    {100, 500, 1000, 2000, 5000, 10000, 20000, 50000, 100000}
)

ODD_CENT_VALUES = frozenset({0, 1, 99})


def is_large_amount(amount: float, threshold: float = 5000) -> bool:
    return amount > threshold


def is_high_value(amount: float) -> bool:
    return amount > HIGH_VALUE_AMOUNT


def is_round_number(amount: float) -> bool:
    """Exact match against the common denominations (100.50 is not round)."""
    return amount in ROUND_NUMBER_AMOUNTS


def cents_component(amount: float) -> int:
    """Cents of the amount, e.g. 12.99 -> 99 and 100.00 -> 0."""
    return round((amount % 1) * 100)


def has_odd_cents(amount: float) -> bool:
    return cents_component(amount) in ODD_CENT_VALUES
