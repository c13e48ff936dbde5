"""Payer history rules.

Compare the current amount with the payer's previous amounts (oldest
first). These catch the classic escalation patterns:

  - gradual increase: probing how far a stolen card can be pushed
  - micro to large: a tiny verification charge followed by a real one
  - sequential testing: near-identical amounts tried one after another
  - historical outlier: far above the payer's usual spend
  - first-time high value: no history at all, but a large ticket

Only the most recent entries are considered for the sequence rules.
"""

from typing import Sequence

RECENT_WINDOW = 5
MICRO_AMOUNT = 10
LARGE_AFTER_MICRO = 100
FIRST_TIME_HIGH_VALUE = 500
SEQUENTIAL_TOLERANCE = 1.0


def _recent_pairs(previous_amounts: Sequence[float]) -> list[tuple[float, float]]:
    recent = list(previous_amounts[-RECENT_WINDOW:])
    return list(zip(recent, recent[1:]))


def is_gradual_increase(amount: float, previous_amounts: Sequence[float]) -> bool:
    """At least 3 rising steps in the recent window, and still rising."""
    if not previous_amounts:
        return False
    rising = sum(1 for prev, curr in _recent_pairs(previous_amounts) if curr > prev)
    return rising >= 3 and amount > previous_amounts[-1]


def is_micro_to_large(amount: float, previous_amounts: Sequence[float]) -> bool:
    if not previous_amounts:
        return False
    return previous_amounts[-1] < MICRO_AMOUNT and amount > LARGE_AFTER_MICRO


def exceeds_historical_average(amount: float, average: float, std_dev: float) -> bool:
    return amount > average + 3 * std_dev


def is_first_time_high_value(amount: float, is_first_time: bool) -> bool:
    return is_first_time and amount > FIRST_TIME_HIGH_VALUE


def is_sequential_testing(amount: float, previous_amounts: Sequence[float]) -> bool:
    """Recent amounts step by at most 1.0, and so does the current one."""
    if not previous_amounts:
        return False
    close_steps = sum(
        1
        for prev, curr in _recent_pairs(previous_amounts)
        if abs(curr - prev) <= SEQUENTIAL_TOLERANCE
    )
    return (
        close_steps >= 2
        and abs(amount - previous_amounts[-1]) <= SEQUENTIAL_TOLERANCE
    )
