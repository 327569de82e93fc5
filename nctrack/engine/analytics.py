"""Pure helpers behind the analytics bundle."""

from collections.abc import Iterable
from datetime import date
from decimal import ROUND_HALF_UP, Decimal

# (label, lower inclusive, upper exclusive); None means open-ended
CLOSURE_BUCKETS: list[tuple[str, int, int | None]] = [
    ("< 7 days", 0, 7),
    ("7-14 days", 7, 14),
    ("14-30 days", 14, 30),
    ("30-60 days", 30, 60),
    ("60+ days", 60, None),
]


def round_half_up(value: float, places: int = 0) -> float | int:
    """Round .5 away from zero; places=0 returns an int."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    return int(rounded) if places == 0 else float(rounded)


def days_between(start: date, end: date) -> int:
    return (end - start).days


def average_days(durations: Iterable[int]) -> float | None:
    """Mean of day counts to one decimal, or None when empty."""
    values = list(durations)
    if not values:
        return None
    return round_half_up(sum(values) / len(values), 1)


def sla_compliance_rate(pairs: Iterable[tuple[date, date]]) -> int | None:
    """
    Percentage of (closure_date, due_date) pairs closed on or before the due date.
    None when there is nothing to measure.
    """
    pairs = list(pairs)
    if not pairs:
        return None
    on_time = sum(1 for closed, due in pairs if closed <= due)
    return round_half_up(on_time * 100 / len(pairs))


def bucket_label(days: int) -> str:
    for label, lower, upper in CLOSURE_BUCKETS:
        if days >= lower and (upper is None or days < upper):
            return label
    # Negative durations (closed before reported) land in the first bucket.
    return CLOSURE_BUCKETS[0][0]


def closure_distribution(durations: Iterable[int]) -> list[dict]:
    """Count durations per bucket; all five buckets are always present, in order."""
    counts = {label: 0 for label, _, _ in CLOSURE_BUCKETS}
    for days in durations:
        counts[bucket_label(days)] += 1
    return [{"range": label, "count": counts[label]} for label, _, _ in CLOSURE_BUCKETS]
