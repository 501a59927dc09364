"""
Descriptive market statistics over a comparable set.
"""

from dataclasses import asdict, dataclass
from typing import List, Sequence

from .models import Comparable, round_half_up


@dataclass(frozen=True)
class MarketStatistics:
    """Aggregate statistics for a set of comparables."""
    avg_price: int = 0
    median_price: int = 0
    avg_price_per_m2: int = 0
    median_price_per_m2: int = 0
    avg_days_on_market: int = 0
    count: int = 0

    def to_dict(self) -> dict:
        return asdict(self)


def upper_median(values: Sequence[int]) -> int:
    """
    Middle element of the sorted values.

    Even-length inputs take the upper-middle element rather than the
    mean of the two middle elements.
    """
    ordered = sorted(values)
    return ordered[len(ordered) // 2]


def stats(comparables: List[Comparable]) -> MarketStatistics:
    """
    Calculate market statistics from comparables.

    Args:
        comparables: Comparable sales (enriched or not)

    Returns:
        MarketStatistics (all zeros for an empty set)
    """
    if not comparables:
        return MarketStatistics()

    prices = [c.sale_price for c in comparables]
    prices_per_m2 = [c.price_per_m2 for c in comparables]
    n = len(comparables)

    return MarketStatistics(
        avg_price=round_half_up(sum(prices) / n),
        median_price=upper_median(prices),
        avg_price_per_m2=round_half_up(sum(prices_per_m2) / n),
        median_price_per_m2=upper_median(prices_per_m2),
        avg_days_on_market=round_half_up(sum(c.days_on_market for c in comparables) / n),
        count=n,
    )
