"""Commission tier table and volume-to-tier lookup"""

from decimal import Decimal
from typing import Iterable, Iterator, List, Tuple

from commission_engine.domain.exceptions import TierTableError
from commission_engine.domain.models import CommissionTier


def _tier(min_deals: int, max_deals: int | None, closer: str, setter: str) -> CommissionTier:
    return CommissionTier(min_deals, max_deals, Decimal(closer), Decimal(setter))


DEFAULT_TIERS: Tuple[CommissionTier, ...] = (
    _tier(0, 12, "8", "3"),
    _tier(13, 19, "9", "4"),
    _tier(20, 25, "10", "5"),
    _tier(26, 30, "11", "6"),
    _tier(31, None, "12", "7"),
)


class TierTable:
    """
    Immutable, validated sequence of commission tiers.

    Requirements:
    - First band starts at 0
    - Each band starts at the previous band's max_deals + 1 (no gaps, no overlaps)
    - Only the last band is unbounded

    Raises:
        TierTableError: if the authored bands do not partition [0, inf)
    """

    def __init__(self, tiers: Iterable[CommissionTier] = DEFAULT_TIERS):
        self._tiers: Tuple[CommissionTier, ...] = tuple(tiers)
        self._validate()

    def _validate(self) -> None:
        if not self._tiers:
            raise TierTableError("Tier table is empty")
        if self._tiers[0].min_deals != 0:
            raise TierTableError(f"First tier must start at 0, starts at {self._tiers[0].min_deals}")

        for current, following in zip(self._tiers, self._tiers[1:]):
            if current.max_deals is None:
                raise TierTableError(f"Only the last tier may be unbounded (tier starting at {current.min_deals})")
            if current.max_deals < current.min_deals:
                raise TierTableError(f"Tier [{current.min_deals}, {current.max_deals}] is inverted")
            if following.min_deals != current.max_deals + 1:
                raise TierTableError(
                    f"Tier [{current.min_deals}, {current.max_deals}] is not followed by a tier "
                    f"starting at {current.max_deals + 1}"
                )

        if self._tiers[-1].max_deals is not None:
            raise TierTableError("Last tier must be unbounded")

    def resolve(self, deals: float) -> CommissionTier:
        """Return the tier whose band contains `deals`"""
        if deals < 0:
            raise ValueError(f"Deal count cannot be negative: {deals}")

        for tier in self._tiers:
            if tier.contains(deals):
                return tier

        # Unreachable for a validated table
        raise TierTableError(f"No tier matches {deals} deals")

    def as_list(self) -> List[CommissionTier]:
        return list(self._tiers)

    def __iter__(self) -> Iterator[CommissionTier]:
        return iter(self._tiers)

    def __len__(self) -> int:
        return len(self._tiers)
