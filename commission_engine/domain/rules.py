"""Injected commission configuration: tier table, deal equivalences and flat rates"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping, Optional

from commission_engine.domain.deal_types import DEFAULT_SIX_MONTH_EQUIVALENTS, six_month_equivalent
from commission_engine.domain.models import CommissionTier
from commission_engine.domain.tiers import TierTable


@dataclass(frozen=True)
class CommissionRules:
    """Everything the engine needs to price a payment, passed in rather than imported"""

    tiers: TierTable = field(default_factory=TierTable)
    deal_equivalents: Mapping[str, float] = field(default_factory=lambda: DEFAULT_SIX_MONTH_EQUIVALENTS)
    backend_csm_rate: Decimal = Decimal("3")  # percent

    def resolve_tier(self, deals: float) -> CommissionTier:
        return self.tiers.resolve(deals)

    def six_month_equivalent(self, deal_type_name: Optional[str], amount: float = 1) -> float:
        return six_month_equivalent(deal_type_name, amount, self.deal_equivalents)


def rules_from_settings(backend_csm_rate_percent: float) -> CommissionRules:
    """Build rules with the default tiers and a configured backend CSM rate"""
    return CommissionRules(backend_csm_rate=Decimal(str(backend_csm_rate_percent)))
