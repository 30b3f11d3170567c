"""Six-month-deal equivalence for heterogeneous deal types"""

from types import MappingProxyType
from typing import Mapping, Optional

# How much of a canonical six-month deal one deal of each type counts as
DEFAULT_SIX_MONTH_EQUIVALENTS: Mapping[str, float] = MappingProxyType(
    {
        "google_ads": 1 / 3,  # 3 Google Ads = 1 six-month deal
        "referral_network_6_months": 1.0,
        "referral_network_3_months": 0.5,
        "referral_network_4_months": 0.5,
        "service_upgrade": 0.0,  # Backend deals never advance a tier
        # Legacy values from before deal_types existed
        "New Deal": 1.0,
        "Rebill": 1.0,
        "Manual Classification Needed": 1.0,
    }
)

# Unknown types are treated as a standard full deal
UNKNOWN_DEAL_EQUIVALENT = 1.0


def six_month_equivalent(
    deal_type_name: Optional[str],
    amount: float = 1,
    conversions: Mapping[str, float] = DEFAULT_SIX_MONTH_EQUIVALENTS,
) -> float:
    """
    Convert `amount` deals of a type into six-month-deal equivalents.

    Example:
        referral_network_3_months, amount=4 -> 2.0
        service_upgrade -> 0.0
        anything unrecognised -> 1.0 per deal
    """
    if deal_type_name is None:
        return UNKNOWN_DEAL_EQUIVALENT * amount
    return conversions.get(deal_type_name, UNKNOWN_DEAL_EQUIVALENT) * amount
