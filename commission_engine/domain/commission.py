"""Commission resolver - prices one payment given its volume tier and deal type"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from commission_engine.domain.models import (
    CommissionCalculation,
    DealType,
    InheritedRates,
    Payment,
    TeamRole,
)
from commission_engine.domain.rules import CommissionRules

_CENTS = Decimal("0.01")
_ZERO = Decimal("0.00")


def round_2dp(value: Union[Decimal, float, int]) -> Decimal:
    """Round half-up to 2 decimal places (floats go through str to avoid binary noise)"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def _percent_of(amount: Decimal, rate: Decimal) -> Decimal:
    return round_2dp(amount * rate / Decimal(100))


def compute_commission(
    payment: Payment,
    deal_type: DealType,
    deal_count: float,
    rules: CommissionRules,
    inherited: Optional[InheritedRates] = None,
) -> CommissionCalculation:
    """
    Split a payment's commission across closer / setter / CSM.

    Rules:
    - Backend deals: only a CSM earns, at the flat backend rate, whatever the status or tier
    - Frontend deals: nothing is paid until the service agreement is completed;
      closer earns the closer rate, setter and CSM earn the setter rate
    - Rebills with a parent use the parent's stored rates and tier bounds (`inherited`);
      pass None to fall back to the rebill's own tier

    The stored rates and bounds are the ones actually applied, so the record
    doubles as an audit trail.
    """
    # Look up the tier on the stored (rounded) volume so record and tier agree
    deal_count_at_time = round_2dp(deal_count)
    tier = rules.resolve_tier(deal_count_at_time)
    if not deal_type.is_backend and payment.inherits_parent_rates and inherited is not None:
        tier = inherited.as_tier()

    amount = payment.amount if isinstance(payment.amount, Decimal) else Decimal(str(payment.amount))
    earned = {TeamRole.CLOSER: _ZERO, TeamRole.SETTER: _ZERO, TeamRole.CSM: _ZERO}
    assignment = payment.assignment

    if assignment is not None:
        if deal_type.is_backend:
            if assignment.role == TeamRole.CSM:
                earned[TeamRole.CSM] = _percent_of(amount, rules.backend_csm_rate)
        elif payment.is_completed:
            earned[assignment.role] = _percent_of(amount, tier.rate_for(assignment.role))

    return CommissionCalculation(
        payment_id=payment.id,
        month=payment.month,
        deal_count_at_time=deal_count_at_time,
        six_month_equivalent=round_2dp(rules.six_month_equivalent(deal_type.name)),
        tier_min_deals=tier.min_deals,
        tier_max_deals=tier.max_deals,
        closer_rate=round_2dp(tier.closer_rate),
        setter_rate=round_2dp(tier.setter_rate),
        closer_commission=earned[TeamRole.CLOSER],
        setter_commission=earned[TeamRole.SETTER],
        csm_commission=earned[TeamRole.CSM],
        is_paid=False,
    )


def validate_calculation(payment: Payment, deal_type: DealType, calculation: CommissionCalculation) -> bool:
    """Sanity-check a stored calculation against the payment it belongs to"""
    amounts = (calculation.closer_commission, calculation.setter_commission, calculation.csm_commission)
    if any(a < 0 for a in amounts):
        return False

    if deal_type.is_backend:
        return calculation.closer_commission == 0 and calculation.setter_commission == 0

    # Frontend deals pay nothing before the agreement is completed
    if not payment.is_completed:
        return all(a == 0 for a in amounts)

    return True
