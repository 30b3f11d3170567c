"""Monthly commission summary aggregation"""

from decimal import Decimal
from typing import Dict, Iterable, Optional, Tuple

from commission_engine.domain.commission import round_2dp
from commission_engine.domain.models import (
    CommissionCalculation,
    MonthlySummary,
    Payment,
    PersonCommission,
    TeamRole,
)
from commission_engine.domain.rules import CommissionRules

SummaryRow = Tuple[Payment, Optional[str], Optional[CommissionCalculation]]

_EARNED_FIELD = {
    TeamRole.CLOSER: "closer_commission",
    TeamRole.SETTER: "setter_commission",
    TeamRole.CSM: "csm_commission",
}


def build_monthly_summary(month: str, rows: Iterable[SummaryRow], rules: CommissionRules) -> MonthlySummary:
    """
    Aggregate a month's payments and their stored calculations.

    Each row is (payment, deal type name, calculation or None).
    Six-month deals count every payment regardless of status; commission
    totals and the per-person breakdown only cover completed payments.
    """
    total_payments = 0
    total_amount = Decimal("0")
    completed_payments = 0
    completed_amount = Decimal("0")
    six_month_deals = 0.0
    totals = {role: Decimal("0") for role in TeamRole}
    by_person: Dict[Tuple[TeamRole, str], PersonCommission] = {}

    for payment, deal_type_name, calc in rows:
        total_payments += 1
        total_amount += payment.amount
        six_month_deals += rules.six_month_equivalent(deal_type_name)
        if not payment.is_completed:
            continue
        completed_payments += 1
        completed_amount += payment.amount

        if calc is None:
            continue

        for role, attr in _EARNED_FIELD.items():
            totals[role] += getattr(calc, attr)

        assignment = payment.assignment
        if assignment is None:
            continue
        earned = getattr(calc, _EARNED_FIELD[assignment.role])
        if earned <= 0:
            continue

        key = (assignment.role, assignment.name)
        person = by_person.setdefault(key, PersonCommission(name=assignment.name, role=assignment.role))
        person.commission += earned
        person.deals += 1

    return MonthlySummary(
        month=month,
        total_payments=total_payments,
        total_amount=total_amount,
        completed_payments=completed_payments,
        completed_amount=completed_amount,
        six_month_deals=round_2dp(six_month_deals),
        total_closer_commission=totals[TeamRole.CLOSER],
        total_setter_commission=totals[TeamRole.SETTER],
        total_csm_commission=totals[TeamRole.CSM],
        by_person=sorted(by_person.values(), key=lambda p: p.commission, reverse=True),
    )
