"""Unit tests for monthly summary aggregation"""

from datetime import date
from decimal import Decimal
from commission_engine.domain.commission import compute_commission
from commission_engine.domain.models import (
    AgreementStatus,
    Assignment,
    DealType,
    Payment,
    PaymentType,
    TeamRole,
)
from commission_engine.domain.rules import CommissionRules
from commission_engine.domain.summary import build_monthly_summary

RULES = CommissionRules()
FRONTEND = DealType(1, "referral_network_6_months", "Referral 6m", 1.0, False)
BACKEND = DealType(2, "service_upgrade", "Service Upgrade", 0.0, True)


def _row(id, amount, role, name, status=AgreementStatus.COMPLETED, deal_type=FRONTEND, deals=0, calculated=True):
    payment = Payment(
        id=id,
        amount=Decimal(amount),
        payment_date=date(2025, 5, id),
        payment_type=PaymentType.NEW_DEAL,
        deal_type_id=deal_type.id,
        status=status,
        assignment=Assignment(role, name),
    )
    calc = compute_commission(payment, deal_type, deals, RULES) if calculated else None
    return payment, deal_type.name, calc


def test_summary_totals_and_breakdown():
    rows = [
        _row(1, "1000", TeamRole.CLOSER, "Ana"),  # 80
        _row(2, "2000", TeamRole.CLOSER, "Ana"),  # 160
        _row(3, "1000", TeamRole.SETTER, "Bo"),  # 30
        _row(4, "500", TeamRole.SETTER, "Bo", status=AgreementStatus.PENDING),  # 0
        _row(5, "1000", TeamRole.CSM, "Maia", status=AgreementStatus.PENDING, deal_type=BACKEND),  # 30 stored, pending
        _row(6, "700", TeamRole.CLOSER, "Cy", calculated=False),
    ]

    summary = build_monthly_summary("2025-05", rows, RULES)

    assert summary.total_payments == 6
    assert summary.total_amount == Decimal("6200")
    assert summary.completed_payments == 4
    assert summary.completed_amount == Decimal("4700")
    assert summary.six_month_deals == Decimal("5.00")  # service upgrade counts 0
    assert summary.total_closer_commission == Decimal("240.00")
    assert summary.total_setter_commission == Decimal("30.00")
    assert summary.total_csm_commission == 0
    assert summary.total_commissions == Decimal("270.00")

    people = [(p.name, p.role, p.commission, p.deals) for p in summary.by_person]
    assert people[0] == ("Ana", TeamRole.CLOSER, Decimal("240.00"), 2)
    assert people[1:] == [("Bo", TeamRole.SETTER, Decimal("30.00"), 1)]


def test_empty_month():
    summary = build_monthly_summary("2025-05", [], RULES)
    assert summary.total_payments == 0
    assert summary.total_commissions == 0
    assert summary.by_person == []
