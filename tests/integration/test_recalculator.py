"""Integration tests for month-wide recalculation"""

import threading
import pytest
from dataclasses import asdict
from datetime import date
from decimal import Decimal
from commission_engine.domain.exceptions import InvalidMonthError
from commission_engine.infrastructure.database.models import CommissionCalculationRecord
from commission_engine.infrastructure.database.repositories import CommissionRepository, to_domain_calculation
from commission_engine.services.commission_service import CommissionService
from commission_engine.services.recalculator import (
    MonthLocks,
    MonthRecalculator,
    recalculate_month_commissions,
)


def _stored(db):
    rows = db.query(CommissionCalculationRecord).order_by(CommissionCalculationRecord.payment_id).all()
    return [(row.id, asdict(to_domain_calculation(row))) for row in rows]


def test_recalculates_every_payment_in_month(db, add_payment):
    ids = [
        add_payment(date(2025, 4, 1), closer="Ana").id,
        add_payment(date(2025, 4, 15), setter="Bo").id,
        add_payment(date(2025, 4, 30), csm="Maia", deal_type="service_upgrade").id,
    ]
    outside = add_payment(date(2025, 5, 1), closer="Ana").id

    result = MonthRecalculator(db).recalculate("2025-04")

    assert result.success
    assert result.processed == ids
    assert CommissionRepository(db).get_by_payment(outside) is None
    assert len(_stored(db)) == 3


def test_recalculation_is_idempotent(db, add_payment):
    parent = add_payment(date(2025, 6, 2), closer="Ana")
    for day in range(3, 20):
        add_payment(date(2025, 6, day), closer="Ana", deal_type="google_ads")
    add_payment(date(2025, 6, 21), closer="Ana", payment_type="Rebill", parent=parent)
    add_payment(date(2025, 6, 22), setter="Bo", status="pending")

    assert recalculate_month_commissions(db, "2025-06")
    first = _stored(db)
    assert recalculate_month_commissions(db, "2025-06")
    second = _stored(db)

    assert first == second


def test_status_change_picked_up_on_recalculation(db, add_payment):
    payment = add_payment(date(2025, 4, 10), closer="Ana", status="pending")
    MonthRecalculator(db).recalculate("2025-04")
    assert CommissionService(db).get_commission(payment.id).closer_commission == 0

    payment.service_agreement_status = "completed"
    db.commit()
    MonthRecalculator(db).recalculate("2025-04")

    assert CommissionService(db).get_commission(payment.id).closer_commission == Decimal("400.00")


def test_rebill_processed_after_parent_even_when_dated_earlier(db, add_payment):
    # Rebill row exists first and is dated first, but must wait for its parent
    rebill = add_payment(date(2025, 4, 2), closer="Ana", payment_type="Rebill")
    parent = add_payment(date(2025, 4, 5), closer="Ana")
    rebill.parent_payment_id = parent.id
    db.commit()

    result = MonthRecalculator(db).recalculate("2025-04")

    assert result.processed == [parent.id, rebill.id]
    calc = CommissionService(db).get_commission(rebill.id)
    assert calc.closer_rate == Decimal("8.00")


def test_failures_do_not_stop_the_batch(db, add_payment):
    good_first = add_payment(date(2025, 4, 1), closer="Ana").id
    bad = add_payment(date(2025, 4, 2), closer="Ana", setter="Bo").id
    no_deal_type = add_payment(date(2025, 4, 3), closer="Ana", deal_type=None).id
    good_last = add_payment(date(2025, 4, 4), closer="Ana").id

    result = MonthRecalculator(db).recalculate("2025-04")

    assert not result.success
    assert result.failed == [bad, no_deal_type]
    assert result.processed == [good_first, good_last]
    assert not recalculate_month_commissions(db, "2025-04")


def test_unexpected_error_is_contained(db, add_payment, monkeypatch):
    first = add_payment(date(2025, 4, 1), closer="Ana").id
    second = add_payment(date(2025, 4, 2), closer="Ana").id
    original = CommissionService.calculate_and_save_commission

    def flaky(self, payment_id):
        if payment_id == first:
            raise RuntimeError("connection reset")
        return original(self, payment_id)

    monkeypatch.setattr(CommissionService, "calculate_and_save_commission", flaky)

    result = MonthRecalculator(db).recalculate("2025-04")

    assert result.failed == [first]
    assert result.processed == [second]


def test_cancellation_between_payments(db, add_payment):
    add_payment(date(2025, 4, 1), closer="Ana")
    cancel = threading.Event()
    cancel.set()

    result = MonthRecalculator(db).recalculate("2025-04", cancel_event=cancel)

    assert result.cancelled
    assert not result.success
    assert result.processed == []
    assert _stored(db) == []


def test_empty_month_succeeds(db, deal_types):
    assert recalculate_month_commissions(db, "2025-02")


def test_invalid_month_rejected_before_work(db):
    with pytest.raises(InvalidMonthError):
        MonthRecalculator(db).recalculate("2025-13")


def test_month_locks_are_shared_per_month():
    locks = MonthLocks()
    assert locks.for_month("2025-04") is locks.for_month("2025-04")
    assert locks.for_month("2025-04") is not locks.for_month("2025-05")


def test_month_lock_held_during_recalculation(db, add_payment, monkeypatch):
    add_payment(date(2025, 4, 1), closer="Ana")
    locks = MonthLocks()
    seen = []
    original = CommissionService.calculate_and_save_commission

    def spy(self, payment_id):
        seen.append(locks.for_month("2025-04").locked())
        return original(self, payment_id)

    monkeypatch.setattr(CommissionService, "calculate_and_save_commission", spy)

    MonthRecalculator(db, locks=locks).recalculate("2025-04")

    assert seen == [True]
    assert not locks.for_month("2025-04").locked()
