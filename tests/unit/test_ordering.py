"""Unit tests for recalculation ordering"""

from types import SimpleNamespace
from commission_engine.domain.ordering import recalculation_order


def _p(id, parent=None):
    return SimpleNamespace(id=id, parent_payment_id=parent)


def _ids(payments):
    return [p.id for p in payments]


def test_independent_payments_keep_chronological_order():
    payments = [_p(3), _p(1), _p(2)]
    assert _ids(recalculation_order(payments)) == [3, 1, 2]


def test_rebill_dated_before_parent_waits_for_parent():
    payments = [_p(10, parent=11), _p(5), _p(11), _p(6)]
    assert _ids(recalculation_order(payments)) == [5, 11, 10, 6]


def test_rebill_after_parent_is_untouched():
    payments = [_p(1), _p(2, parent=1), _p(3)]
    assert _ids(recalculation_order(payments)) == [1, 2, 3]


def test_parent_outside_batch_imposes_nothing():
    payments = [_p(20, parent=99), _p(21)]
    assert _ids(recalculation_order(payments)) == [20, 21]


def test_several_rebills_of_one_parent_keep_their_relative_order():
    payments = [_p(4, parent=9), _p(5, parent=9), _p(9)]
    assert _ids(recalculation_order(payments)) == [9, 4, 5]


def test_cycles_fall_back_to_date_order():
    payments = [_p(1, parent=2), _p(2, parent=1), _p(3)]
    assert _ids(recalculation_order(payments)) == [3, 1, 2]


def test_empty():
    assert recalculation_order([]) == []
