"""
Month-wide commission recalculation.

Payments are reprocessed one at a time, parents before rebills and
otherwise in date order, and each result is committed before the next
payment is priced. Never run payments of the same month in parallel.
"""

import logging
import threading
import time
from typing import Dict, Optional

from sqlalchemy.orm import Session

from commission_engine.domain.models import BatchResult
from commission_engine.domain.ordering import recalculation_order
from commission_engine.domain.rules import CommissionRules
from commission_engine.infrastructure.observability.logging import log_batch_outcome
from commission_engine.infrastructure.observability.metrics import (
    record_recalculation,
    recalculation_duration_histogram,
)
from commission_engine.services.commission_service import CommissionService
from commission_engine.utils.date_utils import month_bounds

logger = logging.getLogger(__name__)


class MonthLocks:
    """Process-local mutex per month so concurrent recalculations of one month serialize"""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[str, threading.Lock] = {}

    def for_month(self, month: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(month, threading.Lock())


month_locks = MonthLocks()


class MonthRecalculator:
    """Re-derives every commission in a month"""

    def __init__(
        self,
        db: Session,
        rules: CommissionRules | None = None,
        locks: MonthLocks | None = None,
    ):
        self.db = db
        self.service = CommissionService(db, rules)
        self.locks = locks or month_locks

    def recalculate(self, month: str, cancel_event: Optional[threading.Event] = None) -> BatchResult:
        """
        Recalculate all payments dated in `month` ("YYYY-MM").

        A failing payment is logged and skipped; the rest still run.
        `cancel_event` is checked between payments.

        Raises:
            InvalidMonthError: if `month` is malformed (before any work)
        """
        start, end = month_bounds(month)
        result = BatchResult(month=month)
        start_time = time.time()

        with self.locks.for_month(month), recalculation_duration_histogram.time():
            records = self.service.payments.list_for_period(start, end)
            payment_ids = [record.id for record in recalculation_order(records)]
            logger.info("Recalculating month", extra={"month": month, "payments": len(payment_ids)})

            for payment_id in payment_ids:
                if cancel_event is not None and cancel_event.is_set():
                    result.cancelled = True
                    logger.warning(
                        "Month recalculation cancelled",
                        extra={"month": month, "remaining": len(payment_ids) - len(result.processed) - len(result.failed)},
                    )
                    break

                try:
                    calculation = self.service.calculate_and_save_commission(payment_id)
                except Exception:
                    self.db.rollback()
                    logger.exception("Unexpected error recalculating payment", extra={"payment_id": payment_id, "month": month})
                    calculation = None

                if calculation is None:
                    result.failed.append(payment_id)
                else:
                    result.processed.append(payment_id)

        duration_ms = (time.time() - start_time) * 1000
        record_recalculation(len(result.failed), result.cancelled)
        log_batch_outcome(month, len(result.processed), len(result.failed), result.cancelled, duration_ms)
        return result


def recalculate_month_commissions(db: Session, month: str, rules: CommissionRules | None = None) -> bool:
    """Recalculate a month and report whether every payment succeeded"""
    return MonthRecalculator(db, rules).recalculate(month).success
