"""
Single-payment commission calculation.

Gathers what the pure resolver needs (volume, deal type, parent rates),
runs it, and upserts the result keyed by payment id.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from commission_engine.config import settings
from commission_engine.domain.commission import compute_commission
from commission_engine.domain.exceptions import (
    DealTypeNotFoundError,
    InvalidAssignmentError,
    PaymentNotFoundError,
)
from commission_engine.domain.models import (
    CommissionCalculation,
    CommissionTier,
    DealType,
    MonthlySummary,
    Payment,
    TeamRole,
)
from commission_engine.domain.rules import CommissionRules, rules_from_settings
from commission_engine.domain.summary import build_monthly_summary
from commission_engine.infrastructure.database.repositories import (
    CommissionRepository,
    PaymentRepository,
    to_domain_calculation,
    to_domain_deal_type,
    to_domain_payment,
)
from commission_engine.infrastructure.observability.metrics import (
    calculation_counter,
    rebill_fallback_counter,
)
from commission_engine.utils.date_utils import month_bounds

logger = logging.getLogger(__name__)


def default_rules() -> CommissionRules:
    """Default tier table with the configured backend CSM rate"""
    return rules_from_settings(settings.backend_csm_rate_percent)


class CommissionService:
    """Calculates, stores and reports commissions against one database session"""

    def __init__(self, db: Session, rules: CommissionRules | None = None):
        self.db = db
        self.rules = rules or default_rules()
        self.payments = PaymentRepository(db)
        self.commissions = CommissionRepository(db)

    def cumulative_six_month_deals(
        self,
        month: str,
        as_of_date: date,
        person_name: Optional[str],
        role: Optional[TeamRole],
    ) -> float:
        """
        Six-month-equivalent volume of a person's completed deals this month.

        Counts payments dated from the first of `month` through `as_of_date`
        inclusive, so a completed payment counts toward its own tier.
        Pending payments never count. Returns 0 when nobody is assigned.
        """
        if not person_name or role is None:
            return 0.0

        start, _ = month_bounds(month)
        names = self.payments.completed_deal_type_names(role, person_name, start, as_of_date)
        return sum(self.rules.six_month_equivalent(name) for name in names)

    def resolve_commission(self, payment: Payment, deal_type: DealType) -> CommissionCalculation:
        """Price a payment without persisting anything"""
        assignment = payment.assignment
        deals = self.cumulative_six_month_deals(
            payment.month,
            payment.payment_date,
            assignment.name if assignment else None,
            assignment.role if assignment else None,
        )

        inherited = None
        if payment.inherits_parent_rates and not deal_type.is_backend:
            inherited = self.commissions.get_inherited_rates(payment.parent_payment_id)
            if inherited is None:
                rebill_fallback_counter.inc()
                logger.warning(
                    "Parent commission not found for rebill, using current tier rates",
                    extra={"payment_id": payment.id, "parent_payment_id": payment.parent_payment_id},
                )

        return compute_commission(payment, deal_type, deals, self.rules, inherited)

    def calculate_and_save_commission(self, payment_id: int) -> Optional[CommissionCalculation]:
        """
        Calculate a payment's commission and upsert it.

        Returns None (after logging) when the payment or its deal type is
        missing, its type or status is unreadable, its assignment is
        ambiguous, or the write is rejected.
        Nothing is retried.
        """
        try:
            record = self.payments.get_payment(payment_id)
            if record is None:
                raise PaymentNotFoundError(payment_id)
            if record.deal_type is None:
                raise DealTypeNotFoundError(payment_id, record.deal_type_id)

            payment = to_domain_payment(record)
            calculation = self.resolve_commission(payment, to_domain_deal_type(record.deal_type))
            self.commissions.upsert(calculation)
            self.db.commit()

        except (PaymentNotFoundError, DealTypeNotFoundError, ValueError) as e:
            # ValueError: payment_type or service_agreement_status outside the known values
            calculation_counter.labels(outcome="lookup_failed").inc()
            logger.error(f"Commission lookup failed: {e}", extra={"payment_id": payment_id})
            return None

        except InvalidAssignmentError as e:
            calculation_counter.labels(outcome="invalid_assignment").inc()
            logger.error(f"Cannot attribute payment: {e}", extra={"payment_id": payment_id})
            return None

        except SQLAlchemyError as e:
            self.db.rollback()
            calculation_counter.labels(outcome="persistence_failed").inc()
            logger.error(f"Error saving commission calculation: {e}", extra={"payment_id": payment_id})
            return None

        calculation_counter.labels(outcome="saved").inc()
        logger.info(
            "Commission calculated",
            extra={
                "payment_id": payment_id,
                "month": calculation.month,
                "tier_min_deals": calculation.tier_min_deals,
                "total_commission": str(calculation.total_commission),
            },
        )
        return calculation

    def get_commission(self, payment_id: int) -> Optional[CommissionCalculation]:
        """Stored calculation for a payment, if any"""
        record = self.commissions.get_by_payment(payment_id)
        return to_domain_calculation(record) if record else None

    def get_monthly_summary(self, month: str) -> MonthlySummary:
        """Payment and commission totals for a month, with a per-person breakdown"""
        start, end = month_bounds(month)
        rows = []
        for record in self.payments.list_for_period(start, end):
            try:
                payment = to_domain_payment(record)
            except (InvalidAssignmentError, ValueError) as e:
                logger.warning(f"Skipping payment in summary: {e}", extra={"payment_id": record.id})
                continue
            deal_type_name = record.deal_type.name if record.deal_type else None
            calculation = to_domain_calculation(record.commission) if record.commission else None
            rows.append((payment, deal_type_name, calculation))

        return build_monthly_summary(month, rows, self.rules)

    def get_commission_tiers(self) -> List[CommissionTier]:
        return self.rules.tiers.as_list()
