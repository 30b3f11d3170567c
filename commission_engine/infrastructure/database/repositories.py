"""Data access layer for payments, deal types and commission calculations"""

from dataclasses import asdict
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from commission_engine.domain.models import (
    AgreementStatus,
    Assignment,
    CommissionCalculation,
    DealType,
    InheritedRates,
    Payment,
    PaymentType,
    TeamRole,
)
from commission_engine.infrastructure.database.models import (
    CommissionCalculationRecord,
    DealTypeRecord,
    PaymentRecord,
)

# Assignment column holding each role's team member
ROLE_COLUMNS = {
    TeamRole.SETTER: PaymentRecord.setter_assigned,
    TeamRole.CLOSER: PaymentRecord.closer_assigned,
    TeamRole.CSM: PaymentRecord.assigned_csm,
}


def to_domain_payment(record: PaymentRecord) -> Payment:
    """Map an ORM row to the engine's Payment (raises InvalidAssignmentError)"""
    return Payment(
        id=record.id,
        amount=record.amount,
        payment_date=record.payment_date,
        payment_type=PaymentType(record.payment_type),
        deal_type_id=record.deal_type_id,
        status=AgreementStatus(record.service_agreement_status),
        assignment=Assignment.from_fields(
            record.setter_assigned,
            record.closer_assigned,
            record.assigned_csm,
        ),
        parent_payment_id=record.parent_payment_id,
    )


def to_domain_deal_type(record: DealTypeRecord) -> DealType:
    return DealType(
        id=record.id,
        name=record.name,
        display_name=record.display_name,
        conversion_rate=record.conversion_rate,
        is_backend=bool(record.is_backend),
    )


def to_domain_calculation(record: CommissionCalculationRecord) -> CommissionCalculation:
    return CommissionCalculation(
        payment_id=record.payment_id,
        month=record.month,
        deal_count_at_time=record.deal_count_at_time,
        six_month_equivalent=record.six_month_equivalent,
        tier_min_deals=record.tier_min_deals,
        tier_max_deals=record.tier_max_deals,
        closer_rate=record.closer_rate,
        setter_rate=record.setter_rate,
        closer_commission=record.closer_commission,
        setter_commission=record.setter_commission,
        csm_commission=record.csm_commission,
        is_paid=record.is_paid,
    )


class PaymentRepository:
    """Repository for payments"""

    def __init__(self, db: Session):
        self.db = db

    def get_payment(self, payment_id: int) -> Optional[PaymentRecord]:
        """Fetch payment with its deal type"""
        return (
            self.db.query(PaymentRecord)
            .options(joinedload(PaymentRecord.deal_type))
            .filter(PaymentRecord.id == payment_id)
            .first()
        )

    def list_for_period(self, start: date, end: date) -> List[PaymentRecord]:
        """Payments dated in [start, end], chronological with insertion order as tie-break"""
        return (
            self.db.query(PaymentRecord)
            .options(joinedload(PaymentRecord.deal_type), joinedload(PaymentRecord.commission))
            .filter(PaymentRecord.payment_date >= start, PaymentRecord.payment_date <= end)
            .order_by(PaymentRecord.payment_date.asc(), PaymentRecord.id.asc())
            .all()
        )

    def completed_deal_type_names(
        self,
        role: TeamRole,
        person_name: str,
        start: date,
        end: date,
    ) -> List[Optional[str]]:
        """Deal type names of a person's completed payments dated in [start, end] (names compared trimmed)"""
        rows = (
            self.db.query(DealTypeRecord.name)
            .select_from(PaymentRecord)
            .outerjoin(DealTypeRecord, PaymentRecord.deal_type_id == DealTypeRecord.id)
            .filter(
                func.trim(ROLE_COLUMNS[role]) == person_name.strip(),
                PaymentRecord.service_agreement_status == AgreementStatus.COMPLETED.value,
                PaymentRecord.payment_date >= start,
                PaymentRecord.payment_date <= end,
            )
            .all()
        )
        return [name for (name,) in rows]

    def delete_payment(self, payment_id: int) -> bool:
        """Hard-delete a payment; its commission calculation goes with it"""
        record = self.db.get(PaymentRecord, payment_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.flush()
        return True


class CommissionRepository:
    """Repository for commission calculations (one per payment)"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_payment(self, payment_id: int) -> Optional[CommissionCalculationRecord]:
        return (
            self.db.query(CommissionCalculationRecord)
            .filter(CommissionCalculationRecord.payment_id == payment_id)
            .first()
        )

    def get_inherited_rates(self, payment_id: int) -> Optional[InheritedRates]:
        """Rates and tier bounds stored for a (parent) payment, if it was ever calculated"""
        record = self.get_by_payment(payment_id)
        if record is None:
            return None
        return InheritedRates(
            closer_rate=record.closer_rate,
            setter_rate=record.setter_rate,
            tier_min_deals=record.tier_min_deals,
            tier_max_deals=record.tier_max_deals,
        )

    def upsert(self, calculation: CommissionCalculation) -> CommissionCalculationRecord:
        """Overwrite the payment's calculation if present, insert otherwise"""
        values = asdict(calculation)
        record = self.get_by_payment(calculation.payment_id)

        if record is None:
            record = CommissionCalculationRecord(**values)
            self.db.add(record)
        else:
            for column, value in values.items():
                setattr(record, column, value)

        self.db.flush()  # Surface constraint errors before commit
        return record
