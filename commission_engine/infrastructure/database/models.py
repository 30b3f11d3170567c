"""SQLAlchemy ORM models for payments, deal types and commission calculations"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class DealTypeRecord(Base):
    """Admin-managed deal type reference data"""

    __tablename__ = "deal_types"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(64), nullable=False, unique=True)
    display_name = Column(Text, nullable=False)
    conversion_rate = Column(Float, nullable=False, default=1.0)
    is_backend = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payments = relationship("PaymentRecord", back_populates="deal_type")


class PaymentRecord(Base):
    """Payment entered through the dashboard"""

    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False, index=True)
    payment_type = Column(String(16), nullable=False, default="New Deal")
    deal_type_id = Column(Integer, ForeignKey("deal_types.id"), nullable=True)
    setter_assigned = Column(Text, nullable=True, index=True)
    closer_assigned = Column(Text, nullable=True, index=True)
    assigned_csm = Column(Text, nullable=True, index=True)
    service_agreement_status = Column(String(16), nullable=False, default="pending")
    parent_payment_id = Column(Integer, ForeignKey("payments.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    deal_type = relationship("DealTypeRecord", back_populates="payments")
    parent = relationship("PaymentRecord", remote_side=[id])
    commission = relationship(
        "CommissionCalculationRecord",
        back_populates="payment",
        uselist=False,
        cascade="all, delete-orphan",
    )


class CommissionCalculationRecord(Base):
    """Engine-owned commission split, one row per payment"""

    __tablename__ = "commission_calculations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payment_id = Column(Integer, ForeignKey("payments.id", ondelete="CASCADE"), nullable=False, unique=True)
    month = Column(String(7), nullable=False, index=True)
    deal_count_at_time = Column(Numeric(10, 2), nullable=False)
    six_month_equivalent = Column(Numeric(10, 2), nullable=False)
    tier_min_deals = Column(Integer, nullable=False)
    tier_max_deals = Column(Integer, nullable=True)
    closer_rate = Column(Numeric(5, 2), nullable=False)
    setter_rate = Column(Numeric(5, 2), nullable=False)
    closer_commission = Column(Numeric(12, 2), nullable=False, default=0)
    setter_commission = Column(Numeric(12, 2), nullable=False, default=0)
    csm_commission = Column(Numeric(12, 2), nullable=False, default=0)
    is_paid = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payment = relationship("PaymentRecord", back_populates="commission")
