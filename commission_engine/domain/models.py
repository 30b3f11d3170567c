"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from commission_engine.domain.exceptions import InvalidAssignmentError

# Placeholder values the payment form writes instead of NULL
UNASSIGNED_MARKERS = frozenset({"", "Unassigned", "N/A"})


class PaymentType(str, Enum):
    NEW_DEAL = "New Deal"
    REBILL = "Rebill"


class AgreementStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class TeamRole(str, Enum):
    SETTER = "setter"
    CLOSER = "closer"
    CSM = "csm"


@dataclass(frozen=True)
class Assignment:
    """The single team member credited with a payment"""

    role: TeamRole
    name: str

    @classmethod
    def from_fields(
        cls,
        setter: Optional[str],
        closer: Optional[str],
        csm: Optional[str],
    ) -> Optional["Assignment"]:
        """
        Collapse the three nullable assignment columns into one value.

        Returns None when nobody is assigned.

        Raises:
            InvalidAssignmentError: more than one role is filled in
        """
        filled = [
            cls(role=role, name=name.strip())
            for role, name in (
                (TeamRole.SETTER, setter),
                (TeamRole.CLOSER, closer),
                (TeamRole.CSM, csm),
            )
            if name is not None and name.strip() not in UNASSIGNED_MARKERS
        ]
        if len(filled) > 1:
            roles = ", ".join(a.role.value for a in filled)
            raise InvalidAssignmentError(f"Expected exactly one assignment, got: {roles}")
        return filled[0] if filled else None


@dataclass
class DealType:
    """Reference data describing a kind of deal"""

    id: int
    name: str
    display_name: str
    conversion_rate: float
    is_backend: bool


@dataclass
class Payment:
    """Payment record as seen by the commission engine"""

    id: int
    amount: Decimal
    payment_date: date
    payment_type: PaymentType
    deal_type_id: int
    status: AgreementStatus
    assignment: Optional[Assignment]
    parent_payment_id: Optional[int] = None

    @property
    def month(self) -> str:
        return self.payment_date.strftime("%Y-%m")

    @property
    def is_completed(self) -> bool:
        return self.status == AgreementStatus.COMPLETED

    @property
    def inherits_parent_rates(self) -> bool:
        return self.payment_type == PaymentType.REBILL and self.parent_payment_id is not None


@dataclass(frozen=True)
class CommissionTier:
    """Volume band mapping a deal count to closer/setter rates (percent)"""

    min_deals: int
    max_deals: Optional[int]  # None = unbounded
    closer_rate: Decimal
    setter_rate: Decimal

    def contains(self, deals: float) -> bool:
        """Bands are authored on whole deals; fractional volumes round into the lower band"""
        if deals < self.min_deals:
            return False
        return self.max_deals is None or deals < self.max_deals + 1

    def rate_for(self, role: TeamRole) -> Decimal:
        # CSMs on frontend deals fall back to the setter rate
        return self.closer_rate if role == TeamRole.CLOSER else self.setter_rate


@dataclass(frozen=True)
class InheritedRates:
    """Rates and tier bounds stored on a rebill's parent calculation"""

    closer_rate: Decimal
    setter_rate: Decimal
    tier_min_deals: int
    tier_max_deals: Optional[int]

    def as_tier(self) -> CommissionTier:
        return CommissionTier(
            min_deals=self.tier_min_deals,
            max_deals=self.tier_max_deals,
            closer_rate=self.closer_rate,
            setter_rate=self.setter_rate,
        )


@dataclass
class CommissionCalculation:
    """Commission split for a single payment, ready for upsert"""

    payment_id: int
    month: str
    deal_count_at_time: Decimal
    six_month_equivalent: Decimal
    tier_min_deals: int
    tier_max_deals: Optional[int]
    closer_rate: Decimal
    setter_rate: Decimal
    closer_commission: Decimal
    setter_commission: Decimal
    csm_commission: Decimal
    is_paid: bool = False

    @property
    def total_commission(self) -> Decimal:
        return self.closer_commission + self.setter_commission + self.csm_commission


@dataclass
class PersonCommission:
    """Commission earned by one person in one role over a month"""

    name: str
    role: TeamRole
    commission: Decimal = Decimal("0")
    deals: int = 0


@dataclass
class MonthlySummary:
    """Aggregated payment and commission figures for a month"""

    month: str
    total_payments: int
    total_amount: Decimal
    completed_payments: int
    completed_amount: Decimal
    six_month_deals: Decimal
    total_closer_commission: Decimal
    total_setter_commission: Decimal
    total_csm_commission: Decimal
    by_person: List[PersonCommission] = field(default_factory=list)

    @property
    def total_commissions(self) -> Decimal:
        return self.total_closer_commission + self.total_setter_commission + self.total_csm_commission


@dataclass
class BatchResult:
    """Outcome of recalculating every payment in a month"""

    month: str
    processed: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)
    cancelled: bool = False

    @property
    def success(self) -> bool:
        return not self.failed and not self.cancelled
