"""Pydantic schemas for API request/response validation"""

from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, Field


class RecalculateRequest(BaseModel):
    """Request body for POST /v1/commissions/recalculate"""

    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="Month to recalculate (YYYY-MM)")


class RecalculateResponse(BaseModel):
    """Response for POST /v1/commissions/recalculate"""

    month: str
    success: bool
    processed: int
    failed_payment_ids: List[int]
    cancelled: bool = False


class CommissionCalculationResponse(BaseModel):
    """Stored commission split for one payment"""

    payment_id: int
    month: str
    deal_count_at_time: Decimal
    six_month_equivalent: Decimal
    tier_min_deals: int
    tier_max_deals: Optional[int] = None
    closer_rate: Decimal
    setter_rate: Decimal
    closer_commission: Decimal
    setter_commission: Decimal
    csm_commission: Decimal
    is_paid: bool


class TierSchema(BaseModel):
    """One band of the commission tier table"""

    min_deals: int
    max_deals: Optional[int] = None
    closer_rate: Decimal
    setter_rate: Decimal


class TiersResponse(BaseModel):
    """Response for GET /v1/commissions/tiers"""

    tiers: List[TierSchema]


class PersonCommissionSchema(BaseModel):
    """Commission earned by one person in a month"""

    name: str
    role: str
    commission: Decimal
    deals: int


class MonthlySummaryResponse(BaseModel):
    """Response for GET /v1/commissions/summary"""

    month: str
    total_payments: int
    total_amount: Decimal
    completed_payments: int
    completed_amount: Decimal
    six_month_deals: Decimal
    total_closer_commission: Decimal
    total_setter_commission: Decimal
    total_csm_commission: Decimal
    total_commissions: Decimal
    by_person: List[PersonCommissionSchema]
