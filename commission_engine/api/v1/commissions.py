"""/v1/commissions - calculate, recalculate and report commissions"""

import logging
from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from commission_engine.api.dependencies import get_commission_rules, get_request_id
from commission_engine.api.v1.schemas import (
    CommissionCalculationResponse,
    MonthlySummaryResponse,
    PersonCommissionSchema,
    RecalculateRequest,
    RecalculateResponse,
    TierSchema,
    TiersResponse,
)
from commission_engine.domain.exceptions import InvalidMonthError
from commission_engine.domain.rules import CommissionRules
from commission_engine.infrastructure.database.session import get_db
from commission_engine.services.commission_service import CommissionService
from commission_engine.services.recalculator import MonthRecalculator

router = APIRouter()


@router.get("/commissions/tiers", response_model=TiersResponse)
def get_commission_tiers(rules: CommissionRules = Depends(get_commission_rules)):
    """Read-only tier table for display"""
    return TiersResponse(
        tiers=[
            TierSchema(
                min_deals=tier.min_deals,
                max_deals=tier.max_deals,
                closer_rate=tier.closer_rate,
                setter_rate=tier.setter_rate,
            )
            for tier in rules.tiers
        ]
    )


@router.get("/commissions/summary", response_model=MonthlySummaryResponse)
def get_monthly_summary(
    month: str = Query(..., pattern=r"^\d{4}-\d{2}$", description="Month (YYYY-MM)"),
    db: Session = Depends(get_db),
    rules: CommissionRules = Depends(get_commission_rules),
):
    """Payment and commission totals for a month with a per-person breakdown"""
    try:
        summary = CommissionService(db, rules).get_monthly_summary(month)
    except InvalidMonthError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return MonthlySummaryResponse(
        month=summary.month,
        total_payments=summary.total_payments,
        total_amount=summary.total_amount,
        completed_payments=summary.completed_payments,
        completed_amount=summary.completed_amount,
        six_month_deals=summary.six_month_deals,
        total_closer_commission=summary.total_closer_commission,
        total_setter_commission=summary.total_setter_commission,
        total_csm_commission=summary.total_csm_commission,
        total_commissions=summary.total_commissions,
        by_person=[
            PersonCommissionSchema(name=p.name, role=p.role.value, commission=p.commission, deals=p.deals)
            for p in summary.by_person
        ],
    )


@router.post("/commissions/recalculate", response_model=RecalculateResponse)
def recalculate_month(
    request_body: RecalculateRequest,
    request: Request,
    db: Session = Depends(get_db),
    rules: CommissionRules = Depends(get_commission_rules),
):
    """
    Recalculate every payment in a month, parents before rebills.

    Individual payment failures do not abort the run; they are listed in
    `failed_payment_ids` and make `success` false.
    """
    request_id = get_request_id(request)
    try:
        result = MonthRecalculator(db, rules).recalculate(request_body.month)
    except InvalidMonthError as e:
        logging.warning(f"Invalid month: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    return RecalculateResponse(
        month=result.month,
        success=result.success,
        processed=len(result.processed),
        failed_payment_ids=result.failed,
        cancelled=result.cancelled,
    )


@router.post("/commissions/{payment_id}/calculate", response_model=CommissionCalculationResponse)
def calculate_commission(
    payment_id: int,
    request: Request,
    db: Session = Depends(get_db),
    rules: CommissionRules = Depends(get_commission_rules),
):
    """Calculate and store the commission for one payment"""
    calculation = CommissionService(db, rules).calculate_and_save_commission(payment_id)
    if calculation is None:
        logging.warning(
            "Commission could not be calculated",
            extra={"request_id": get_request_id(request), "payment_id": payment_id},
        )
        raise HTTPException(status_code=422, detail="Commission could not be calculated")

    return CommissionCalculationResponse(**asdict(calculation))


@router.get("/commissions/{payment_id}", response_model=CommissionCalculationResponse)
def get_commission(payment_id: int, db: Session = Depends(get_db)):
    """Stored commission calculation for a payment"""
    calculation = CommissionService(db).get_commission(payment_id)
    if calculation is None:
        raise HTTPException(status_code=404, detail="Commission calculation not found")

    return CommissionCalculationResponse(**asdict(calculation))
