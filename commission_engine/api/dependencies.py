"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from commission_engine.domain.rules import CommissionRules
from commission_engine.services.commission_service import default_rules


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_commission_rules() -> CommissionRules:
    """Provide the tier table and flat rates used for pricing"""
    return default_rules()
