"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class PaymentNotFoundError(DomainException):
    """Referenced payment does not exist"""

    def __init__(self, payment_id: int):
        super().__init__(f"Payment {payment_id} not found")
        self.payment_id = payment_id


class DealTypeNotFoundError(DomainException):
    """Payment references a deal type that does not exist"""

    def __init__(self, payment_id: int, deal_type_id: int | None):
        super().__init__(f"Deal type {deal_type_id} not found for payment {payment_id}")
        self.payment_id = payment_id
        self.deal_type_id = deal_type_id


class InvalidAssignmentError(DomainException):
    """More than one of setter / closer / CSM is assigned to a payment"""

    pass


class InvalidMonthError(DomainException):
    """Month string is not a valid YYYY-MM value"""

    pass


class TierTableError(DomainException):
    """Commission tier table does not partition [0, inf)"""

    pass
