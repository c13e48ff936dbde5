"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    pass


class ExplanationError(DomainException):
    """Explanation service failed or returned an unusable response"""

    pass


class TransactionNotFoundError(DomainException):
    """No ledger entry exists for the requested transaction id"""

    def __init__(self, transaction_id: str):
        super().__init__(f"Transaction not found: {transaction_id}")
        self.transaction_id = transaction_id
