"""
Ledger error taxonomy

Every error is raised before any store write (validation) or by the store
integration itself (not found / conflict). Nothing here is retried.
"""


class LedgerError(Exception):
    """Base class for all ledger errors"""
    pass


class ValidationError(LedgerError, ValueError):
    """Malformed input: non-positive amount, unknown period, missing field, illegal transition"""
    pass


class InvalidAmount(ValidationError):
    """Amount must be strictly positive and a whole number of cents"""
    pass


class OverpaymentError(ValidationError):
    """Payment exceeds the remaining debt balance"""

    def __init__(self, amount, remaining):
        self.amount = amount
        self.remaining = remaining
        super().__init__(f"Payment {amount} exceeds remaining balance {remaining}")


class NotFoundError(LedgerError, LookupError):
    """Record id does not exist in the store"""

    def __init__(self, kind: str, record_id):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} #{record_id} not found")


class ConflictError(LedgerError):
    """Concurrent write detected (version mismatch); re-fetch and retry the whole operation"""

    def __init__(self, kind: str, record_id, expected_version: int | None = None):
        self.kind = kind
        self.record_id = record_id
        self.expected_version = expected_version
        super().__init__(f"{kind} #{record_id} was modified concurrently (expected version {expected_version})")
