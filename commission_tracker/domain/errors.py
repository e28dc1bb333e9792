"""Exceptions raised outside the (total) commission engine."""
from __future__ import annotations


class CommissionTrackerError(Exception):
    """Base class for commission tracker errors."""


class UnknownFieldError(CommissionTrackerError, KeyError):
    def __init__(self, field_name: str) -> None:
        super().__init__(field_name)
        self.field_name = field_name

    def __str__(self) -> str:
        return f"Unknown transaction field: {self.field_name!r}"


class TransactionNotFoundError(CommissionTrackerError, LookupError):
    def __init__(self, transaction_id: str) -> None:
        super().__init__(transaction_id)
        self.transaction_id = transaction_id

    def __str__(self) -> str:
        return f"No transaction with id {self.transaction_id!r}"
