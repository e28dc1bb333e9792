"""Real-estate commission tracking: derivation engine, storage and dashboard views."""
from commission_tracker.application.use_cases import (
    DeleteTransactionUseCase,
    ListTransactionsUseCase,
    TransactionContext,
    TransactionFormSession,
)
from commission_tracker.domain.dependencies import FieldDependencyResolver
from commission_tracker.domain.models import Brokerage, DerivedField, TransactionRecord, TransactionType
from commission_tracker.domain.services import CommissionCalculator
from commission_tracker.infrastructure.repositories.excel_repositories import WorkbookTransactionRepository
from commission_tracker.infrastructure.storage.transaction_store import TransactionStore

__all__ = [
    "Brokerage",
    "CommissionCalculator",
    "DeleteTransactionUseCase",
    "DerivedField",
    "FieldDependencyResolver",
    "ListTransactionsUseCase",
    "TransactionContext",
    "TransactionFormSession",
    "TransactionRecord",
    "TransactionStore",
    "TransactionType",
    "WorkbookTransactionRepository",
]
