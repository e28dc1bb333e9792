"""Application services orchestrating the transaction form and list."""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Sequence

from commission_tracker.application.dashboard import filter_transactions
from commission_tracker.application.dto import TransactionFilter
from commission_tracker.domain.dependencies import FieldDependencyResolver
from commission_tracker.domain.errors import TransactionNotFoundError
from commission_tracker.domain.models import DerivedField, TransactionRecord
from commission_tracker.domain.repositories import TransactionRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TransactionContext:
    repository: TransactionRepository
    resolver: FieldDependencyResolver


class TransactionFormSession:
    """One pass through the add/edit form: start, edit fields, then submit or cancel."""

    def __init__(self, context: TransactionContext, record: TransactionRecord, editing_id: str | None = None) -> None:
        self._context = context
        self._record = record
        self._editing_id = editing_id
        self._created_at = record.created_at if editing_id else ""

    @classmethod
    def start_new(cls, context: TransactionContext) -> TransactionFormSession:
        return cls(context, context.resolver.new_record())

    @classmethod
    def start_edit(cls, context: TransactionContext, transaction_id: str) -> TransactionFormSession:
        for record in context.repository.list_transactions():
            if record.id == transaction_id:
                return cls(context, context.resolver.load_for_edit(record), editing_id=transaction_id)
        raise TransactionNotFoundError(transaction_id)

    @property
    def record(self) -> TransactionRecord:
        return self._record

    @property
    def editing_id(self) -> str | None:
        return self._editing_id

    def change(self, field_name: str, value: object) -> TransactionRecord:
        self._record = self._context.resolver.on_field_change(self._record, field_name, value)
        return self._record

    def release(self, derived: DerivedField) -> TransactionRecord:
        self._record = self._context.resolver.release_override(self._record, derived)
        return self._record

    def submit(self, now: datetime | None = None) -> TransactionRecord:
        """Persist the current snapshot, replacing the edited record or appending a new one."""
        if now is None:
            now = datetime.now(timezone.utc)
        stamp = now.isoformat()
        transaction_id = self._editing_id or str(int(now.timestamp() * 1000))
        saved = replace(
            self._record,
            id=transaction_id,
            created_at=self._created_at or stamp,
            updated_at=stamp,
        )

        records = list(self._context.repository.list_transactions())
        if any(record.id == transaction_id for record in records):
            records = [saved if record.id == transaction_id else record for record in records]
        else:
            records.append(saved)
        self._context.repository.save_transactions(records)
        logger.info("Saved transaction %s", transaction_id)
        return saved

    def cancel(self) -> None:
        self._record = self._context.resolver.new_record()
        self._editing_id = None
        self._created_at = ""


class ListTransactionsUseCase:
    def __init__(self, context: TransactionContext) -> None:
        self._context = context

    def execute(self, criteria: TransactionFilter | None = None) -> Sequence[TransactionRecord]:
        records = self._context.repository.list_transactions()
        return filter_transactions(records, criteria or TransactionFilter())


class DeleteTransactionUseCase:
    def __init__(self, context: TransactionContext) -> None:
        self._context = context

    def execute(self, transaction_id: str) -> None:
        records = list(self._context.repository.list_transactions())
        remaining = [record for record in records if record.id != transaction_id]
        if len(remaining) == len(records):
            raise TransactionNotFoundError(transaction_id)
        self._context.repository.save_transactions(remaining)
        logger.info("Deleted transaction %s", transaction_id)
