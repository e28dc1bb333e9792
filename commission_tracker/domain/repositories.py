"""Repository interfaces anchoring the domain layer."""
from __future__ import annotations

from typing import Protocol, Sequence

from .models import TransactionRecord


class TransactionRepository(Protocol):
    """Loads and saves the full list of transactions."""

    def list_transactions(self) -> Sequence[TransactionRecord]:
        ...

    def save_transactions(self, records: Sequence[TransactionRecord]) -> None:
        ...
