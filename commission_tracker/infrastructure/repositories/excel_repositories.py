"""Excel-backed repository for transactions."""
from __future__ import annotations

from pathlib import Path
from typing import Sequence

from commission_tracker.config import SETTINGS
from commission_tracker.domain.models import TransactionRecord
from commission_tracker.domain.repositories import TransactionRepository
from commission_tracker.infrastructure.parsing.workbook import read_workbook, write_workbook


class WorkbookTransactionRepository(TransactionRepository):
    def __init__(self, path: Path | None = None, sheet_name: str | None = None) -> None:
        self._path = Path(path) if path is not None else SETTINGS.workbook_path
        self._sheet_name = sheet_name or SETTINGS.sheet_name

    def list_transactions(self) -> Sequence[TransactionRecord]:
        if not self._path.exists():
            return []
        return read_workbook(self._path, sheet_name=self._sheet_name)

    def save_transactions(self, records: Sequence[TransactionRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_bytes(write_workbook(records, sheet_name=self._sheet_name))
