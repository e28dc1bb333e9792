"""JSON file storage for transactions."""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

from commission_tracker.config import SETTINGS
from commission_tracker.domain.models import TransactionRecord
from commission_tracker.domain.repositories import TransactionRepository
from commission_tracker.infrastructure.parsing.rows import record_to_row, row_to_record

logger = logging.getLogger(__name__)

DEFAULT_PATH = SETTINGS.store_path


class TransactionStore(TransactionRepository):
    """Keeps every transaction as one JSON array of flat rows."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = Path(path) if path is not None else DEFAULT_PATH

    @property
    def path(self) -> Path:
        return self._path

    def list_transactions(self) -> Sequence[TransactionRecord]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except ValueError:
            logger.warning("Ignoring unreadable transaction store %s", self._path)
            return []
        if not isinstance(data, list):
            logger.warning("Transaction store %s does not hold a list", self._path)
            return []
        return [row_to_record(row) for row in data if isinstance(row, dict)]

    def save_transactions(self, records: Sequence[TransactionRecord]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        rows = [record_to_row(record) for record in records]
        self._path.write_text(
            json.dumps(rows, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        logger.info("Saved %d transactions to %s", len(rows), self._path)
