"""Excel workbook codec for transaction rows."""
from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Sequence

import pandas as pd

from commission_tracker.domain.models import TransactionRecord
from commission_tracker.infrastructure.parsing.rows import ROW_COLUMNS, record_to_row, row_to_record
from commission_tracker.infrastructure.parsing.utils import ensure_bytes

logger = logging.getLogger(__name__)

DEFAULT_SHEET_NAME = "Transactions"


def _transaction_sheet(source: BytesIO, sheet_name: str) -> str:
    """Match ``sheet_name`` ignoring case, else fall back to the first sheet."""
    sheets = pd.ExcelFile(source, engine="openpyxl").sheet_names
    for name in sheets:
        if name.strip().lower() == sheet_name.lower():
            return name
    logger.warning("No %r sheet found, reading %r instead", sheet_name, sheets[0])
    return sheets[0]


def read_workbook(
    source: BytesIO | Path | bytes, sheet_name: str = DEFAULT_SHEET_NAME
) -> list[TransactionRecord]:
    raw_bytes = ensure_bytes(source)
    sheet = _transaction_sheet(BytesIO(raw_bytes), sheet_name)
    dataframe = pd.read_excel(
        BytesIO(raw_bytes),
        sheet_name=sheet,
        engine="openpyxl",
        dtype=str,
        keep_default_na=False,
    )
    records = [row_to_record(row) for row in dataframe.to_dict(orient="records")]
    logger.info("Read %d transactions from sheet %r", len(records), sheet)
    return records


def write_workbook(records: Sequence[TransactionRecord], sheet_name: str = DEFAULT_SHEET_NAME) -> bytes:
    dataframe = pd.DataFrame([record_to_row(record) for record in records], columns=list(ROW_COLUMNS))
    buffer = BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        dataframe.to_excel(writer, sheet_name=sheet_name, index=False)
    return buffer.getvalue()
