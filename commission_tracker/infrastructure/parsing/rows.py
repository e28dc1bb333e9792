"""Flat row mapping for persisting transaction records.

Rows are keyed by the dashboard's camelCase column names so that files
written by earlier versions of the dashboard load unchanged. Override flags
are not part of the row: a reloaded record always starts in Auto.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from commission_tracker.domain.amounts import format_money, parse_amount
from commission_tracker.domain.models import (
    DESCRIPTIVE_FIELDS,
    NUMERIC_INPUT_FIELDS,
    Brokerage,
    DerivedFields,
    TransactionRecord,
    TransactionType,
    camel_case,
)
from commission_tracker.infrastructure.parsing.utils import cell_text

REQUIRED_DERIVED = ("gci", "referral_dollar", "adjusted_gci", "total_brokerage_fees", "nci", "net_volume")
OPTIONAL_DERIVED = ("royalty", "company_dollar", "pre_split_deduction", "agent_split", "brokerage_portion")

ROW_FIELDS = (
    ("id",)
    + tuple(name for name in DESCRIPTIVE_FIELDS if name != "id")
    + ("brokerage", "transaction_type")
    + NUMERIC_INPUT_FIELDS
    + REQUIRED_DERIVED
    + OPTIONAL_DERIVED
)
ROW_COLUMNS = tuple(camel_case(name) for name in ROW_FIELDS)


def record_to_row(record: TransactionRecord) -> dict[str, str]:
    row: dict[str, str] = {}
    for name in ROW_FIELDS:
        if name in ("brokerage", "transaction_type"):
            value = getattr(record, name).value
        elif name in REQUIRED_DERIVED or name in OPTIONAL_DERIVED:
            value = format_money(getattr(record.derived, name))
        else:
            value = getattr(record, name)
        row[camel_case(name)] = value
    return row


def row_to_record(row: Mapping[str, object]) -> TransactionRecord:
    """Rebuild a record from a stored row; missing columns fall back to defaults."""
    record = TransactionRecord()
    text_values: dict[str, str] = {}
    for name in DESCRIPTIVE_FIELDS + NUMERIC_INPUT_FIELDS:
        column = camel_case(name)
        if column in row:
            text_values[name] = cell_text(row[column])
    record = replace(record, **text_values)

    if "brokerage" in row:
        record = replace(record, brokerage=Brokerage.parse(cell_text(row["brokerage"])))
    if "transactionType" in row:
        record = replace(record, transaction_type=TransactionType.parse(cell_text(row["transactionType"])))

    derived_values = {
        name: parse_amount(cell_text(row.get(camel_case(name))))
        for name in REQUIRED_DERIVED
    }
    for name in OPTIONAL_DERIVED:
        text = cell_text(row.get(camel_case(name)))
        derived_values[name] = parse_amount(text) if text else None
    return replace(record, derived=DerivedFields(**derived_values))
