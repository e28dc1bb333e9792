"""CSV and HTML exports of the transaction list."""
from __future__ import annotations

import csv
import html
import io
from datetime import date
from typing import Callable, Sequence

from commission_tracker.domain.amounts import format_money
from commission_tracker.domain.models import TransactionRecord

EXPORT_COLUMNS: list[tuple[str, Callable[[TransactionRecord], str]]] = [
    ("Property Type", lambda r: r.property_type),
    ("Client Type", lambda r: r.client_type),
    ("Source", lambda r: r.source),
    ("Address", lambda r: r.address),
    ("City", lambda r: r.city),
    ("List Price", lambda r: r.list_price),
    ("Closed Price", lambda r: r.closed_price),
    ("List Date", lambda r: r.list_date),
    ("Closing Date", lambda r: r.closing_date),
    ("Brokerage", lambda r: r.brokerage.value),
    ("Commission %", lambda r: r.commission_pct),
    ("GCI", lambda r: format_money(r.derived.gci)),
    ("Referral %", lambda r: r.referral_pct),
    ("Referral $", lambda r: format_money(r.derived.referral_dollar)),
    ("Adjusted GCI", lambda r: format_money(r.derived.adjusted_gci)),
    ("Total Brokerage Fees", lambda r: format_money(r.derived.total_brokerage_fees)),
    ("NCI", lambda r: format_money(r.derived.nci)),
    ("Status", lambda r: r.status),
]


def transactions_to_rows(records: Sequence[TransactionRecord]) -> list[dict[str, str]]:
    return [{header: getter(record) for header, getter in EXPORT_COLUMNS} for record in records]


def render_csv(records: Sequence[TransactionRecord]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([header for header, _ in EXPORT_COLUMNS])
    for row in transactions_to_rows(records):
        writer.writerow(row.values())
    return buffer.getvalue().encode("utf-8")


def render_html(records: Sequence[TransactionRecord]) -> str:
    rows = transactions_to_rows(records)
    if not rows:
        return "<p>No transactions recorded.</p>"
    header = "".join(f"<th>{html.escape(header)}</th>" for header, _ in EXPORT_COLUMNS)
    body_parts = []
    for row in rows:
        body_parts.append("<tr>" + "".join(f"<td>{html.escape(value)}</td>" for value in row.values()) + "</tr>")
    body_html = "".join(body_parts)
    return f"<table><thead><tr>{header}</tr></thead><tbody>{body_html}</tbody></table>"


def export_filename(today: date | None = None) -> str:
    today = today or date.today()
    return f"real-estate-transactions-{today.isoformat()}.csv"
