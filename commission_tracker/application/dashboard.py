"""Dashboard aggregation: filters, headline metrics, breakdowns and insights."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Sequence

import pandas as pd

from commission_tracker.application.dto import SortOrder, TransactionFilter
from commission_tracker.domain.amounts import HUNDRED, ZERO, parse_amount, quantize_money
from commission_tracker.domain.models import Brokerage, TransactionRecord
from commission_tracker.domain.results import BreakdownSlice, DashboardMetrics, Insight, MonthlyTotal

FRAME_COLUMNS = [
    "id",
    "address",
    "property_type",
    "client_type",
    "brokerage",
    "list_date",
    "closing_date",
    "closed_price",
    "gci",
    "nci",
    "referral_dollar",
]
MONEY_COLUMNS = ["closed_price", "gci", "nci", "referral_dollar"]


def _parse_date(text: str) -> pd.Timestamp | None:
    if not text:
        return None
    value = pd.to_datetime(text, errors="coerce")
    if pd.isna(value):
        return None
    return value


def _total(values: Iterable[Decimal]) -> Decimal:
    return quantize_money(sum(values, ZERO))


def _round_half_up(value: Decimal | float) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _dollars(value: Decimal) -> str:
    return f"${value:,.2f}"


def records_to_dataframe(records: Sequence[TransactionRecord]) -> pd.DataFrame:
    """One row per record; money columns hold ``Decimal`` objects."""
    frame = pd.DataFrame(
        [
            {
                "id": r.id,
                "address": r.address,
                "property_type": r.property_type,
                "client_type": r.client_type,
                "brokerage": r.brokerage.value,
                "list_date": _parse_date(r.list_date),
                "closing_date": _parse_date(r.closing_date),
                "closed_price": parse_amount(r.closed_price),
                "gci": r.derived.gci,
                "nci": r.derived.nci,
                "referral_dollar": r.derived.referral_dollar,
            }
            for r in records
        ],
        columns=FRAME_COLUMNS,
    )
    frame["list_date"] = pd.to_datetime(frame["list_date"])
    frame["closing_date"] = pd.to_datetime(frame["closing_date"])
    return frame


def filter_transactions(
    records: Sequence[TransactionRecord], criteria: TransactionFilter
) -> list[TransactionRecord]:
    """Apply the dashboard filters and sort by closing date; undated records sort as oldest."""
    brokerage = Brokerage.parse(criteria.brokerage) if criteria.brokerage else None
    selected: list[tuple[int, TransactionRecord]] = []
    for record in records:
        closing = _parse_date(record.closing_date)
        if criteria.year is not None and (closing is None or closing.year != criteria.year):
            continue
        if criteria.client_type and record.client_type != criteria.client_type:
            continue
        if brokerage is not None and record.brokerage is not brokerage:
            continue
        if criteria.property_type and record.property_type != criteria.property_type:
            continue
        selected.append((closing.value if closing is not None else 0, record))

    selected.sort(key=lambda item: item[0], reverse=criteria.sort_order is SortOrder.NEWEST)
    return [record for _, record in selected]


def summarize(records: Sequence[TransactionRecord]) -> DashboardMetrics:
    count = len(records)
    total_nci = _total(r.derived.nci for r in records)
    return DashboardMetrics(
        total_gci=_total(r.derived.gci for r in records),
        total_nci=total_nci,
        total_transactions=count,
        avg_commission=quantize_money(total_nci / count) if count else quantize_money(ZERO),
        total_volume=_total(parse_amount(r.closed_price) for r in records),
        total_referral_fees=_total(r.derived.referral_dollar for r in records),
    )


def _monthly_frame(frame: pd.DataFrame) -> pd.DataFrame:
    dated = frame.dropna(subset=["closing_date"])
    if dated.empty:
        return pd.DataFrame(columns=["gci", "nci", "transactions"])
    dated = dated.assign(period=dated["closing_date"].dt.to_period("M"))
    return (
        dated.groupby("period")
        .agg(gci=("gci", _total), nci=("nci", _total), transactions=("nci", "count"))
        .sort_index()
    )


def monthly_breakdown(records: Sequence[TransactionRecord]) -> list[MonthlyTotal]:
    monthly = _monthly_frame(records_to_dataframe(records))
    return [
        MonthlyTotal(
            period=str(period),
            label=period.strftime("%b %Y"),
            gci=row["gci"],
            nci=row["nci"],
            transactions=int(row["transactions"]),
        )
        for period, row in monthly.iterrows()
    ]


def brokerage_breakdown(records: Sequence[TransactionRecord]) -> list[BreakdownSlice]:
    return [
        BreakdownSlice(name=brokerage.value, value=_total(r.derived.nci for r in records if r.brokerage is brokerage))
        for brokerage in (Brokerage.KW, Brokerage.BDH)
    ]


def client_type_breakdown(records: Sequence[TransactionRecord]) -> list[BreakdownSlice]:
    frame = records_to_dataframe(records)
    return [
        BreakdownSlice(name=name, value=int((frame["client_type"] == name).sum()))
        for name in ("Buyer", "Seller")
    ]


def insights(records: Sequence[TransactionRecord]) -> list[Insight]:
    frame = records_to_dataframe(records)
    if frame.empty:
        return []

    found: list[Insight] = []

    monthly = _monthly_frame(frame)
    if not monthly.empty:
        best_period = max(monthly.index, key=lambda period: monthly.loc[period, "nci"])
        found.append(
            Insight(
                label="Best Month",
                value=best_period.strftime("%B %Y"),
                subtext=f"{_dollars(monthly.loc[best_period, 'nci'])} earned",
            )
        )

    by_property = frame.groupby("property_type", sort=False)["nci"].agg(_total)
    top_property = max(by_property.index, key=lambda name: by_property[name])
    found.append(
        Insight(
            label="Top Property Type",
            value=str(top_property),
            subtext=f"{_dollars(by_property[top_property])} in commissions",
        )
    )

    spans = (frame["closing_date"] - frame["list_date"]).dropna().dt.days
    spans = spans[spans > 0]
    if not spans.empty:
        found.append(
            Insight(
                label="Avg Days to Close",
                value=f"{_round_half_up(Decimal(int(spans.sum())) / len(spans))} days",
                subtext=f"Based on {len(spans)} transactions",
            )
        )

    buyer_nci = _total(r.derived.nci for r in records if r.client_type == "Buyer")
    seller_nci = _total(r.derived.nci for r in records if r.client_type == "Seller")
    if buyer_nci + seller_nci > ZERO:
        stronger = "Buyers" if buyer_nci > seller_nci else "Sellers"
        share = max(buyer_nci, seller_nci) / (buyer_nci + seller_nci) * HUNDRED
        found.append(
            Insight(
                label="Stronger Side",
                value=stronger,
                subtext=f"{_round_half_up(share)}% of total income",
            )
        )

    biggest = max(records, key=lambda r: r.derived.nci)
    found.append(
        Insight(
            label="Biggest Deal",
            value=_dollars(quantize_money(biggest.derived.nci)),
            subtext=biggest.address,
        )
    )
    return found
