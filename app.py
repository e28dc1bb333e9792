"""Streamlit front-end for the commission tracker."""
from __future__ import annotations

from datetime import date

import pandas as pd
import streamlit as st

from commission_tracker import (
    DeleteTransactionUseCase,
    DerivedField,
    FieldDependencyResolver,
    TransactionContext,
    TransactionFormSession,
    TransactionStore,
)
from commission_tracker.application.dashboard import (
    MONEY_COLUMNS,
    brokerage_breakdown,
    client_type_breakdown,
    filter_transactions,
    insights,
    monthly_breakdown,
    records_to_dataframe,
    summarize,
)
from commission_tracker.application.dto import SortOrder, TransactionFilter
from commission_tracker.config import SETTINGS
from commission_tracker.domain.amounts import format_money
from commission_tracker.domain.models import (
    BDH_DEDUCTION_FIELDS,
    KW_DEDUCTION_FIELDS,
    UNIVERSAL_DEDUCTION_FIELDS,
    Brokerage,
    TransactionType,
)
from commission_tracker.domain.services import CommissionCalculator
from commission_tracker.infrastructure.parsing.workbook import read_workbook, write_workbook
from commission_tracker.presentation.export import export_filename, render_csv

st.set_page_config(page_title="Commission Dashboard", layout="wide")
st.title("Real Estate Commission Dashboard")

FIELD_LABELS = {
    "closed_price": "Closed price",
    "commission_pct": "Commission %",
    "referral_pct": "Referral %",
    "referral_fee_received": "Referral fee received",
    "bdh_split_pct": "BDH split % (default 94)",
    "eo": "E&O",
    "hoa_transfer": "HOA transfer",
    "home_warranty": "Home warranty",
    "kw_cares": "KW Cares",
    "kw_next_gen": "KW NextGen",
    "bold_scholarship": "BOLD scholarship",
    "tc_concierge": "TC concierge",
    "jelmberg_team": "Jelmberg team",
    "asf": "ASF",
    "foundation10": "Foundation 10",
    "admin_fee": "Admin fee",
    "other_deductions": "Other deductions",
    "buyers_agent_split": "Buyer's agent split",
    "address": "Address",
    "city": "City",
    "source": "Source",
    "list_price": "List price",
    "list_date": "List date (YYYY-MM-DD)",
    "closing_date": "Closing date (YYYY-MM-DD)",
    "assistant_bonus": "Assistant bonus (FYI)",
}
DERIVED_LABELS = {
    DerivedField.GCI: "GCI",
    DerivedField.REFERRAL_DOLLAR: "Referral $",
    DerivedField.ADJUSTED_GCI: "Adjusted GCI",
    DerivedField.ROYALTY: "Royalty",
    DerivedField.COMPANY_DOLLAR: "Company dollar",
    DerivedField.PRE_SPLIT_DEDUCTION: "Pre-split deduction",
    DerivedField.TOTAL_BROKERAGE_FEES: "Total brokerage fees",
    DerivedField.NCI: "NCI",
}


def get_context() -> TransactionContext:
    if "context" not in st.session_state:
        st.session_state["context"] = TransactionContext(
            repository=TransactionStore(),
            resolver=FieldDependencyResolver(CommissionCalculator(SETTINGS.rates)),
        )
    return st.session_state["context"]


def widget_key(name: str) -> str:
    return f"field_{name}"


def sync_widgets(session: TransactionFormSession) -> None:
    """Push the session snapshot into widget state so recomputed values show up."""
    record = session.record
    for name in FIELD_LABELS:
        st.session_state[widget_key(name)] = getattr(record, name)
    for derived in DerivedField:
        st.session_state[widget_key(derived.value)] = record.display_value(derived)
    st.session_state[widget_key("brokerage")] = record.brokerage.value
    st.session_state[widget_key("transaction_type")] = record.transaction_type.value
    st.session_state[widget_key("property_type")] = record.property_type
    st.session_state[widget_key("client_type")] = record.client_type
    st.session_state[widget_key("status")] = record.status


def open_form(session: TransactionFormSession) -> None:
    st.session_state["session"] = session
    st.session_state["view"] = "form"
    sync_widgets(session)


def on_change(name: str) -> None:
    session: TransactionFormSession = st.session_state["session"]
    session.change(name, st.session_state[widget_key(name)])
    sync_widgets(session)


def on_release(derived: DerivedField) -> None:
    session: TransactionFormSession = st.session_state["session"]
    session.release(derived)
    sync_widgets(session)


def text_field(name: str, container=st) -> None:
    container.text_input(FIELD_LABELS[name], key=widget_key(name), on_change=on_change, args=(name,))


def derived_field(derived: DerivedField, container=st) -> None:
    session: TransactionFormSession = st.session_state["session"]
    label = DERIVED_LABELS[derived]
    if session.record.is_overridden(derived):
        label += " (manual)"
    container.text_input(label, key=widget_key(derived.value), on_change=on_change, args=(derived.value,))
    if session.record.is_overridden(derived):
        container.button(
            "Reset to auto",
            key=f"release_{derived.value}",
            on_click=on_release,
            args=(derived,),
        )


def select_field(name: str, label: str, options: list[str], container=st) -> None:
    current = st.session_state.get(widget_key(name))
    if current and current not in options:
        options = options + [current]
    container.selectbox(label, options, key=widget_key(name), on_change=on_change, args=(name,))


def render_form() -> None:
    session: TransactionFormSession = st.session_state["session"]
    st.subheader("Edit transaction" if session.editing_id else "New transaction")

    col1, col2, col3 = st.columns(3)
    with col1:
        select_field("property_type", "Property type", ["Residential", "Commercial", "Land", "Rental"])
        select_field("client_type", "Client type", ["Seller", "Buyer"])
        select_field("status", "Status", ["Closed", "Pending", "Active"])
        for name in ("address", "city", "source"):
            text_field(name)
    with col2:
        for name in ("list_price", "closed_price", "list_date", "closing_date"):
            text_field(name)
    with col3:
        select_field("brokerage", "Brokerage", [b.value for b in Brokerage])
        select_field("transaction_type", "Transaction type", [t.value for t in TransactionType])
        for name in ("commission_pct", "referral_pct", "referral_fee_received"):
            text_field(name)

    brokerage = session.record.brokerage
    st.markdown("**Deductions**")
    deduction_cols = st.columns(4)
    names: tuple[str, ...] = UNIVERSAL_DEDUCTION_FIELDS
    if brokerage is Brokerage.KW:
        names = KW_DEDUCTION_FIELDS + UNIVERSAL_DEDUCTION_FIELDS
    elif brokerage is Brokerage.BDH:
        names = ("bdh_split_pct",) + BDH_DEDUCTION_FIELDS + UNIVERSAL_DEDUCTION_FIELDS
    for index, name in enumerate(names):
        text_field(name, deduction_cols[index % 4])
    text_field("assistant_bonus")

    st.markdown("**Calculated (edit to override)**")
    derived_cols = st.columns(4)
    visible = [
        DerivedField.GCI,
        DerivedField.REFERRAL_DOLLAR,
        DerivedField.ADJUSTED_GCI,
    ]
    if brokerage is Brokerage.KW:
        visible += [DerivedField.ROYALTY, DerivedField.COMPANY_DOLLAR]
    elif brokerage is Brokerage.BDH:
        visible += [DerivedField.PRE_SPLIT_DEDUCTION]
    visible += [DerivedField.TOTAL_BROKERAGE_FEES, DerivedField.NCI]
    for index, derived in enumerate(visible):
        derived_field(derived, derived_cols[index % 4])
    st.caption(f"Net volume: ${format_money(session.record.derived.net_volume)}")

    save_col, cancel_col = st.columns([1, 1])
    with save_col:
        if st.button("Save transaction", type="primary"):
            session.submit()
            st.session_state["view"] = "dashboard"
            st.success("Transaction saved")
            st.rerun()
    with cancel_col:
        if st.button("Cancel"):
            session.cancel()
            st.session_state["view"] = "dashboard"
            st.rerun()


def render_dashboard() -> None:
    context = get_context()
    all_records = context.repository.list_transactions()

    years = sorted({r.closing_date[:4] for r in all_records if r.closing_date[:4].isdigit()}, reverse=True)
    f1, f2, f3, f4, f5 = st.columns(5)
    year = f1.selectbox("Year", ["all"] + years)
    client_type = f2.selectbox("Client type", ["all", "Buyer", "Seller"])
    brokerage = f3.selectbox("Brokerage", ["all", Brokerage.KW.value, Brokerage.BDH.value])
    property_type = f4.selectbox(
        "Property type", ["all"] + sorted({r.property_type for r in all_records if r.property_type})
    )
    sort_order = f5.selectbox("Sort", [o.value for o in SortOrder])

    criteria = TransactionFilter(
        year=None if year == "all" else int(year),
        client_type=None if client_type == "all" else client_type,
        brokerage=None if brokerage == "all" else brokerage,
        property_type=None if property_type == "all" else property_type,
        sort_order=SortOrder(sort_order),
    )
    records = filter_transactions(all_records, criteria)

    metrics = summarize(records)
    m1, m2, m3, m4, m5 = st.columns(5)
    m1.metric("Total GCI", f"${metrics.total_gci:,.2f}")
    m2.metric("Total NCI", f"${metrics.total_nci:,.2f}")
    m3.metric("Transactions", metrics.total_transactions)
    m4.metric("Average NCI", f"${metrics.avg_commission:,.2f}")
    m5.metric("Total volume", f"${metrics.total_volume:,.2f}")

    found = insights(records)
    if found:
        cols = st.columns(len(found))
        for col, insight in zip(cols, found):
            col.metric(insight.label, insight.value)
            col.caption(insight.subtext)

    tabs = st.tabs(["Transactions", "Monthly", "Breakdown"])
    with tabs[0]:
        table = records_to_dataframe(records).astype({column: float for column in MONEY_COLUMNS})
        st.dataframe(table, use_container_width=True)
        st.download_button(
            "Export CSV",
            data=render_csv(records),
            file_name=export_filename(date.today()),
            mime="text/csv",
        )
        st.download_button(
            "Download workbook",
            data=write_workbook(all_records, sheet_name=SETTINGS.sheet_name),
            file_name="transactions.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
    with tabs[1]:
        monthly = pd.DataFrame(
            [{"month": m.label, "GCI": float(m.gci), "NCI": float(m.nci)} for m in monthly_breakdown(records)]
        )
        if monthly.empty:
            st.info("No dated transactions yet.")
        else:
            st.bar_chart(monthly.set_index("month"))
    with tabs[2]:
        st.dataframe(
            pd.DataFrame([{"brokerage": s.name, "nci": float(s.value)} for s in brokerage_breakdown(records)]),
        )
        st.dataframe(
            pd.DataFrame([{"client type": s.name, "deals": s.value} for s in client_type_breakdown(records)]),
        )

    st.subheader("Manage")
    ids = [r.id for r in all_records if r.id]
    col_new, col_pick, col_edit, col_delete = st.columns([1, 2, 1, 1])
    with col_new:
        if st.button("Add transaction"):
            open_form(TransactionFormSession.start_new(context))
            st.rerun()
    with col_pick:
        selected = st.selectbox(
            "Transaction",
            ids,
            format_func=lambda i: next((f"{r.address or i} ({r.closing_date})" for r in all_records if r.id == i), i),
        )
    with col_edit:
        if st.button("Edit", disabled=not selected):
            open_form(TransactionFormSession.start_edit(context, selected))
            st.rerun()
    with col_delete:
        if st.button("Delete", disabled=not selected):
            DeleteTransactionUseCase(context).execute(selected)
            st.success("Transaction deleted")
            st.rerun()

    with st.expander("Import workbook"):
        upload = st.file_uploader("Upload transactions workbook", type=["xlsx"])
        if upload is not None and st.button("Import"):
            imported = read_workbook(upload.read(), sheet_name=SETTINGS.sheet_name)
            context.repository.save_transactions(imported)
            st.success(f"Imported {len(imported)} transactions")
            st.rerun()


if "view" not in st.session_state:
    st.session_state["view"] = "dashboard"

if st.session_state["view"] == "form" and "session" in st.session_state:
    render_form()
else:
    render_dashboard()
