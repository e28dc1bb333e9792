"""Field dependency resolution for interactive edits.

Derived fields form a small DAG::

    gci -> referral_dollar -> adjusted_gci -> {royalty, company_dollar, pre_split_deduction}
        -> total_brokerage_fees -> nci

Each derived field is either Auto (recomputed on every relevant edit) or
Overridden (pinned to text the user typed). Editing a raw input refreshes
every Auto field; editing a derived field pins it and refreshes only what
sits downstream of it.
"""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Mapping

from .amounts import HUNDRED, format_rate, parse_amount
from .errors import UnknownFieldError
from .models import (
    DERIVED_FIELD_NAMES,
    DESCRIPTIVE_FIELDS,
    NUMERIC_INPUT_FIELDS,
    READ_ONLY_FIELDS,
    Brokerage,
    DerivedField,
    TransactionRecord,
    TransactionType,
    applies_to,
    canonical_field_name,
)
from .services import CommissionCalculator

DEPENDENCIES: Mapping[DerivedField, tuple[DerivedField, ...]] = {
    DerivedField.GCI: (),
    DerivedField.REFERRAL_DOLLAR: (DerivedField.GCI,),
    DerivedField.ADJUSTED_GCI: (DerivedField.GCI, DerivedField.REFERRAL_DOLLAR),
    DerivedField.ROYALTY: (DerivedField.ADJUSTED_GCI,),
    DerivedField.COMPANY_DOLLAR: (DerivedField.ADJUSTED_GCI,),
    DerivedField.PRE_SPLIT_DEDUCTION: (DerivedField.ADJUSTED_GCI,),
    DerivedField.TOTAL_BROKERAGE_FEES: (
        DerivedField.ADJUSTED_GCI,
        DerivedField.ROYALTY,
        DerivedField.COMPANY_DOLLAR,
        DerivedField.PRE_SPLIT_DEDUCTION,
    ),
    DerivedField.NCI: (DerivedField.ADJUSTED_GCI, DerivedField.TOTAL_BROKERAGE_FEES),
}

ALL_DERIVED = frozenset(DerivedField)


def downstream_of(derived: DerivedField) -> frozenset[DerivedField]:
    """Every derived field that transitively depends on ``derived``."""
    found: set[DerivedField] = set()
    frontier = [derived]
    while frontier:
        current = frontier.pop()
        for candidate, parents in DEPENDENCIES.items():
            if current in parents and candidate not in found:
                found.add(candidate)
                frontier.append(candidate)
    return frozenset(found)


def _as_text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, Decimal):
        return format(value, "f")
    return str(value)


class FieldDependencyResolver:
    """Single entry point for every edit made on the transaction form."""

    def __init__(self, calculator: CommissionCalculator | None = None) -> None:
        if calculator is None:
            calculator = CommissionCalculator()
        self._calculator = calculator

    @property
    def calculator(self) -> CommissionCalculator:
        return self._calculator

    def new_record(self, **values: object) -> TransactionRecord:
        """A blank form snapshot, optionally pre-filled, with everything in Auto."""
        record = TransactionRecord()
        for name, value in values.items():
            record = self._store(record, canonical_field_name(name), value)
        return self.recompute(record)

    def load_for_edit(self, record: TransactionRecord) -> TransactionRecord:
        """Start an edit session: overrides are dropped and every field is Auto again."""
        return self.recompute(replace(record, overrides={}))

    def recompute(self, record: TransactionRecord) -> TransactionRecord:
        return replace(record, derived=self._calculator.compute(record))

    def on_field_change(
        self, record: TransactionRecord, field_name: str, new_value: object
    ) -> TransactionRecord:
        name = canonical_field_name(field_name)

        if name in DERIVED_FIELD_NAMES:
            derived = DerivedField(name)
            if not applies_to(derived, record.brokerage):
                return record
            return self._override(record, derived, _as_text(new_value))
        if name in NUMERIC_INPUT_FIELDS or name in ("brokerage", "transaction_type"):
            updated = self._store(record, name, new_value)
            if updated.brokerage is not record.brokerage:
                overrides = {
                    key: text for key, text in updated.overrides.items() if applies_to(key, updated.brokerage)
                }
                updated = replace(updated, overrides=overrides)
            return self._refresh(record, updated, ALL_DERIVED)
        if name in DESCRIPTIVE_FIELDS:
            return replace(record, **{name: _as_text(new_value)})
        if name in READ_ONLY_FIELDS:
            return record
        raise UnknownFieldError(field_name)

    def release_override(self, record: TransactionRecord, derived: DerivedField) -> TransactionRecord:
        """Return a pinned field to Auto and refresh it along with its dependents."""
        if derived not in record.overrides:
            return record
        overrides = {key: text for key, text in record.overrides.items() if key is not derived}
        updated = replace(record, overrides=overrides)
        return self._refresh(record, updated, downstream_of(derived) | {derived})

    def _override(self, record: TransactionRecord, derived: DerivedField, text: str) -> TransactionRecord:
        updated = self._back_derive(record, derived, text)
        overrides = dict(record.overrides)
        overrides[derived] = text
        updated = replace(updated, overrides=overrides)
        return self._refresh(record, updated, downstream_of(derived))

    def _back_derive(self, record: TransactionRecord, derived: DerivedField, text: str) -> TransactionRecord:
        amount = parse_amount(text)
        if derived is DerivedField.GCI:
            closed_price = parse_amount(record.closed_price)
            if not closed_price.is_zero():
                return replace(record, commission_pct=format_rate(amount / closed_price * HUNDRED))
        elif derived is DerivedField.REFERRAL_DOLLAR:
            gci = record.derived.gci
            if not gci.is_zero():
                return replace(record, referral_pct=format_rate(amount / gci * HUNDRED))
        return record

    def _refresh(
        self,
        previous: TransactionRecord,
        updated: TransactionRecord,
        refresh: Iterable[DerivedField],
    ) -> TransactionRecord:
        computed = self._calculator.compute(updated)
        refresh = set(refresh)
        keep = {
            derived.value: previous.derived.value_of(derived)
            for derived in DerivedField
            if derived not in refresh and derived not in updated.overrides
        }
        if DerivedField.TOTAL_BROKERAGE_FEES.value in keep:
            keep["agent_split"] = previous.derived.agent_split
            keep["brokerage_portion"] = previous.derived.brokerage_portion
        return replace(updated, derived=replace(computed, **keep))

    @staticmethod
    def _store(record: TransactionRecord, name: str, value: object) -> TransactionRecord:
        if name == "brokerage":
            return replace(record, brokerage=Brokerage.parse(value))
        if name == "transaction_type":
            return replace(record, transaction_type=TransactionType.parse(value))
        if name in NUMERIC_INPUT_FIELDS or name in DESCRIPTIVE_FIELDS:
            return replace(record, **{name: _as_text(value)})
        raise UnknownFieldError(name)
