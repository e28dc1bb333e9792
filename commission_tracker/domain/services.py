"""Domain services implementing the commission rules."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Mapping

from .amounts import HUNDRED, ZERO, parse_amount, quantize_money
from .models import (
    BDH_DEDUCTION_FIELDS,
    KW_DEDUCTION_FIELDS,
    UNIVERSAL_DEDUCTION_FIELDS,
    Brokerage,
    CommissionRates,
    DerivedField,
    DerivedFields,
    TransactionRecord,
    TransactionType,
    applies_to,
)

Pins = Mapping[DerivedField, Decimal]


@dataclass(frozen=True)
class BrokerageFees:
    total: Decimal
    royalty: Decimal | None = None
    company_dollar: Decimal | None = None
    pre_split_deduction: Decimal | None = None
    agent_split: Decimal | None = None
    brokerage_portion: Decimal | None = None


def _optional_money(value: Decimal | None) -> Decimal | None:
    return None if value is None else quantize_money(value)


def _sum_inputs(record: TransactionRecord, names: tuple[str, ...]) -> Decimal:
    return sum((parse_amount(getattr(record, name)) for name in names), ZERO)


class CommissionCalculator:
    """Derives GCI, brokerage deductions and NCI from a transaction snapshot.

    ``compute`` never raises: unparseable input counts as zero. Pinned
    overrides on the record replace the matching formula and feed into
    everything downstream of it.
    """

    def __init__(self, rates: CommissionRates | None = None) -> None:
        if rates is None:
            rates = CommissionRates()
        self._rates = rates
        self._fee_rules: dict[Brokerage, Callable[[TransactionRecord, Decimal, Pins], BrokerageFees]] = {
            Brokerage.KW: self._kw_fees,
            Brokerage.BDH: self._bdh_fees,
            Brokerage.OTHER: self._no_fees,
        }

    @property
    def rates(self) -> CommissionRates:
        return self._rates

    def compute(self, record: TransactionRecord) -> DerivedFields:
        pins = {
            derived: parse_amount(text)
            for derived, text in record.overrides.items()
            if applies_to(derived, record.brokerage)
        }
        closed_price = parse_amount(record.closed_price)

        if record.transaction_type is TransactionType.REFERRAL_RECEIVED:
            gci = pins.get(DerivedField.GCI, parse_amount(record.referral_fee_received))
            referral_dollar = pins.get(DerivedField.REFERRAL_DOLLAR, ZERO)
            adjusted_gci = pins.get(DerivedField.ADJUSTED_GCI, gci)
        else:
            commission_pct = parse_amount(record.commission_pct)
            referral_pct = parse_amount(record.referral_pct)
            gci = pins.get(DerivedField.GCI, closed_price * commission_pct / HUNDRED)
            if referral_pct > ZERO:
                formula_referral = gci * referral_pct / HUNDRED
            else:
                formula_referral = ZERO
            referral_dollar = pins.get(DerivedField.REFERRAL_DOLLAR, formula_referral)
            adjusted_gci = pins.get(DerivedField.ADJUSTED_GCI, gci - referral_dollar)

        fees = self._fee_rules[record.brokerage](record, adjusted_gci, pins)
        total_brokerage_fees = pins.get(DerivedField.TOTAL_BROKERAGE_FEES, fees.total)
        nci = pins.get(DerivedField.NCI, adjusted_gci - total_brokerage_fees)

        return DerivedFields(
            gci=quantize_money(gci),
            referral_dollar=quantize_money(referral_dollar),
            adjusted_gci=quantize_money(adjusted_gci),
            total_brokerage_fees=quantize_money(total_brokerage_fees),
            nci=quantize_money(nci),
            net_volume=quantize_money(closed_price),
            royalty=_optional_money(fees.royalty),
            company_dollar=_optional_money(fees.company_dollar),
            pre_split_deduction=_optional_money(fees.pre_split_deduction),
            agent_split=_optional_money(fees.agent_split),
            brokerage_portion=_optional_money(fees.brokerage_portion),
        )

    def _kw_fees(self, record: TransactionRecord, adjusted_gci: Decimal, pins: Pins) -> BrokerageFees:
        royalty = pins.get(DerivedField.ROYALTY, adjusted_gci * self._rates.kw_royalty_rate)
        company_dollar = pins.get(
            DerivedField.COMPANY_DOLLAR, adjusted_gci * self._rates.kw_company_dollar_rate
        )
        total = (
            royalty
            + company_dollar
            + _sum_inputs(record, KW_DEDUCTION_FIELDS)
            + _sum_inputs(record, UNIVERSAL_DEDUCTION_FIELDS)
        )
        return BrokerageFees(total=total, royalty=royalty, company_dollar=company_dollar)

    def _bdh_fees(self, record: TransactionRecord, adjusted_gci: Decimal, pins: Pins) -> BrokerageFees:
        split_pct = parse_amount(record.bdh_split_pct)
        if split_pct.is_zero():
            split_pct = self._rates.bdh_default_split_pct
        pre_split = pins.get(
            DerivedField.PRE_SPLIT_DEDUCTION, adjusted_gci * self._rates.bdh_pre_split_rate
        )
        agent_split = (adjusted_gci - pre_split) * split_pct / HUNDRED
        brokerage_portion = adjusted_gci - agent_split
        total = (
            pre_split
            + brokerage_portion
            + _sum_inputs(record, BDH_DEDUCTION_FIELDS)
            + _sum_inputs(record, UNIVERSAL_DEDUCTION_FIELDS)
        )
        return BrokerageFees(
            total=total,
            pre_split_deduction=pre_split,
            agent_split=agent_split,
            brokerage_portion=brokerage_portion,
        )

    @staticmethod
    def _no_fees(record: TransactionRecord, adjusted_gci: Decimal, pins: Pins) -> BrokerageFees:
        return BrokerageFees(total=ZERO)
