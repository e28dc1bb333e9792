"""Domain models for commission tracking.

A ``TransactionRecord`` is an immutable snapshot of one deal as it sits on the
form: raw inputs as the text the user typed, the derived commission bundle,
and the set of derived fields the user has pinned by hand.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from enum import Enum
from typing import Mapping

from .amounts import ZERO, format_money, quantize_money


class Brokerage(str, Enum):
    KW = "KW"
    BDH = "BDH"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: object) -> Brokerage:
        if isinstance(value, cls):
            return value
        text = "" if value is None else str(value).strip().upper()
        for member in cls:
            if member.value.upper() == text:
                return member
        return cls.OTHER


class TransactionType(str, Enum):
    SALE = "Sale"
    REFERRAL_RECEIVED = "Referral Received"
    REFERRAL_PAID = "Referral Paid"

    @classmethod
    def parse(cls, value: object) -> TransactionType:
        """Accept ``Referral Received``, ``ReferralReceived`` or ``referral_received``."""
        if isinstance(value, cls):
            return value
        text = "" if value is None else str(value)
        key = "".join(ch for ch in text.lower() if ch.isalnum())
        for member in cls:
            if key in (member.value.replace(" ", "").lower(), member.name.replace("_", "").lower()):
                return member
        return cls.SALE


class DerivedField(str, Enum):
    """Derived fields a user may pin, listed in evaluation order."""

    GCI = "gci"
    REFERRAL_DOLLAR = "referral_dollar"
    ADJUSTED_GCI = "adjusted_gci"
    ROYALTY = "royalty"
    COMPANY_DOLLAR = "company_dollar"
    PRE_SPLIT_DEDUCTION = "pre_split_deduction"
    TOTAL_BROKERAGE_FEES = "total_brokerage_fees"
    NCI = "nci"


# Fee lines that only exist under one brokerage.
BROKERAGE_SPECIFIC_FIELDS: Mapping[DerivedField, Brokerage] = {
    DerivedField.ROYALTY: Brokerage.KW,
    DerivedField.COMPANY_DOLLAR: Brokerage.KW,
    DerivedField.PRE_SPLIT_DEDUCTION: Brokerage.BDH,
}


def applies_to(derived: DerivedField, brokerage: Brokerage) -> bool:
    owner = BROKERAGE_SPECIFIC_FIELDS.get(derived)
    return owner is None or owner is brokerage


@dataclass(frozen=True)
class CommissionRates:
    kw_royalty_rate: Decimal = Decimal("0.06")
    kw_company_dollar_rate: Decimal = Decimal("0.10")
    bdh_pre_split_rate: Decimal = Decimal("0.06")
    bdh_default_split_pct: Decimal = Decimal("94")


@dataclass(frozen=True)
class DerivedFields:
    """Everything the calculator produces for one snapshot, rounded to cents.

    Brokerage-specific values are ``None`` when the brokerage does not use them.
    """

    gci: Decimal
    referral_dollar: Decimal
    adjusted_gci: Decimal
    total_brokerage_fees: Decimal
    nci: Decimal
    net_volume: Decimal
    royalty: Decimal | None = None
    company_dollar: Decimal | None = None
    pre_split_deduction: Decimal | None = None
    agent_split: Decimal | None = None
    brokerage_portion: Decimal | None = None

    @classmethod
    def zero(cls) -> DerivedFields:
        cents = quantize_money(ZERO)
        return cls(
            gci=cents,
            referral_dollar=cents,
            adjusted_gci=cents,
            total_brokerage_fees=cents,
            nci=cents,
            net_volume=cents,
        )

    def value_of(self, derived: DerivedField) -> Decimal | None:
        return getattr(self, derived.value)


@dataclass(frozen=True)
class TransactionRecord:
    # Commission inputs
    brokerage: Brokerage = Brokerage.KW
    transaction_type: TransactionType = TransactionType.SALE
    closed_price: str = ""
    commission_pct: str = ""
    referral_pct: str = ""
    referral_fee_received: str = ""

    # KW deductions
    eo: str = ""
    hoa_transfer: str = ""
    home_warranty: str = ""
    kw_cares: str = ""
    kw_next_gen: str = ""
    bold_scholarship: str = ""
    tc_concierge: str = ""
    jelmberg_team: str = ""

    # BDH deductions
    bdh_split_pct: str = ""
    asf: str = ""
    foundation10: str = ""
    admin_fee: str = ""

    # Universal deductions
    other_deductions: str = ""
    buyers_agent_split: str = ""

    derived: DerivedFields = field(default_factory=DerivedFields.zero)
    overrides: Mapping[DerivedField, str] = field(default_factory=dict)

    # Descriptive fields, never part of the calculation
    id: str = ""
    property_type: str = "Residential"
    client_type: str = "Seller"
    source: str = ""
    address: str = ""
    city: str = ""
    list_price: str = ""
    list_date: str = ""
    closing_date: str = ""
    status: str = "Closed"
    assistant_bonus: str = ""
    created_at: str = ""
    updated_at: str = ""

    def is_overridden(self, derived: DerivedField) -> bool:
        return derived in self.overrides and applies_to(derived, self.brokerage)

    def display_value(self, derived: DerivedField) -> str:
        """Text to show for a derived field: the pinned text or the computed amount."""
        if self.is_overridden(derived):
            return self.overrides[derived]
        return format_money(self.derived.value_of(derived))


KW_DEDUCTION_FIELDS = (
    "eo",
    "hoa_transfer",
    "home_warranty",
    "kw_cares",
    "kw_next_gen",
    "bold_scholarship",
    "tc_concierge",
    "jelmberg_team",
)
BDH_DEDUCTION_FIELDS = ("asf", "foundation10", "admin_fee")
UNIVERSAL_DEDUCTION_FIELDS = ("other_deductions", "buyers_agent_split")
DEDUCTION_FIELDS = KW_DEDUCTION_FIELDS + BDH_DEDUCTION_FIELDS + UNIVERSAL_DEDUCTION_FIELDS

NUMERIC_INPUT_FIELDS = (
    "closed_price",
    "commission_pct",
    "referral_pct",
    "referral_fee_received",
    "bdh_split_pct",
) + DEDUCTION_FIELDS
ENUM_INPUT_FIELDS = ("brokerage", "transaction_type")
RAW_INPUT_FIELDS = ENUM_INPUT_FIELDS + NUMERIC_INPUT_FIELDS

DERIVED_FIELD_NAMES = tuple(item.value for item in DerivedField)
# Computed but never editable
READ_ONLY_FIELDS = ("net_volume", "agent_split", "brokerage_portion")

DESCRIPTIVE_FIELDS = tuple(
    f.name
    for f in fields(TransactionRecord)
    if f.name not in RAW_INPUT_FIELDS and f.name not in ("derived", "overrides")
)


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


# Form and spreadsheet keys use the dashboard's camelCase names (``closedPrice``).
FIELD_ALIASES: dict[str, str] = {
    camel_case(name): name
    for name in RAW_INPUT_FIELDS + DERIVED_FIELD_NAMES + READ_ONLY_FIELDS + DESCRIPTIVE_FIELDS
}


def canonical_field_name(name: str) -> str:
    """Map a camelCase form key to the attribute name; snake_case passes through."""
    return FIELD_ALIASES.get(name, name)
