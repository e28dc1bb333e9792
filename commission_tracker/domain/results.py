"""Domain-level results for the dashboard views."""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class DashboardMetrics:
    total_gci: Decimal
    total_nci: Decimal
    total_transactions: int
    avg_commission: Decimal
    total_volume: Decimal
    total_referral_fees: Decimal


@dataclass(frozen=True)
class MonthlyTotal:
    period: str
    label: str
    gci: Decimal
    nci: Decimal
    transactions: int


@dataclass(frozen=True)
class BreakdownSlice:
    name: str
    value: Decimal | int


@dataclass(frozen=True)
class Insight:
    label: str
    value: str
    subtext: str
