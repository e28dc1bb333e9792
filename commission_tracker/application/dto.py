"""Application-level DTOs for listing transactions."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SortOrder(str, Enum):
    NEWEST = "newest"
    OLDEST = "oldest"


@dataclass(slots=True, frozen=True)
class TransactionFilter:
    """Dashboard filters; ``None`` means "all"."""

    year: int | None = None
    client_type: str | None = None
    brokerage: str | None = None
    property_type: str | None = None
    sort_order: SortOrder = SortOrder.NEWEST
