"""Central configuration for the commission tracker package."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from commission_tracker.domain.models import CommissionRates

BASE_DIR = Path(__file__).resolve().parent.parent
DATA_DIR = BASE_DIR / "data"


@dataclass(slots=True, frozen=True)
class Settings:
    rates: CommissionRates
    data_dir: Path
    store_path: Path
    workbook_path: Path
    sheet_name: str


SETTINGS = Settings(
    rates=CommissionRates(),
    data_dir=DATA_DIR,
    store_path=DATA_DIR / "transactions.json",
    workbook_path=DATA_DIR / "transactions.xlsx",
    sheet_name="Transactions",
)
