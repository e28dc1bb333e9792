"""Shared helpers for reading uploaded or on-disk sources."""
from __future__ import annotations

from io import BytesIO
from pathlib import Path

import pandas as pd


def ensure_bytes(source: BytesIO | Path | bytes) -> bytes:
    if isinstance(source, bytes):
        return source
    if isinstance(source, BytesIO):
        return source.getvalue()
    if isinstance(source, Path):
        return source.read_bytes()
    raise TypeError(f"Unsupported source type: {type(source)!r}")


def cell_text(value: object) -> str:
    """Normalise a spreadsheet or JSON cell to the text a form field would hold."""
    if value is None:
        return ""
    if isinstance(value, float) and pd.isna(value):
        return ""
    return str(value).strip()
