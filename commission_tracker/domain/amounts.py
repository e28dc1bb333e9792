"""Forgiving numeric parsing and money formatting shared by the engine."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")
RATE_QUANTUM = Decimal("0.0001")
# Form amounts live between 1e-10 and 1e16; anything outside is treated as unusable.
MAX_EXPONENT = 15
MIN_EXPONENT = -10
# Enough digits to quantize any product of in-range amounts.
WORKING_PRECISION = 80


def parse_amount(value: object, default: Decimal = ZERO) -> Decimal:
    """Parse form text into a Decimal, returning ``default`` for anything unusable.

    Empty strings, garbage, NaN, infinities and implausibly large or tiny
    magnitudes all fall back to ``default``.
    Currency symbols, thousands separators and a trailing percent sign are
    ignored; an accounting-style ``(1,200)`` is read as negative.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, Decimal):
        return value if _in_range(value) else default
    if isinstance(value, int):
        result = Decimal(value)
        return result if _in_range(result) else default
    s = str(value).strip()
    if not s or s.upper() == "NAN":
        return default
    negative = False
    if s.startswith("(") and s.endswith(")"):
        negative = True
        s = s[1:-1]
    for ch in [",", "$", "%", " "]:
        s = s.replace(ch, "")
    try:
        result = Decimal(s)
    except InvalidOperation:
        return default
    if not _in_range(result):
        return default
    if negative:
        result = -result
    return result


def _in_range(value: Decimal) -> bool:
    if not value.is_finite():
        return False
    return value.is_zero() or MIN_EXPONENT <= value.adjusted() <= MAX_EXPONENT


def quantize_money(value: Decimal) -> Decimal:
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        result = value.quantize(CENT, rounding=ROUND_HALF_UP)
    # -0.00 reads badly on a form
    if result.is_zero():
        return ZERO.quantize(CENT)
    return result


def format_money(value: Decimal | None) -> str:
    if value is None:
        return ""
    return format(quantize_money(value), "f")


def format_rate(value: Decimal) -> str:
    """Render a back-filled percentage compactly, e.g. ``3`` or ``2.5``."""
    with localcontext() as ctx:
        ctx.prec = WORKING_PRECISION
        text = format(value.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        return "0"
    return text
