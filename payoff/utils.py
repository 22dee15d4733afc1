# payoff/utils.py
import math
from typing import Any
from .config import get_settings

def safe_amount(x: Any) -> float:
    """Coerce anything numeric-ish to a finite float; malformed values (None, text, NaN, inf) become 0.0."""
    if isinstance(x, bool):
        return float(x)
    try:
        v = float(x)
    except (TypeError, ValueError):
        return 0.0
    return v if math.isfinite(v) else 0.0

def round_cents(x: float) -> float:
    return round(x, 2)

def money(x: float) -> str:
    symbol = get_settings().currency_symbol
    try:
        v = float(x)
    except (TypeError, ValueError):
        return "N/A"
    if not math.isfinite(v):
        return "N/A"
    sign = "-" if v < 0 else ""
    return f"{sign}{symbol}{abs(v):,.2f}"

def format_months(months: Any) -> str:
    # 30 -> "2 years, 6 months"; 0, NaN and inf have no meaningful duration
    try:
        m = float(months)
    except (TypeError, ValueError):
        return "N/A"
    if m <= 0 or not math.isfinite(m):
        return "N/A"
    years = int(m // 12)
    rem = math.ceil(m % 12)
    if years > 0 and rem > 0:
        return f"{years} year{'s' if years > 1 else ''}, {rem} month{'s' if rem > 1 else ''}"
    if years > 0:
        return f"{years} year{'s' if years > 1 else ''}"
    return f"{rem} month{'s' if rem > 1 else ''}"
