"""Number formatting for reports (pt-BR conventions: "R$ 1.234,56")."""

from __future__ import annotations

import math


def _swap_separators(s: str) -> str:
    return s.replace(",", "\x00").replace(".", ",").replace("\x00", ".")


def format_brl(value: float) -> str:
    if value is None or not math.isfinite(float(value)):
        return "—"
    v = float(value)
    sign = "-" if v < 0 else ""
    return f"{sign}R$ {_swap_separators(f'{abs(v):,.0f}')}"


def format_brl_cents(value: float) -> str:
    if value is None or not math.isfinite(float(value)):
        return "—"
    v = float(value)
    sign = "-" if v < 0 else ""
    return f"{sign}R$ {_swap_separators(f'{abs(v):,.2f}')}"


def format_percent(value: float) -> str:
    """Decimal fraction as a percent with 1-2 decimals (0.0999 -> "9,99%")."""
    if value is None or not math.isfinite(float(value)):
        return "—"
    s = f"{float(value) * 100:.2f}"
    if s.endswith("0") and "." in s:
        s = s[:-1]
    return f"{s.replace('.', ',')}%"


def format_brl_compact(value: float) -> str:
    if value is None or not math.isfinite(float(value)):
        return "—"
    v = float(value)
    a = abs(v)
    if a >= 1_000_000:
        return f"R$ {v / 1_000_000:.1f}M".replace(".", ",")
    if a >= 1_000:
        return f"R$ {v / 1_000:.0f}k"
    return format_brl(v)


def format_months(months: int) -> str:
    """Duration as "Ny Mm" (e.g. 27 -> "2y 3m"); "—" for zero."""
    m = int(months or 0)
    if m <= 0:
        return "—"
    return f"{m // 12}y {m % 12}m"
