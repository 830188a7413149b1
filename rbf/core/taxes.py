"""Capital gains tax on property sales and closing-cost helpers."""

from __future__ import annotations

import math

from .constants import CAPITAL_GAINS_EXEMPTION_PRICE, CAPITAL_GAINS_TABLE


def _safe_float(value: float | int | str | None, default: float = 0.0) -> float:
    """Return a finite float, otherwise ``default``."""
    try:
        x = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return float(default)
    return x if math.isfinite(x) else float(default)


def calculate_capital_gains_tax(nominal_gain: float, sale_price: float, is_only_property: bool = False) -> float:
    """Progressive capital gains tax on a property sale.

    Each bracket taxes only the slice of gain that falls inside it, so a gain
    spanning several brackets is never taxed at a single flat rate.

    Args:
        nominal_gain: Sale price minus acquisition basis (nominal).
        sale_price: Gross sale price.
        is_only_property: Whether the seller owns no other property. Sole-property
            sales at or below the exemption price are tax free.

    Returns:
        Tax due (always >= 0).
    """
    gain = _safe_float(nominal_gain)
    if gain <= 0.0:
        return 0.0

    if is_only_property and _safe_float(sale_price) <= CAPITAL_GAINS_EXEMPTION_PRICE:
        return 0.0

    tax = 0.0
    prev = 0.0
    remaining = gain
    for ceiling, rate in CAPITAL_GAINS_TABLE:
        taxable = min(remaining, ceiling - prev)
        if taxable <= 0:
            break
        tax += taxable * rate
        remaining -= taxable
        prev = ceiling
    return tax


def closing_costs(base_price: float, itbi_rate: float, escritura_rate: float = 0.0, registro_rate: float = 0.0) -> dict[str, float]:
    """Transfer tax (ITBI), deed (escritura) and registry fees on ``base_price``."""
    p = max(0.0, _safe_float(base_price))
    itbi = p * _safe_float(itbi_rate)
    escritura = p * _safe_float(escritura_rate)
    registro = p * _safe_float(registro_rate)
    return {
        "itbi": itbi,
        "escritura": escritura,
        "registro": registro,
        "total": itbi + escritura + registro,
    }
