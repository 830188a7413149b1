from __future__ import annotations

import numpy as np
import pandas as pd

from rbf.core.timeline import deflator
from rbf.core.types import ScenarioResult

COST_CATEGORIES = ("upfront", "rent", "interest", "principal", "condominio", "iptu", "insurance")

_CATEGORY_COLUMNS = {
    "upfront": "Upfront",
    "rent": "Rent",
    "interest": "Interest",
    "principal": "Principal",
    "condominio": "Condo Fee",
    "iptu": "Property Tax",
    "insurance": "Insurance",
}


def safe_numeric_series(df: pd.DataFrame, col: str) -> pd.Series:
    if (df is not None) and (col in df.columns):
        try:
            return pd.to_numeric(df[col], errors="coerce").fillna(0.0).astype(float)
        except (TypeError, ValueError):
            return pd.Series(np.zeros(len(df), dtype=float), index=df.index, dtype=float)
    n = len(df) if df is not None else 0
    idx = getattr(df, "index", pd.RangeIndex(n))
    return pd.Series(np.zeros(n, dtype=float), index=idx, dtype=float)


def cost_breakdown(result: ScenarioResult, *, real: bool = False, inflation_rate: float | None = None) -> dict[str, float]:
    """Total spend per category, rebuilt from the monthly snapshots.

    With ``real=True`` each month's amount is divided by that month's
    inflation deflator, so ``inflation_rate`` (annual IPCA) is required.
    Upfront costs are deflated at the purchase month, the month before the
    snapshot that records them.
    """
    if real and inflation_rate is None:
        raise ValueError("inflation_rate is required for a real-valued cost breakdown")

    df = result.to_frame()
    factor = pd.Series(1.0, index=df.index, dtype=float)
    upfront_factor = factor
    if real and len(df):
        months = safe_numeric_series(df, "Month")
        factor = months.map(lambda m: 1.0 / deflator(inflation_rate, m))
        upfront_factor = months.map(lambda m: 1.0 / deflator(inflation_rate, max(int(m) - 1, 0)))

    out = {}
    for cat, col in _CATEGORY_COLUMNS.items():
        weights = upfront_factor if cat == "upfront" else factor
        out[cat] = float((safe_numeric_series(df, col) * weights).sum())
    # Nominal upfront comes from the summary field.
    if not real:
        out["upfront"] = float(result.upfront_cost)
    return out


def cost_breakdown_frame(results, *, real: bool = False, inflation_rate: float | None = None) -> pd.DataFrame:
    """One row per scenario, one column per cost category."""
    rows = []
    for r in results:
        row = {"Scenario": r.label}
        row.update(cost_breakdown(r, real=real, inflation_rate=inflation_rate))
        rows.append(row)
    return pd.DataFrame(rows, columns=["Scenario", *COST_CATEGORIES])
