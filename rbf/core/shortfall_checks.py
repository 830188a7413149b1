"""Helpers for detecting funding shortfalls (negative investment balances).

The engine lets an investment balance go below zero when a scenario's
housing cost exceeds the shared budget. These functions analyze a scenario
frame (``ScenarioResult.to_frame()``) AFTER simulation to surface that
condition to the user.
"""
from __future__ import annotations

from typing import Any

import pandas as pd

_BALANCE_COL = "Investments (Net)"
_CONTRIB_COL = "Contribution"


def detect_funding_shortfall(df: pd.DataFrame) -> dict[str, Any]:
    """Analyze a scenario frame for months with a negative investment balance.

    Args:
        df: Frame from ``ScenarioResult.to_frame()``.

    Returns:
        Dict with keys:
        - ever_negative: bool, True if the balance was negative at any point
        - negative_months: int, number of months with a negative balance
        - disinvesting_months: int, months with a negative contribution
        - worst_balance: float, the lowest balance observed
        - worst_month: int, the month when the balance was lowest (0 if never negative)
        - recovered: bool, True if the balance is non-negative at the end
        - final_balance: float, balance at the last month
    """
    result = {
        "ever_negative": False,
        "negative_months": 0,
        "disinvesting_months": 0,
        "worst_balance": 0.0,
        "worst_month": 0,
        "recovered": True,
        "final_balance": 0.0,
    }

    if df is None or _BALANCE_COL not in df.columns or len(df) == 0:
        return result

    balance = pd.to_numeric(df[_BALANCE_COL], errors="coerce").fillna(0.0)
    negative = balance < 0
    result["ever_negative"] = bool(negative.any())
    result["negative_months"] = int(negative.sum())
    result["worst_balance"] = float(balance.min())
    if result["ever_negative"]:
        pos = int(balance.to_numpy().argmin())
        result["worst_month"] = int(df["Month"].iloc[pos]) if "Month" in df.columns else pos + 1
    result["final_balance"] = float(balance.iloc[-1])
    result["recovered"] = not bool(negative.iloc[-1])

    if _CONTRIB_COL in df.columns:
        contrib = pd.to_numeric(df[_CONTRIB_COL], errors="coerce").fillna(0.0)
        result["disinvesting_months"] = int((contrib < 0).sum())

    return result


def format_shortfall_warning(label: str, analysis: dict[str, Any]) -> str | None:
    """User-facing warning for a scenario that ran a shortfall, or None."""
    if not analysis.get("ever_negative", False):
        return None

    msg = (
        f"{label}: investments go negative (funding shortfall) for {analysis['negative_months']} month(s). "
        f"Worst point: R${analysis['worst_balance']:,.0f} at month {analysis['worst_month']}."
    )
    if analysis["recovered"]:
        msg += " The balance recovers by the end of the horizon."
    else:
        msg += f" Still negative at the end (R${analysis['final_balance']:,.0f})."
    return msg
