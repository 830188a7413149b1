"""Month/year bookkeeping shared by the savings phase and scenario engines.

Months are 1-based. Recurring amounts step up at the first month of each new
year (13, 25, ...), before that month's flows.
"""

from __future__ import annotations


def year_of_month(month: int) -> int:
    return (int(month) - 1) // 12 + 1


def annual_step_up(base: float, annual_rate: float, month: int) -> float:
    """Value of a yearly-adjusted amount in ``month``."""
    return float(base) * (1.0 + annual_rate) ** ((int(month) - 1) // 12)


def deflator(annual_inflation: float, month: int) -> float:
    """Compounded inflation factor from month 0 to ``month``."""
    return (1.0 + annual_inflation) ** (int(month) / 12.0)


def monthly_appreciation_rate(real_annual: float, inflation_annual: float) -> float:
    """Nominal monthly property appreciation from a real rate and inflation."""
    return ((1.0 + real_annual) * (1.0 + inflation_annual)) ** (1.0 / 12.0) - 1.0
