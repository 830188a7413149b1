"""Inflation-linked bond (Tesouro IPCA+) accumulation and net liquidation value.

Negative balances are allowed. When a scenario's monthly housing cost
exceeds the shared budget, the contribution passed to ``advance_investment``
is negative and the balance can drop below zero. A negative balance stands
for a funding shortfall (implicit borrowing) and is carried through
``net_investment_value`` and every wealth figure unchanged. Callers must not
clamp it at zero: doing so silently changes which strategy wins.
"""

from __future__ import annotations

from .constants import CUSTODY_FEE_ANNUAL, DAYS_PER_MONTH, IR_REGRESSIVE_TABLE
from .types import InvestmentState


def monthly_gross_rate(ipca: float, spread: float) -> float:
    """Monthly gross return of an IPCA + spread bond."""
    annual_gross = (1.0 + ipca) * (1.0 + spread) - 1.0
    return (1.0 + annual_gross) ** (1.0 / 12.0) - 1.0


def advance_investment(state: InvestmentState, monthly_rate: float, contribution: float = 0.0) -> InvestmentState:
    """Return the state one month later: growth on the gross balance plus a signed contribution."""
    growth = state.gross_balance * monthly_rate
    return InvestmentState(
        gross_balance=state.gross_balance + growth + contribution,
        total_contributed=state.total_contributed + contribution,
        months_elapsed=state.months_elapsed + 1,
    )


def withholding_rate(holding_days: float) -> float:
    """Income-tax withholding rate for a holding period, from the regressive table."""
    for max_days, rate in IR_REGRESSIVE_TABLE:
        if holding_days <= max_days:
            return rate
    return IR_REGRESSIVE_TABLE[-1][1]


def average_holding_days(months_elapsed: int) -> float:
    # Mean age of a stream of equal periodic contributions.
    return (months_elapsed / 2.0) * DAYS_PER_MONTH


def custody_fee(state: InvestmentState) -> float:
    avg_balance = (state.total_contributed + state.gross_balance) / 2.0
    return avg_balance * CUSTODY_FEE_ANNUAL * (state.months_elapsed / 12.0)


def net_investment_value(state: InvestmentState) -> float:
    """Value after withholding tax on gains and custody fees.

    With no gain (including any negative balance) the gross balance is
    returned untaxed.
    """
    gain = state.gross_balance - state.total_contributed
    if gain <= 0:
        return state.gross_balance

    tax = gain * withholding_rate(average_holding_days(state.months_elapsed))
    return state.gross_balance - tax - custody_fee(state)
