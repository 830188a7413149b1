"""Simulation orchestrator: shared budget, three scenarios, ranking and chart series.

Budget policy
-------------
All three strategies draw on one shared monthly budget. Two policies are
available and they are not equivalent:

* ``MAX_FIRST_MONTH_COST`` (default): the largest first-month housing cost
  among the strategies. No strategy is structurally starved in month 1, so
  none starts by disinvesting just to pay for housing. The household's
  stated savings capacity does not enter the budget.
* ``RENT_PLUS_SAVINGS``: what the household spends on rent today plus what
  it can save. This reflects actual affordability, but when a strategy's
  first-month cost exceeds it (typically the first mortgage installment)
  that strategy runs a shortfall from month 1 and its investment balance
  may go negative, which can change the winner.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

import numpy as np
import pandas as pd

from .scenarios import (
    buy_cash_entry,
    calculate_buy_cash_scenario,
    calculate_finance_scenario,
    calculate_rent_scenario,
    first_month_costs,
)
from .types import STRATEGY_LABELS, ScenarioResult, SimulationInputs, SimulationResults, Strategy

logger = logging.getLogger(__name__)


class BudgetPolicy(str, Enum):
    MAX_FIRST_MONTH_COST = "max_first_month_cost"
    RENT_PLUS_SAVINGS = "rent_plus_savings"


class ChartBaseline(str, Enum):
    STARTING_CAPITAL = "starting_capital"
    ACQUISITION_COST = "acquisition_cost"


def budget_max_first_month_cost(inputs: SimulationInputs) -> float:
    return max(first_month_costs(inputs).values())


def budget_rent_plus_savings(inputs: SimulationInputs) -> float:
    return float(inputs.current_rent) + float(inputs.monthly_savings)


BUDGET_POLICIES: dict[BudgetPolicy, Callable[[SimulationInputs], float]] = {
    BudgetPolicy.MAX_FIRST_MONTH_COST: budget_max_first_month_cost,
    BudgetPolicy.RENT_PLUS_SAVINGS: budget_rent_plus_savings,
}


def monthly_budget(inputs: SimulationInputs, policy: BudgetPolicy = BudgetPolicy.MAX_FIRST_MONTH_COST) -> float:
    policy = BudgetPolicy(policy)
    try:
        fn = BUDGET_POLICIES[policy]
    except KeyError:
        raise ValueError(f"Unhandled budget policy: {policy!r}") from None
    return fn(inputs)


def _chart_baseline_value(inputs: SimulationInputs, baseline: ChartBaseline) -> float:
    if baseline is ChartBaseline.STARTING_CAPITAL:
        return float(inputs.current_capital)
    if baseline is ChartBaseline.ACQUISITION_COST:
        return buy_cash_entry(inputs.with_overrides(cash_discount_percent=0.0)).total
    raise ValueError(f"Unhandled chart baseline: {baseline!r}")


def build_chart_data(
    inputs: SimulationInputs,
    scenarios: tuple[ScenarioResult, ...],
    *,
    baseline: ChartBaseline = ChartBaseline.STARTING_CAPITAL,
) -> pd.DataFrame:
    """Yearly wealth per strategy, with a common year-0 baseline."""
    real = bool(inputs.show_real_values)
    years = int(inputs.time_horizon_years)
    start = _chart_baseline_value(inputs, ChartBaseline(baseline))

    data: dict[str, list[float] | range] = {"Year": range(0, years + 1)}
    for result in scenarios:
        col = [start]
        for y in range(1, years + 1):
            idx = y * 12 - 1
            if idx < len(result.monthly_snapshots):
                snap = result.monthly_snapshots[idx]
                col.append(snap.total_wealth_real if real else snap.total_wealth)
            else:
                col.append(np.nan)
        data[result.label] = col
    return pd.DataFrame(data)


def rank_scenarios(scenarios: tuple[ScenarioResult, ...], *, real: bool) -> list[ScenarioResult]:
    """Order by final wealth, best first. Ties keep the Rent, Buy Cash, Finance order."""
    return sorted(scenarios, key=lambda r: r.wealth(real), reverse=True)


def run_simulation(
    inputs: SimulationInputs,
    *,
    budget_policy: BudgetPolicy = BudgetPolicy.MAX_FIRST_MONTH_COST,
    chart_baseline: ChartBaseline = ChartBaseline.STARTING_CAPITAL,
) -> SimulationResults:
    """Run the Rent, Buy Cash and Finance scenarios and pick a winner.

    Pure function of its arguments: identical inputs give identical results.

    Raises:
        InvalidLoanTermError: if the financing term is shorter than one month.
    """
    policy = BudgetPolicy(budget_policy)
    budget = monthly_budget(inputs, policy)
    logger.debug("Monthly budget %.2f (%s)", budget, policy.value)

    rent = calculate_rent_scenario(inputs, budget)
    buy_cash = calculate_buy_cash_scenario(inputs, budget)
    finance = calculate_finance_scenario(inputs, budget)
    scenarios = (rent, buy_cash, finance)

    real = bool(inputs.show_real_values)
    ranked = rank_scenarios(scenarios, real=real)
    best, runner_up = ranked[0], ranked[1]
    advantage = best.wealth(real) - runner_up.wealth(real)
    base = abs(runner_up.wealth(real))
    advantage_percent = (advantage / base * 100.0) if base > 0 else 0.0

    logger.debug(
        "Winner %s by %.2f (%.2f%%) over %s",
        best.name.value,
        advantage,
        advantage_percent,
        runner_up.name.value,
    )

    return SimulationResults(
        rent=rent,
        buy_cash=buy_cash,
        finance=finance,
        winner=best.name,
        winner_label=STRATEGY_LABELS[best.name],
        advantage=advantage,
        advantage_percent=advantage_percent,
        chart_data=build_chart_data(inputs, scenarios, baseline=chart_baseline),
        starting_capital=float(inputs.current_capital),
        monthly_budget=budget,
        monthly_savings=float(inputs.monthly_savings),
        budget_policy=policy.value,
    )


def results_summary(results: SimulationResults, *, real: bool = False) -> dict:
    """Compact JSON-friendly summary of a run."""
    out: dict = {
        "winner": results.winner.value,
        "winner_label": results.winner_label,
        "advantage": round(results.advantage, 2),
        "advantage_percent": round(results.advantage_percent, 2),
        "monthly_budget": round(results.monthly_budget, 2),
        "budget_policy": results.budget_policy,
        "starting_capital": round(results.starting_capital, 2),
        "scenarios": {},
    }
    for r in results.scenarios:
        out["scenarios"][r.name.value] = {
            "label": r.label,
            "final_wealth": round(r.wealth(real), 2),
            "total_spent": round(r.total_spent_real if real else r.total_spent, 2),
            "avg_monthly_cost": round(
                r.effective_monthly_avg_cost_real if real else r.effective_monthly_avg_cost, 2
            ),
            "total_interest_paid": round(r.total_interest_paid, 2),
            "upfront_cost": round(r.upfront_cost, 2),
            "savings_phase_months": int(r.savings_phase_months),
            "reached_entry": bool(r.reached_entry),
        }
    return out
