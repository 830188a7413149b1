"""Scenario engines: Rent, Buy Cash and Finance.

All three share one shape:

1. compute the strategy's entry cost;
2. run the savings phase until the household has that much capital
   (renting needs no entry, so it skips straight to step 4);
3. if saving consumed the whole horizon, report a savings-only result;
4. otherwise seed a fresh investment with ``capital_at_entry - entry_cost``
   (possibly negative) and advance month by month, investing the signed
   surplus ``budget - housing outflow``.

Wealth each month is property value minus outstanding debt minus the capital
gains tax that a sale that month would trigger, plus the net investment
value. Month numbers are absolute simulation months, so yearly step-ups of
condo fees, property tax, rent and budget keep running through the savings
phase into ownership.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .investment import advance_investment, monthly_gross_rate, net_investment_value
from .mortgage import generate_schedule
from .savings_phase import SavingsPhaseResult, calculate_savings_phase
from .taxes import calculate_capital_gains_tax, closing_costs
from .timeline import annual_step_up, deflator, monthly_appreciation_rate, year_of_month
from .types import (
    STRATEGY_LABELS,
    AmortizationRow,
    InvestmentState,
    MonthlySnapshot,
    ScenarioResult,
    SimulationInputs,
    Strategy,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Entry costs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BuyCashEntry:
    effective_price: float
    itbi: float
    escritura: float
    registro: float

    @property
    def total(self) -> float:
        return self.effective_price + self.itbi + self.escritura + self.registro


@dataclass(frozen=True)
class FinanceEntry:
    """Cash needed to close a financed purchase.

    The subsidized fund (FGTS) adds to the down payment from outside the
    household's invested capital, so it lowers the loan without being part of
    the cash entry cost.
    """

    down_payment: float
    fgts_applied: float
    loan_amount: float
    itbi: float
    registro: float
    appraisal_fee: float

    @property
    def total(self) -> float:
        return self.down_payment + self.itbi + self.registro + self.appraisal_fee


def buy_cash_entry(inputs: SimulationInputs) -> BuyCashEntry:
    """Discounted price plus transfer tax, deed and registry fees on that price."""
    price = inputs.property_value * (1.0 - inputs.cash_discount_percent)
    costs = closing_costs(price, inputs.itbi_rate, inputs.escritura_rate, inputs.registro_rate)
    return BuyCashEntry(
        effective_price=price,
        itbi=costs["itbi"],
        escritura=costs["escritura"],
        registro=costs["registro"],
    )


def finance_entry(inputs: SimulationInputs) -> FinanceEntry:
    """Down payment plus transfer tax, registry and appraisal fees.

    No deed fee: the bank's loan contract replaces it.
    """
    price = inputs.property_value
    down = price * inputs.down_payment_percent
    fgts = inputs.fgts_applied
    costs = closing_costs(price, inputs.itbi_rate, 0.0, inputs.registro_rate)
    return FinanceEntry(
        down_payment=down,
        fgts_applied=fgts,
        loan_amount=max(0.0, price - down - fgts),
        itbi=costs["itbi"],
        registro=costs["registro"],
        appraisal_fee=float(inputs.appraisal_fee),
    )


def finance_schedule(inputs: SimulationInputs) -> list[AmortizationRow]:
    """Full-term amortization schedule for the financed purchase."""
    return generate_schedule(
        inputs.amortization_type,
        finance_entry(inputs).loan_amount,
        inputs.financing_rate,
        inputs.financing_months,
        inputs.property_value,
        inputs.mip_rate,
        inputs.dfi_rate,
        inputs.admin_fee_monthly,
    )


def first_month_costs(inputs: SimulationInputs) -> dict[Strategy, float]:
    """Total housing outflow of each strategy in month 1."""
    condo = inputs.condominio_monthly
    iptu = inputs.property_value * inputs.iptu_rate / 12.0
    schedule = finance_schedule(inputs)
    first_payment = schedule[0].payment if schedule else 0.0
    return {
        Strategy.RENT: inputs.monthly_rent + condo + iptu + inputs.renter_insurance_monthly,
        Strategy.BUY_CASH: condo + iptu,
        Strategy.FINANCE: first_payment + condo + iptu,
    }


# ---------------------------------------------------------------------------
# Shared machinery
# ---------------------------------------------------------------------------


def _summarize(
    strategy: Strategy,
    snapshots: Sequence[MonthlySnapshot],
    total_months: int,
    *,
    total_interest_paid: float,
    upfront_cost: float,
    savings_phase_months: int,
    reached_entry: bool,
) -> ScenarioResult:
    last = snapshots[-1] if snapshots else MonthlySnapshot(month=0, year=0)
    months = max(1, int(total_months))
    return ScenarioResult(
        name=strategy,
        label=STRATEGY_LABELS[strategy],
        monthly_snapshots=tuple(snapshots),
        final_wealth=last.total_wealth,
        final_wealth_real=last.total_wealth_real,
        total_spent=last.total_spent,
        total_spent_real=last.total_spent_real,
        effective_monthly_avg_cost=last.total_spent / months,
        effective_monthly_avg_cost_real=last.total_spent_real / months,
        total_interest_paid=total_interest_paid,
        upfront_cost=upfront_cost,
        savings_phase_months=savings_phase_months,
        reached_entry=reached_entry,
    )


def _savings_for(inputs: SimulationInputs, monthly_budget: float, entry_cost: float) -> SavingsPhaseResult:
    return calculate_savings_phase(
        inputs.current_capital,
        inputs.current_rent,
        monthly_budget,
        entry_cost,
        monthly_gross_rate(inputs.ipca_rate, inputs.tesouro_spread),
        inputs.ipca_rate,
        inputs.total_months,
        inputs.effective_rent_adjustment_rate(),
    )


def _run_ownership(
    strategy: Strategy,
    inputs: SimulationInputs,
    monthly_budget: float,
    entry_cost: float,
    schedule: Sequence[AmortizationRow] = (),
) -> ScenarioResult:
    total_months = inputs.total_months
    savings = _savings_for(inputs, monthly_budget, entry_cost)
    k = savings.months

    if not savings.reached_target or k >= total_months:
        logger.debug("%s: horizon consumed by savings phase (%d months)", strategy.value, k)
        return _summarize(
            strategy,
            savings.snapshots,
            total_months,
            total_interest_paid=0.0,
            upfront_cost=0.0,
            savings_phase_months=k,
            reached_entry=False,
        )

    inv_rate = monthly_gross_rate(inputs.ipca_rate, inputs.tesouro_spread)
    appreciation = monthly_appreciation_rate(inputs.property_appreciation_rate, inputs.ipca_rate)
    basis = inputs.property_value
    iptu_annual = inputs.property_value * inputs.iptu_rate

    investment = InvestmentState.seeded(savings.capital - entry_cost)
    property_value = inputs.property_value
    total_spent = savings.total_rent_paid + entry_cost
    total_spent_real = savings.total_spent_real + entry_cost / deflator(inputs.ipca_rate, k)
    total_interest = 0.0
    snapshots = list(savings.snapshots)

    for m in range(k + 1, total_months + 1):
        j = m - k
        condo = annual_step_up(inputs.condominio_monthly, inputs.igpm_rate, m)
        iptu = annual_step_up(iptu_annual, inputs.ipca_rate, m) / 12.0
        budget = annual_step_up(monthly_budget, inputs.ipca_rate, m)
        defl = deflator(inputs.ipca_rate, m)

        property_value *= 1.0 + appreciation

        row = schedule[j - 1] if j <= len(schedule) else None
        mortgage_payment = row.payment if row is not None else 0.0
        outstanding_debt = row.outstanding_balance if row is not None else 0.0
        if row is not None:
            total_interest += row.interest

        outflow = mortgage_payment + condo + iptu
        total_spent += outflow
        total_spent_real += outflow / defl

        surplus = budget - outflow
        investment = advance_investment(investment, inv_rate, surplus)

        cgt = calculate_capital_gains_tax(property_value - basis, property_value, inputs.is_first_property)
        net_inv = net_investment_value(investment)
        wealth = property_value - outstanding_debt - cgt + net_inv

        snapshots.append(
            MonthlySnapshot(
                month=m,
                year=year_of_month(m),
                mortgage_payment=mortgage_payment,
                principal_paid=row.principal if row is not None else 0.0,
                interest_paid=row.interest if row is not None else 0.0,
                insurance_paid=row.insurance if row is not None else 0.0,
                condominio_payment=condo,
                iptu_payment=iptu,
                upfront_paid=entry_cost if j == 1 else 0.0,
                investment_balance=net_inv,
                investment_contribution=surplus,
                property_value=property_value,
                outstanding_debt=outstanding_debt,
                capital_gains_tax=cgt,
                total_wealth=wealth,
                total_spent=total_spent,
                total_wealth_real=wealth / defl,
                total_spent_real=total_spent_real,
            )
        )

    return _summarize(
        strategy,
        snapshots,
        total_months,
        total_interest_paid=total_interest,
        upfront_cost=entry_cost,
        savings_phase_months=k,
        reached_entry=True,
    )


# ---------------------------------------------------------------------------
# Public engines
# ---------------------------------------------------------------------------


def calculate_rent_scenario(inputs: SimulationInputs, monthly_budget: float) -> ScenarioResult:
    """Rent the reference property for the whole horizon, investing current capital.

    The renter also pays condo fees and property tax so the comparison stays
    on the same reference property as the ownership strategies.
    """
    total_months = inputs.total_months
    inv_rate = monthly_gross_rate(inputs.ipca_rate, inputs.tesouro_spread)
    rent_growth = inputs.effective_rent_adjustment_rate()
    iptu_annual = inputs.property_value * inputs.iptu_rate
    insurance = inputs.renter_insurance_monthly

    investment = InvestmentState.seeded(inputs.current_capital)
    total_spent = 0.0
    total_spent_real = 0.0
    snapshots: list[MonthlySnapshot] = []

    for m in range(1, total_months + 1):
        rent = annual_step_up(inputs.monthly_rent, rent_growth, m)
        condo = annual_step_up(inputs.condominio_monthly, inputs.igpm_rate, m)
        iptu = annual_step_up(iptu_annual, inputs.ipca_rate, m) / 12.0
        budget = annual_step_up(monthly_budget, inputs.ipca_rate, m)
        defl = deflator(inputs.ipca_rate, m)

        outflow = rent + condo + iptu + insurance
        total_spent += outflow
        total_spent_real += outflow / defl

        surplus = budget - outflow
        investment = advance_investment(investment, inv_rate, surplus)
        net_wealth = net_investment_value(investment)

        snapshots.append(
            MonthlySnapshot(
                month=m,
                year=year_of_month(m),
                rent_paid=rent,
                insurance_paid=insurance,
                condominio_payment=condo,
                iptu_payment=iptu,
                investment_balance=net_wealth,
                investment_contribution=surplus,
                total_wealth=net_wealth,
                total_spent=total_spent,
                total_wealth_real=net_wealth / defl,
                total_spent_real=total_spent_real,
            )
        )

    return _summarize(
        Strategy.RENT,
        snapshots,
        total_months,
        total_interest_paid=0.0,
        upfront_cost=0.0,
        savings_phase_months=0,
        reached_entry=True,
    )


def calculate_buy_cash_scenario(inputs: SimulationInputs, monthly_budget: float) -> ScenarioResult:
    """Save up for the discounted price plus closing costs, then own outright."""
    entry = buy_cash_entry(inputs)
    return _run_ownership(Strategy.BUY_CASH, inputs, monthly_budget, entry.total)


def calculate_finance_scenario(inputs: SimulationInputs, monthly_budget: float) -> ScenarioResult:
    """Save up for the down payment and fees, then pay the mortgage.

    The schedule is generated once for the full term. Payments stop when the
    term ends even if the horizon continues, and only the rows consumed inside
    the horizon count towards total interest.
    """
    entry = finance_entry(inputs)
    schedule = finance_schedule(inputs)
    return _run_ownership(Strategy.FINANCE, inputs, monthly_budget, entry.total, schedule)
