"""Rent, Buy Cash and Finance scenario engines."""

from __future__ import annotations

import pytest

from rbf.core.scenarios import (
    buy_cash_entry,
    calculate_buy_cash_scenario,
    calculate_finance_scenario,
    calculate_rent_scenario,
    finance_entry,
    finance_schedule,
    first_month_costs,
)
from rbf.core.shortfall_checks import detect_funding_shortfall
from rbf.core.types import Strategy, SimulationInputs

_BASE = SimulationInputs(current_capital=600_000.0, current_rent=2_500.0, monthly_savings=3_000.0)


class TestEntries:
    def test_buy_cash_entry(self) -> None:
        e = buy_cash_entry(SimulationInputs())
        assert e.effective_price == pytest.approx(450_000.0)
        assert e.total == pytest.approx(450_000.0 + 13_500.0 + 3_600.0 + 3_600.0)

    def test_finance_entry_without_fgts(self) -> None:
        e = finance_entry(SimulationInputs())
        assert e.loan_amount == pytest.approx(400_000.0)
        assert e.total == pytest.approx(100_000.0 + 15_000.0 + 4_000.0 + 3_000.0)

    def test_fgts_reduces_loan_not_cash_entry(self) -> None:
        e = finance_entry(SimulationInputs(use_fgts=True, fgts_amount=50_000.0))
        assert e.loan_amount == pytest.approx(350_000.0)
        assert e.total == pytest.approx(122_000.0)

    def test_fgts_ignored_when_disabled(self) -> None:
        e = finance_entry(SimulationInputs(use_fgts=False, fgts_amount=50_000.0))
        assert e.loan_amount == pytest.approx(400_000.0)

    def test_loan_never_negative(self) -> None:
        e = finance_entry(SimulationInputs(down_payment_percent=0.9, use_fgts=True, fgts_amount=100_000.0))
        assert e.loan_amount == 0.0

    def test_first_month_costs(self) -> None:
        costs = first_month_costs(SimulationInputs())
        assert costs[Strategy.RENT] == pytest.approx(2_615.0 + 800.0 + 250.0 + 50.0)
        assert costs[Strategy.BUY_CASH] == pytest.approx(1_050.0)
        assert costs[Strategy.FINANCE] > costs[Strategy.BUY_CASH]


class TestRent:
    def test_horizon_and_spend(self) -> None:
        res = calculate_rent_scenario(_BASE, 5_000.0)
        assert len(res.monthly_snapshots) == _BASE.total_months
        spent = [s.total_spent for s in res.monthly_snapshots]
        assert spent == sorted(spent)
        assert res.upfront_cost == 0.0
        assert res.savings_phase_months == 0

    def test_rent_steps_up_yearly(self) -> None:
        res = calculate_rent_scenario(_BASE, 5_000.0)
        snaps = res.monthly_snapshots
        assert snaps[0].rent_paid == snaps[11].rent_paid
        assert snaps[12].rent_paid == pytest.approx(snaps[0].rent_paid * 1.055)

    def test_real_below_nominal(self) -> None:
        res = calculate_rent_scenario(_BASE, 5_000.0)
        assert res.final_wealth > 0
        assert res.final_wealth_real < res.final_wealth
        assert res.total_spent_real < res.total_spent


class TestBuyCash:
    def test_buys_immediately_with_enough_capital(self) -> None:
        res = calculate_buy_cash_scenario(_BASE, 5_000.0)
        entry = buy_cash_entry(_BASE)
        assert res.reached_entry
        assert res.savings_phase_months == 0
        assert res.upfront_cost == pytest.approx(entry.total)
        assert res.monthly_snapshots[0].upfront_paid == pytest.approx(entry.total)
        assert res.monthly_snapshots[1].upfront_paid == 0.0
        assert len(res.monthly_snapshots) == _BASE.total_months

    def test_property_appreciates(self) -> None:
        res = calculate_buy_cash_scenario(_BASE, 5_000.0)
        values = [s.property_value for s in res.monthly_snapshots]
        assert values[-1] > values[0] > _BASE.property_value

    def test_saves_first_when_capital_short(self) -> None:
        inputs = _BASE.with_overrides(current_capital=100_000.0)
        res = calculate_buy_cash_scenario(inputs, 8_000.0)
        assert res.reached_entry
        assert 0 < res.savings_phase_months < inputs.total_months
        k = res.savings_phase_months
        assert res.monthly_snapshots[k - 1].property_value == 0.0
        assert res.monthly_snapshots[k].upfront_paid == pytest.approx(res.upfront_cost)
        assert len(res.monthly_snapshots) == inputs.total_months

    def test_savings_only_result_when_entry_never_reached(self) -> None:
        inputs = SimulationInputs(current_capital=0.0, current_rent=2_000.0, time_horizon_years=5)
        res = calculate_buy_cash_scenario(inputs, 2_000.0)
        assert not res.reached_entry
        assert res.upfront_cost == 0.0
        assert res.savings_phase_months == inputs.total_months
        assert len(res.monthly_snapshots) == inputs.total_months
        assert all(s.property_value == 0.0 for s in res.monthly_snapshots)


class TestFinance:
    def test_interest_and_debt(self) -> None:
        res = calculate_finance_scenario(_BASE, 6_000.0)
        assert res.total_interest_paid > 0
        # 30-year term over a 20-year horizon leaves a balance.
        assert res.monthly_snapshots[-1].outstanding_debt > 0

    def test_payments_stop_after_term(self) -> None:
        inputs = _BASE.with_overrides(financing_term_years=10)
        res = calculate_finance_scenario(inputs, 6_000.0)
        snaps = res.monthly_snapshots
        assert snaps[119].mortgage_payment > 0
        assert snaps[120].mortgage_payment == 0.0
        assert snaps[120].outstanding_debt == 0.0

    def test_interest_counts_only_rows_inside_horizon(self) -> None:
        short = calculate_finance_scenario(_BASE.with_overrides(time_horizon_years=5), 6_000.0)
        long = calculate_finance_scenario(_BASE.with_overrides(time_horizon_years=10), 6_000.0)
        assert short.total_interest_paid < long.total_interest_paid

    def test_schedule_starts_at_purchase_month(self) -> None:
        inputs = _BASE.with_overrides(current_capital=50_000.0, time_horizon_years=10)
        res = calculate_finance_scenario(inputs, 6_000.0)
        k = res.savings_phase_months
        assert 0 < k < inputs.total_months
        schedule = finance_schedule(inputs)
        snaps = res.monthly_snapshots
        assert snaps[k - 1].mortgage_payment == 0.0
        assert snaps[k].month == k + 1
        assert snaps[k].mortgage_payment == pytest.approx(schedule[0].payment)
        assert res.total_interest_paid == pytest.approx(sum(r.interest for r in schedule[: inputs.total_months - k]))

    def test_shortfall_keeps_negative_balance(self) -> None:
        entry = finance_entry(_BASE).total
        inputs = _BASE.with_overrides(current_capital=entry)
        res = calculate_finance_scenario(inputs, 1_000.0)
        assert min(s.investment_balance for s in res.monthly_snapshots) < 0
        analysis = detect_funding_shortfall(res.to_frame())
        assert analysis["ever_negative"]
        assert analysis["disinvesting_months"] > 0

    def test_deterministic(self) -> None:
        a = calculate_finance_scenario(_BASE, 6_000.0)
        b = calculate_finance_scenario(_BASE, 6_000.0)
        assert a == b
