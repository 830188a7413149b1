"""Amortization schedule tests (SAC and PRICE)."""

from __future__ import annotations

import pytest

from rbf.core.mortgage import (
    InvalidLoanTermError,
    annual_to_monthly_rate,
    generate_price_schedule,
    generate_sac_schedule,
    generate_schedule,
)
from rbf.core.types import AmortizationType

_LOAN = 400_000.0
_ARGS = (_LOAN, 0.0999, 360, 500_000.0, 0.0003, 0.00015, 25.0)


class TestMonthlyRate:
    def test_compound_conversion(self) -> None:
        assert annual_to_monthly_rate(0.12) == pytest.approx(1.12 ** (1 / 12) - 1)

    def test_zero(self) -> None:
        assert annual_to_monthly_rate(0.0) == 0.0


class TestSAC:
    def test_row_count(self) -> None:
        assert len(generate_sac_schedule(*_ARGS)) == 360

    def test_constant_principal(self) -> None:
        rows = generate_sac_schedule(*_ARGS)
        for row in rows:
            assert row.principal == pytest.approx(_LOAN / 360)
        assert rows[0].principal == pytest.approx(1111.11, abs=0.01)

    def test_principal_sums_to_loan(self) -> None:
        rows = generate_sac_schedule(*_ARGS)
        assert sum(r.principal for r in rows) == pytest.approx(_LOAN)

    def test_final_balance_zero(self) -> None:
        rows = generate_sac_schedule(*_ARGS)
        assert rows[-1].outstanding_balance == pytest.approx(0.0, abs=1e-6)
        assert all(r.outstanding_balance >= 0.0 for r in rows)

    def test_payment_declines(self) -> None:
        rows = generate_sac_schedule(*_ARGS)
        assert rows[0].payment > rows[179].payment > rows[-1].payment

    def test_payment_components(self) -> None:
        row = generate_sac_schedule(*_ARGS)[0]
        assert row.payment == pytest.approx(row.principal + row.interest + row.insurance + row.admin_fee)
        assert row.insurance == pytest.approx(_LOAN * 0.0003 + 500_000.0 * 0.00015)


class TestPRICE:
    def test_row_count(self) -> None:
        assert len(generate_price_schedule(*_ARGS)) == 360

    def test_base_installment_constant(self) -> None:
        rows = generate_price_schedule(*_ARGS)
        base = [r.payment - r.insurance - r.admin_fee for r in rows]
        assert max(base) == pytest.approx(min(base))

    def test_principal_grows(self) -> None:
        rows = generate_price_schedule(*_ARGS)
        assert rows[0].principal < rows[-1].principal

    def test_amortizes_fully(self) -> None:
        rows = generate_price_schedule(*_ARGS)
        assert sum(r.principal for r in rows) == pytest.approx(_LOAN)
        assert rows[-1].outstanding_balance == pytest.approx(0.0, abs=1e-4)

    def test_zero_rate_falls_back_to_straight_line(self) -> None:
        rows = generate_price_schedule(120_000.0, 0.0, 120, 200_000.0, 0.0, 0.0, 0.0)
        assert rows[0].payment == pytest.approx(1_000.0)
        assert rows[0].interest == 0.0


class TestInvalidTerm:
    @pytest.mark.parametrize("fn", [generate_sac_schedule, generate_price_schedule])
    def test_zero_term_raises(self, fn) -> None:
        with pytest.raises(InvalidLoanTermError):
            fn(_LOAN, 0.0999, 0, 500_000.0, 0.0003, 0.00015, 25.0)

    def test_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            generate_sac_schedule(_LOAN, 0.0999, -12, 500_000.0, 0.0003, 0.00015, 25.0)


def test_generate_schedule_dispatch() -> None:
    sac = generate_schedule(AmortizationType.SAC, *_ARGS)
    price = generate_schedule(AmortizationType.PRICE, *_ARGS)
    assert sac[0].payment > price[0].payment
    assert sac[-1].payment < price[-1].payment
