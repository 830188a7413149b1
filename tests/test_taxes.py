"""Capital gains tax and closing costs."""

from __future__ import annotations

import pytest

from rbf.core.taxes import calculate_capital_gains_tax, closing_costs


class TestCapitalGains:
    def test_sole_property_below_exemption(self) -> None:
        assert calculate_capital_gains_tax(100_000.0, 400_000.0, True) == 0.0

    def test_exemption_boundary_inclusive(self) -> None:
        assert calculate_capital_gains_tax(100_000.0, 440_000.0, True) == 0.0

    def test_sole_property_above_exemption(self) -> None:
        assert calculate_capital_gains_tax(100_000.0, 700_000.0, True) == pytest.approx(15_000.0)

    def test_not_sole_property(self) -> None:
        assert calculate_capital_gains_tax(100_000.0, 400_000.0, False) == pytest.approx(15_000.0)
        assert calculate_capital_gains_tax(100_000.0, 700_000.0) == pytest.approx(15_000.0)

    def test_marginal_brackets(self) -> None:
        # 5M at 15% + 2M at 17.5%
        assert calculate_capital_gains_tax(7_000_000.0, 12_000_000.0) == pytest.approx(1_100_000.0)

    def test_all_brackets(self) -> None:
        expected = 5e6 * 0.15 + 5e6 * 0.175 + 20e6 * 0.20 + 5e6 * 0.225
        assert calculate_capital_gains_tax(35_000_000.0, 50_000_000.0) == pytest.approx(expected)

    @pytest.mark.parametrize("gain", [0.0, -50_000.0, float("nan")])
    def test_no_gain_no_tax(self, gain: float) -> None:
        assert calculate_capital_gains_tax(gain, 900_000.0) == 0.0


class TestClosingCosts:
    def test_components(self) -> None:
        c = closing_costs(450_000.0, 0.03, 0.008, 0.008)
        assert c["itbi"] == pytest.approx(13_500.0)
        assert c["escritura"] == pytest.approx(3_600.0)
        assert c["registro"] == pytest.approx(3_600.0)
        assert c["total"] == pytest.approx(20_700.0)

    def test_negative_price_clamped(self) -> None:
        assert closing_costs(-1.0, 0.03)["total"] == 0.0
