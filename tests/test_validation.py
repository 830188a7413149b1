"""Tests verifying that resolve_inputs clamps/validates invalid inputs."""

from __future__ import annotations

import warnings

import pytest

from rbf.core.city_defaults import CITY_DEFAULTS
from rbf.core.constants import DEFAULT_CFG
from rbf.core.types import AmortizationType, SimulationInputs
from rbf.core.validation import get_validation_warnings, resolve_inputs

_BASE_CFG = {"financing_rate": 0.0999}


def _resolve(cfg_overrides=None, **kwargs):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        inputs = resolve_inputs({**_BASE_CFG, **(cfg_overrides or {})}, **kwargs)
    return inputs, [str(w.message) for w in caught]


def test_valid_inputs_no_warnings():
    inputs, messages = _resolve({"property_value": 600_000.0, "amortization_type": "PRICE"})
    assert messages == []
    assert inputs.property_value == 600_000.0
    assert inputs.amortization_type is AmortizationType.PRICE


def test_negative_property_value_clamped():
    inputs, messages = _resolve({"property_value": -50_000.0})
    assert inputs.property_value == 0.0
    assert any("Property value" in m for m in messages), messages


def test_excessive_financing_rate_clamped():
    inputs, messages = _resolve({"financing_rate": 5.0})
    assert inputs.financing_rate == 0.50
    assert any("Financing rate" in m for m in messages), messages


def test_zero_years_clamped_to_one():
    inputs, messages = _resolve({"time_horizon_years": 0})
    assert inputs.time_horizon_years == 1
    assert any("Time horizon" in m for m in messages), messages


def test_long_term_clamped():
    inputs, _ = _resolve({"financing_term_years": 60})
    assert inputs.financing_term_years == 40


def test_down_payment_fraction_clamped():
    inputs, messages = _resolve({"down_payment_percent": 1.5})
    assert inputs.down_payment_percent == 1.0
    assert messages


def test_boolean_strings():
    inputs, _ = _resolve({"use_fgts": "false", "is_first_property": "no", "show_real_values": "1"})
    assert inputs.use_fgts is False
    assert inputs.is_first_property is False
    assert inputs.show_real_values is True


def test_missing_rate_is_estimated():
    inputs = resolve_inputs({"monthly_income": 10_000.0, "property_value": 600_000.0})
    assert inputs.financing_rate == pytest.approx(0.10)


def test_null_rate_is_estimated():
    inputs = resolve_inputs({"financing_rate": None, "monthly_income": 2_500.0, "property_value": 250_000.0})
    assert inputs.financing_rate == pytest.approx(0.05)


def test_rent_adjustment_none_kept():
    inputs, _ = _resolve({"rent_adjustment_rate": None, "rent_adjustment_index": "IPCA"})
    assert inputs.rent_adjustment_rate is None
    assert inputs.effective_rent_adjustment_rate() == pytest.approx(inputs.ipca_rate)


def test_bad_enum_raises():
    with pytest.raises(ValueError):
        resolve_inputs({**_BASE_CFG, "amortization_type": "BALLOON"})


class TestCityLookup:
    def test_city_applied(self):
        inputs, _ = _resolve(
            {"selected_city": "CURITIBA", "property_value": 400_000.0}, city_lookup=CITY_DEFAULTS
        )
        assert inputs.iptu_rate == pytest.approx(0.004)
        assert inputs.itbi_rate == pytest.approx(0.027)
        assert inputs.monthly_rent == pytest.approx(1_516.0)
        assert inputs.selected_city == "CURITIBA"

    def test_overrides_win_over_city(self):
        inputs, _ = _resolve(
            {"selected_city": "CURITIBA"}, city_lookup=CITY_DEFAULTS, overrides={"iptu_rate": 0.01}
        )
        assert inputs.iptu_rate == pytest.approx(0.01)

    def test_explicit_values_win_over_city(self):
        cfg = {**DEFAULT_CFG, "monthly_rent": 4_000.0, "iptu_rate": 0.012, "itbi_rate": 0.05}
        inputs, _ = _resolve(cfg, city_lookup=CITY_DEFAULTS)
        assert inputs.selected_city == "SAO_PAULO"
        assert inputs.monthly_rent == pytest.approx(4_000.0)
        assert inputs.iptu_rate == pytest.approx(0.012)
        assert inputs.itbi_rate == pytest.approx(0.05)

    def test_unknown_city_warns_and_clears(self):
        inputs, messages = _resolve({"selected_city": "ATLANTIS"}, city_lookup=CITY_DEFAULTS)
        assert inputs.selected_city is None
        assert any("Unknown city" in m for m in messages), messages

    def test_no_lookup_leaves_cfg_alone(self):
        inputs, _ = _resolve({"selected_city": "CURITIBA", "iptu_rate": 0.009})
        assert inputs.iptu_rate == pytest.approx(0.009)


class TestAdvisoryWarnings:
    def test_term_longer_than_horizon(self):
        msgs = get_validation_warnings(SimulationInputs(financing_term_years=30, time_horizon_years=20))
        assert any("longer than the horizon" in m for m in msgs)

    def test_fgts_exceeds_price(self):
        inputs = SimulationInputs(down_payment_percent=0.9, use_fgts=True, fgts_amount=100_000.0)
        msgs = get_validation_warnings(inputs)
        assert any("exceeds the property value" in m for m in msgs)

    def test_budget_below_first_month_cost(self):
        msgs = get_validation_warnings(SimulationInputs(), monthly_budget=100.0)
        assert sum("exceeds the monthly budget" in m for m in msgs) == 3

    def test_no_savings(self):
        msgs = get_validation_warnings(SimulationInputs(current_capital=0.0, monthly_savings=0.0, current_rent=0.0))
        assert any("no monthly saving" in m for m in msgs)

    def test_clean_scenario(self):
        inputs = SimulationInputs(
            current_capital=1_000_000.0, financing_term_years=20, time_horizon_years=20, monthly_savings=1_000.0
        )
        assert get_validation_warnings(inputs, monthly_budget=20_000.0) == []

    def test_zero_term_is_reported_not_raised(self):
        msgs = get_validation_warnings(SimulationInputs(financing_term_years=0), monthly_budget=5_000.0)
        assert any("shorter than one month" in m for m in msgs)
