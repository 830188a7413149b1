"""Input resolution and validation helpers.

``resolve_inputs`` turns a plain cfg dict (JSON scenario file, CLI
overrides, a form layer) into a ``SimulationInputs`` record:

1. optional city defaults from an injected lookup, filling only unset keys;
2. explicit overrides on top;
3. out-of-range values clamped with a ``warnings.warn`` naming the field;
4. a missing ``financing_rate`` filled from the rate estimator.

``get_validation_warnings`` returns advisory messages for a resolved record.
Neither function raises for odd-but-computable values; only malformed enum
strings raise ``ValueError``.
"""

from __future__ import annotations

import math
import warnings as _warnings
from typing import Any, List, Mapping

from .city_defaults import CityDefaults, apply_city_defaults
from .rate_estimator import RatePolicy, estimate_financing_rate
from .scenarios import buy_cash_entry, finance_entry, first_month_costs
from .types import SimulationInputs


def _f(x, default=0.0):
    try:
        v = float(x)
    except (TypeError, ValueError):
        return float(default)
    return v if math.isfinite(v) else float(default)


def _i(x, default=0):
    try:
        return int(float(x))
    except (TypeError, ValueError):
        return int(default)


def _as_bool(value: object) -> bool:
    """Parse booleans from JSON/CLI-friendly values ("false" must be False)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    s = str(value or "").strip().lower()
    if s in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "f", "no", "n", "off", "", "none", "null"}:
        return False
    return bool(value)


# ---------------------------------------------------------------------------
# Rate / value clamping helpers
# ---------------------------------------------------------------------------


def clamp_rate(value: float, name: str, *, min_val: float = -0.10, max_val: float = 0.50) -> float:
    """Clamp a decimal rate to a reasonable range, warning if adjusted."""
    if value > max_val:
        _warnings.warn(f"{name}={value:.2%} exceeds maximum {max_val:.2%}. Clamping to {max_val:.2%}.")
        return max_val
    if value < min_val:
        _warnings.warn(f"{name}={value:.2%} is below minimum {min_val:.2%}. Clamping to {min_val:.2%}.")
        return min_val
    return value


def clamp_positive(value: float, name: str, *, max_val: float | None = None) -> float:
    """Ensure a value is non-negative, with optional upper bound."""
    if value < 0:
        _warnings.warn(f"{name}={value} is negative. Clamping to 0.")
        return 0.0
    if max_val is not None and value > max_val:
        _warnings.warn(f"{name}={value} exceeds maximum {max_val}. Clamping to {max_val}.")
        return max_val
    return value


def clamp_int(value: int, name: str, *, min_val: int, max_val: int) -> int:
    if value < min_val:
        _warnings.warn(f"{name}={value} is below minimum {min_val}. Clamping to {min_val}.")
        return min_val
    if value > max_val:
        _warnings.warn(f"{name}={value} exceeds maximum {max_val}. Clamping to {max_val}.")
        return max_val
    return value


_FRACTIONS = (
    "down_payment_percent",
    "cash_discount_percent",
)

_RATES: dict[str, tuple[str, float, float]] = {
    "property_appreciation_rate": ("Real appreciation", -0.20, 0.30),
    "financing_rate": ("Financing rate", 0.0, 0.50),
    "iptu_rate": ("IPTU rate", 0.0, 0.05),
    "itbi_rate": ("ITBI rate", 0.0, 0.10),
    "escritura_rate": ("Deed fee rate", 0.0, 0.05),
    "registro_rate": ("Registry fee rate", 0.0, 0.05),
    "mip_rate": ("MIP rate", 0.0, 0.01),
    "dfi_rate": ("DFI rate", 0.0, 0.01),
    "selic_rate": ("Selic rate", 0.0, 0.50),
    "ipca_rate": ("Inflation (IPCA)", -0.05, 0.30),
    "tesouro_spread": ("IPCA+ spread", -0.05, 0.20),
    "igpm_rate": ("IGP-M", -0.10, 0.40),
}

_AMOUNTS: dict[str, tuple[str, float]] = {
    "property_value": ("Property value", 100_000_000.0),
    "monthly_rent": ("Monthly rent", 1_000_000.0),
    "fgts_amount": ("FGTS amount", 100_000_000.0),
    "condominio_monthly": ("Condo fee", 1_000_000.0),
    "renter_insurance_monthly": ("Renter insurance", 100_000.0),
    "admin_fee_monthly": ("Admin fee", 100_000.0),
    "appraisal_fee": ("Appraisal fee", 1_000_000.0),
    "current_capital": ("Current capital", 1_000_000_000.0),
    "current_rent": ("Current rent", 1_000_000.0),
    "monthly_savings": ("Monthly savings", 10_000_000.0),
    "monthly_income": ("Monthly income", 100_000_000.0),
}


def resolve_inputs(
    cfg: Mapping[str, Any],
    *,
    city_lookup: Mapping[str, CityDefaults] | None = None,
    overrides: Mapping[str, Any] | None = None,
    rate_policy: RatePolicy | None = None,
) -> SimulationInputs:
    """Build a validated ``SimulationInputs`` from a cfg dict.

    Args:
        cfg: Scenario values keyed by ``SimulationInputs`` field names. Unknown
            keys are ignored; missing keys take the record defaults.
        city_lookup: City-default table. When given and ``cfg`` names a
            ``selected_city``, that city's values fill the keys ``cfg`` leaves unset.
        overrides: Values applied last (e.g. CLI ``--set`` pairs).
        rate_policy: Policy for estimating a missing ``financing_rate``.

    Returns:
        The resolved inputs.
    """
    merged = dict(cfg or {})
    if city_lookup is not None and merged.get("selected_city"):
        key = merged.get("selected_city")
        if key not in city_lookup:
            _warnings.warn(f"Unknown city {key!r}; city defaults not applied.")
        # City values only pre-fill; keys the caller set keep their values.
        explicit = {k: v for k, v in merged.items() if k != "selected_city"}
        merged, _changes = apply_city_defaults(merged, key, lookup=city_lookup)
        merged.update(explicit)
    merged.update(dict(overrides or {}))

    out: dict[str, Any] = {}

    for key in _FRACTIONS:
        if key in merged:
            name = key.replace("_", " ").capitalize()
            out[key] = clamp_rate(_f(merged[key]), name, min_val=0.0, max_val=1.0)

    for key, (name, lo, hi) in _RATES.items():
        if key in merged and merged[key] is not None:
            out[key] = clamp_rate(_f(merged[key]), name, min_val=lo, max_val=hi)

    for key, (name, hi) in _AMOUNTS.items():
        if key in merged:
            out[key] = clamp_positive(_f(merged[key]), name, max_val=hi)

    if "rent_adjustment_rate" in merged:
        raw = merged["rent_adjustment_rate"]
        out["rent_adjustment_rate"] = (
            None if raw is None or raw == "" else clamp_rate(_f(raw), "Rent adjustment", min_val=-0.10, max_val=0.40)
        )

    if "financing_term_years" in merged:
        out["financing_term_years"] = clamp_int(_i(merged["financing_term_years"], 30), "Financing term (years)", min_val=1, max_val=40)
    if "time_horizon_years" in merged:
        out["time_horizon_years"] = clamp_int(_i(merged["time_horizon_years"], 20), "Time horizon (years)", min_val=1, max_val=50)

    for key in ("use_fgts", "is_first_property", "show_real_values"):
        if key in merged:
            out[key] = _as_bool(merged[key])

    for key in ("rent_adjustment_index", "amortization_type", "employment_type"):
        if key in merged:
            out[key] = merged[key]

    if "selected_city" in merged:
        out["selected_city"] = str(merged["selected_city"]) if merged["selected_city"] else None

    inputs = SimulationInputs(**out)

    if merged.get("financing_rate") is None:
        est = estimate_financing_rate(
            inputs.monthly_income,
            inputs.property_value,
            inputs.employment_type,
            inputs.is_first_property,
            policy=rate_policy,
        )
        inputs = inputs.with_overrides(financing_rate=est.rate)

    return inputs


def get_validation_warnings(inputs: SimulationInputs, *, monthly_budget: float | None = None) -> List[str]:
    """Advisory messages for a resolved scenario. Never raises.

    Args:
        inputs: Resolved simulation inputs.
        monthly_budget: Shared budget, if already known; enables the
            budget-vs-first-month-cost check.
    """
    warnings: List[str] = []

    price = inputs.property_value
    fin = finance_entry(inputs)
    if price > 0 and fin.down_payment + fin.fgts_applied > price + 1e-9:
        warnings.append("Down payment plus FGTS exceeds the property value; the loan amount is clamped to zero.")

    if inputs.financing_term_years > inputs.time_horizon_years:
        warnings.append(
            f"Financing term ({inputs.financing_term_years} years) is longer than the horizon "
            f"({inputs.time_horizon_years} years); the remaining balance is subtracted from final wealth."
        )

    cash_target = buy_cash_entry(inputs).total
    if inputs.current_capital < fin.total and inputs.monthly_savings <= 0 and inputs.current_rent <= 0:
        warnings.append(
            "Current capital is below every purchase entry cost and there is no monthly saving; "
            "purchase scenarios may spend the whole horizon saving."
        )
    elif inputs.current_capital < cash_target and inputs.monthly_savings <= 0:
        warnings.append("No monthly savings: the cash purchase may never reach its entry cost.")

    if inputs.financing_months < 1:
        warnings.append(
            f"Financing term ({inputs.financing_term_years} years) is shorter than one month; "
            "the simulation cannot build a loan schedule."
        )
    elif monthly_budget is not None:
        for strategy, cost in first_month_costs(inputs).items():
            if cost > monthly_budget + 1e-9:
                warnings.append(
                    f"First-month cost of {strategy.value} (R${cost:,.2f}) exceeds the monthly budget "
                    f"(R${monthly_budget:,.2f}); that scenario disinvests from month 1."
                )

    return warnings
