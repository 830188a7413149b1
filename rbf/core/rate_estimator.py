"""Mortgage rate suggestion from a buyer profile.

Two programs are modeled:

* **MCMV** (subsidized housing program): income/property-price brackets with a
  fixed rate each. Brackets are checked in ascending income order and the
  first one that admits both the income and the property price wins.
* **SBPE** (market funding): a base rate adjusted additively for employment
  class and first-property status.

Bracket values reflect the program rules as of Feb/2026.
"""

from __future__ import annotations

from dataclasses import dataclass

from .types import EmploymentType

#: (max monthly income, max property price, annual rate)
MCMV_BRACKETS: list[tuple[float, float, float]] = [
    (2_850.0, 270_000.0, 0.05),
    (4_700.0, 270_000.0, 0.0816),
    (8_600.0, 350_000.0, 0.1025),
    (12_000.0, 500_000.0, 0.105),
]

SBPE_BASE_RATE = 0.11


@dataclass(frozen=True)
class RatePolicy:
    """Additive SBPE adjustments (decimal rate points)."""

    base_rate: float = SBPE_BASE_RATE
    salaried_discount: float = 0.005
    first_property_discount: float = 0.005
    independent_premium: float = 0.0


#: Policy variant where lenders price in independent-income risk.
INDEPENDENT_PREMIUM_POLICY = RatePolicy(independent_premium=0.005)


@dataclass(frozen=True)
class RateEstimate:
    rate: float
    description: str


def _fmt_int(x: float) -> str:
    return f"{x:,.0f}".replace(",", ".")


def estimate_financing_rate(
    monthly_income: float,
    property_value: float,
    employment_type: EmploymentType,
    is_first_property: bool,
    *,
    policy: RatePolicy | None = None,
) -> RateEstimate:
    """Suggest an annual cost-of-credit rate for the given buyer.

    Args:
        monthly_income: Gross household income per month.
        property_value: Purchase price.
        employment_type: Salaried (CLT) or independent (PJ) income.
        is_first_property: Whether the buyer owns no other property.
        policy: SBPE adjustment policy. Defaults to ``RatePolicy()``.

    Returns:
        RateEstimate with the annual rate (decimal) and a description listing
        the program and every adjustment applied.
    """
    policy = policy or RatePolicy()
    income = float(monthly_income)
    price = float(property_value)

    for max_income, max_property, rate in MCMV_BRACKETS:
        if income <= max_income and price <= max_property:
            return RateEstimate(rate=rate, description=f"MCMV (income up to R${_fmt_int(max_income)})")

    rate = policy.base_rate
    parts = ["SBPE"]

    if employment_type is EmploymentType.SALARIED:
        rate -= policy.salaried_discount
        parts.append("CLT")
    elif employment_type is EmploymentType.INDEPENDENT:
        rate += policy.independent_premium
        parts.append("PJ")
    else:
        raise ValueError(f"Unhandled employment type: {employment_type!r}")

    if is_first_property:
        rate -= policy.first_property_discount
        parts.append("first property")

    return RateEstimate(rate=rate, description=" ".join(parts))
