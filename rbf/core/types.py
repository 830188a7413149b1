"""Input and output records for the Rent / Buy Cash / Finance engine.

Every record here is a frozen dataclass: the engine never mutates a record
in place, it builds a successor. Selectors that the UI historically passed
around as strings (amortization type, rent index, employment class) are
closed enums so each use site can handle every member explicitly.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields, replace
from enum import Enum
from typing import Any

import pandas as pd


class AmortizationType(str, Enum):
    SAC = "SAC"
    PRICE = "PRICE"


class RentIndex(str, Enum):
    IGPM = "IGPM"
    IPCA = "IPCA"


class EmploymentType(str, Enum):
    SALARIED = "CLT"
    INDEPENDENT = "PJ"


class Strategy(str, Enum):
    RENT = "RENT"
    BUY_CASH = "BUY_CASH"
    FINANCE = "FINANCE"


STRATEGY_LABELS: dict[Strategy, str] = {
    Strategy.RENT: "Rent",
    Strategy.BUY_CASH: "Buy Cash",
    Strategy.FINANCE: "Finance",
}


def _coerce_enum(enum_cls: type[Enum], value: Any, name: str) -> Enum:
    """Accept an enum member, its value or its name (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    raw = str(value or "").strip()
    for member in enum_cls:
        if raw.upper() in (str(member.value).upper(), member.name.upper()):
            return member
    accepted = ", ".join(sorted({m.value for m in enum_cls} | {m.name for m in enum_cls}))
    raise ValueError(f"{name}={value!r} is not one of: {accepted}")


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SimulationInputs:
    """Configuration for one simulation run.

    Rates are decimals (0.045 = 4.5%). Monthly amounts are in currency units.
    ``rent_adjustment_rate`` may be None, in which case rent follows the rate
    of its ``rent_adjustment_index``.
    """

    # Property
    property_value: float = 500_000.0
    property_appreciation_rate: float = 0.02

    # Rent
    monthly_rent: float = 2_615.0
    rent_adjustment_index: RentIndex = RentIndex.IGPM
    rent_adjustment_rate: float | None = 0.055

    # Financing
    down_payment_percent: float = 0.2
    financing_rate: float = 0.0999
    financing_term_years: int = 30
    amortization_type: AmortizationType = AmortizationType.SAC
    use_fgts: bool = False
    fgts_amount: float = 0.0

    # Cash purchase
    cash_discount_percent: float = 0.1

    # Ownership costs
    iptu_rate: float = 0.006
    condominio_monthly: float = 800.0
    itbi_rate: float = 0.03
    escritura_rate: float = 0.008
    registro_rate: float = 0.008
    renter_insurance_monthly: float = 50.0

    # Financing insurance and fees
    mip_rate: float = 0.0003
    dfi_rate: float = 0.00015
    admin_fee_monthly: float = 25.0
    appraisal_fee: float = 3_000.0

    # Macro
    selic_rate: float = 0.15
    ipca_rate: float = 0.045
    tesouro_spread: float = 0.07
    igpm_rate: float = 0.035

    # Current financial situation
    current_capital: float = 0.0
    current_rent: float = 0.0
    monthly_savings: float = 0.0

    # Buyer profile
    monthly_income: float = 10_000.0
    employment_type: EmploymentType = EmploymentType.SALARIED
    is_first_property: bool = True

    time_horizon_years: int = 20
    selected_city: str | None = None
    show_real_values: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "rent_adjustment_index",
            _coerce_enum(RentIndex, self.rent_adjustment_index, "rent_adjustment_index"),
        )
        object.__setattr__(
            self,
            "amortization_type",
            _coerce_enum(AmortizationType, self.amortization_type, "amortization_type"),
        )
        object.__setattr__(
            self,
            "employment_type",
            _coerce_enum(EmploymentType, self.employment_type, "employment_type"),
        )

    @property
    def total_months(self) -> int:
        return int(self.time_horizon_years) * 12

    @property
    def financing_months(self) -> int:
        return int(self.financing_term_years) * 12

    @property
    def fgts_applied(self) -> float:
        return float(self.fgts_amount) if self.use_fgts else 0.0

    def effective_rent_adjustment_rate(self) -> float:
        """Annual rent step-up: explicit rate if given, otherwise the index rate."""
        if self.rent_adjustment_rate is not None:
            return float(self.rent_adjustment_rate)
        if self.rent_adjustment_index is RentIndex.IGPM:
            return float(self.igpm_rate)
        if self.rent_adjustment_index is RentIndex.IPCA:
            return float(self.ipca_rate)
        raise ValueError(f"Unhandled rent index: {self.rent_adjustment_index!r}")

    def with_overrides(self, **changes: Any) -> "SimulationInputs":
        return replace(self, **changes)

    def to_cfg(self) -> dict[str, Any]:
        cfg = asdict(self)
        for key, value in cfg.items():
            if isinstance(value, Enum):
                cfg[key] = value.value
        return cfg

    @classmethod
    def field_names(cls) -> list[str]:
        return [f.name for f in fields(cls)]


# ---------------------------------------------------------------------------
# Engine state and rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InvestmentState:
    gross_balance: float
    total_contributed: float
    months_elapsed: int = 0

    @classmethod
    def seeded(cls, capital: float) -> "InvestmentState":
        capital = float(capital)
        return cls(gross_balance=capital, total_contributed=capital, months_elapsed=0)


@dataclass(frozen=True)
class AmortizationRow:
    month: int
    payment: float
    principal: float
    interest: float
    insurance: float
    admin_fee: float
    outstanding_balance: float


@dataclass(frozen=True)
class MonthlySnapshot:
    month: int
    year: int

    rent_paid: float = 0.0
    mortgage_payment: float = 0.0
    principal_paid: float = 0.0
    interest_paid: float = 0.0
    insurance_paid: float = 0.0

    condominio_payment: float = 0.0
    iptu_payment: float = 0.0
    upfront_paid: float = 0.0
    investment_balance: float = 0.0
    investment_contribution: float = 0.0
    property_value: float = 0.0
    outstanding_debt: float = 0.0
    capital_gains_tax: float = 0.0

    total_wealth: float = 0.0
    total_spent: float = 0.0
    total_wealth_real: float = 0.0
    total_spent_real: float = 0.0

    @property
    def housing_cost(self) -> float:
        """Recurring housing outflow for the month (excludes upfront costs)."""
        return (
            self.rent_paid
            + self.mortgage_payment
            + self.condominio_payment
            + self.iptu_payment
            + (0.0 if self.mortgage_payment else self.insurance_paid)
        )


# Stable DataFrame column names for snapshot exports.
SNAPSHOT_COLUMNS: dict[str, str] = {
    "month": "Month",
    "year": "Year",
    "rent_paid": "Rent",
    "mortgage_payment": "Mortgage Payment",
    "principal_paid": "Principal",
    "interest_paid": "Interest",
    "insurance_paid": "Insurance",
    "condominio_payment": "Condo Fee",
    "iptu_payment": "Property Tax",
    "upfront_paid": "Upfront",
    "investment_balance": "Investments (Net)",
    "investment_contribution": "Contribution",
    "property_value": "Property Value",
    "outstanding_debt": "Outstanding Debt",
    "capital_gains_tax": "Capital Gains Tax",
    "total_wealth": "Total Wealth",
    "total_spent": "Total Spent",
    "total_wealth_real": "Total Wealth (Real)",
    "total_spent_real": "Total Spent (Real)",
}


def snapshots_to_frame(snapshots) -> pd.DataFrame:
    rows = [asdict(s) for s in snapshots]
    df = pd.DataFrame(rows, columns=list(SNAPSHOT_COLUMNS.keys()))
    return df.rename(columns=SNAPSHOT_COLUMNS)


@dataclass(frozen=True)
class ScenarioResult:
    name: Strategy
    label: str
    monthly_snapshots: tuple[MonthlySnapshot, ...]
    final_wealth: float
    final_wealth_real: float
    total_spent: float
    total_spent_real: float
    effective_monthly_avg_cost: float
    effective_monthly_avg_cost_real: float
    total_interest_paid: float
    upfront_cost: float
    savings_phase_months: int
    reached_entry: bool = True

    @property
    def yearly_snapshots(self) -> tuple[MonthlySnapshot, ...]:
        return tuple(s for s in self.monthly_snapshots if s.month % 12 == 0)

    def wealth(self, real: bool) -> float:
        return self.final_wealth_real if real else self.final_wealth

    def to_frame(self) -> pd.DataFrame:
        return snapshots_to_frame(self.monthly_snapshots)


@dataclass(frozen=True)
class SimulationResults:
    rent: ScenarioResult
    buy_cash: ScenarioResult
    finance: ScenarioResult
    winner: Strategy
    winner_label: str
    advantage: float
    advantage_percent: float
    chart_data: pd.DataFrame = field(compare=False)
    starting_capital: float
    monthly_budget: float
    monthly_savings: float
    budget_policy: str = "max_first_month_cost"

    @property
    def scenarios(self) -> tuple[ScenarioResult, ScenarioResult, ScenarioResult]:
        return (self.rent, self.buy_cash, self.finance)

    def scenario(self, strategy: Strategy) -> ScenarioResult:
        for result in self.scenarios:
            if result.name is strategy:
                return result
        raise KeyError(strategy)
