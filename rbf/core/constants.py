"""Tax tables, rate brackets and the default scenario cfg."""

from __future__ import annotations

import datetime

# Policy freshness marker: brackets and statutory thresholds below.
TAX_RULES_LAST_REVIEWED = datetime.date(2026, 2, 1)

# Regressive withholding on fixed-income gains (Tesouro Direto), by holding days.
IR_REGRESSIVE_TABLE: list[tuple[float, float]] = [
    (180.0, 0.225),
    (360.0, 0.20),
    (720.0, 0.175),
    (float("inf"), 0.15),
]

# B3 custody fee, annual rate on the average invested balance.
CUSTODY_FEE_ANNUAL = 0.002

# Capital gains on property sales: marginal rates by cumulative gain ceiling.
CAPITAL_GAINS_TABLE: list[tuple[float, float]] = [
    (5_000_000.0, 0.15),
    (10_000_000.0, 0.175),
    (30_000_000.0, 0.20),
    (float("inf"), 0.225),
]

# Sole-property sales at or below this price are exempt.
CAPITAL_GAINS_EXEMPTION_PRICE = 440_000.0

# Average days per month used for holding-period approximations.
DAYS_PER_MONTH = 30

# Default scenario cfg. Keys match SimulationInputs field names.
DEFAULT_CFG: dict = {
    # Property
    "property_value": 500_000.0,
    "property_appreciation_rate": 0.02,  # real, above inflation
    # Rent
    "monthly_rent": 2_615.0,
    "rent_adjustment_index": "IGPM",
    "rent_adjustment_rate": 0.055,
    # Financing
    "down_payment_percent": 0.2,
    "financing_rate": 0.0999,  # annual CET
    "financing_term_years": 30,
    "amortization_type": "SAC",
    "use_fgts": False,
    "fgts_amount": 0.0,
    # Cash purchase
    "cash_discount_percent": 0.1,
    # Ownership costs
    "iptu_rate": 0.006,  # of property value per year
    "condominio_monthly": 800.0,
    "itbi_rate": 0.03,
    "escritura_rate": 0.008,
    "registro_rate": 0.008,
    "renter_insurance_monthly": 50.0,
    # Financing insurance and fees
    "mip_rate": 0.0003,  # monthly, on outstanding balance
    "dfi_rate": 0.00015,  # monthly, on property value
    "admin_fee_monthly": 25.0,
    "appraisal_fee": 3_000.0,
    # Macro
    "selic_rate": 0.15,
    "ipca_rate": 0.045,
    "tesouro_spread": 0.07,
    "igpm_rate": 0.035,
    # Current situation
    "current_capital": 0.0,
    "current_rent": 0.0,
    "monthly_savings": 0.0,
    # Buyer profile
    "monthly_income": 10_000.0,
    "employment_type": "CLT",
    "is_first_property": True,
    # Horizon / display
    "time_horizon_years": 20,
    "selected_city": "SAO_PAULO",
    "show_real_values": False,
}
