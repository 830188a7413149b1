"""Markdown report of a simulation run (inputs, ranking, costs, yearly tables)."""

from __future__ import annotations

import datetime as _dt
from typing import List, Sequence

from rbf.core.constants import TAX_RULES_LAST_REVIEWED
from rbf.core.types import MonthlySnapshot, ScenarioResult, SimulationInputs, SimulationResults, Strategy

from .costs_utils import cost_breakdown
from .formatters import format_brl, format_brl_cents, format_brl_compact, format_months, format_percent


def _deflate(value: float, snap: MonthlySnapshot, show_real: bool) -> float:
    if not show_real or snap.total_wealth == 0:
        return value
    return value * (snap.total_wealth_real / snap.total_wealth)


def markdown_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Right-aligned, column-padded markdown table."""
    widths = [
        max(len(h), max((len(r[i]) if i < len(r) else 0 for r in rows), default=0))
        for i, h in enumerate(headers)
    ]
    header = "| " + " | ".join(h.rjust(widths[i]) for i, h in enumerate(headers)) + " |"
    sep = "| " + " | ".join("-" * w for w in widths) + " |"
    body = ["| " + " | ".join(c.rjust(widths[i]) for i, c in enumerate(r)) + " |" for r in rows]
    return "\n".join([header, sep, *body])


def scenario_yearly_table(scenario: ScenarioResult, show_real: bool) -> str:
    is_rent = scenario.name is Strategy.RENT
    is_finance = scenario.name is Strategy.FINANCE

    headers = ["Year", "Cost/month", "Surplus/month", "Spent (cum.)", "Investments"]
    if not is_rent:
        headers.append("Property")
    if is_finance:
        headers.append("Debt")
    headers.append("Wealth")

    rows: List[List[str]] = []
    for snap in scenario.yearly_snapshots:
        cells = [
            str(snap.year),
            format_brl_compact(_deflate(snap.housing_cost, snap, show_real)),
            format_brl_compact(_deflate(snap.investment_contribution, snap, show_real)),
            format_brl_compact(snap.total_spent_real if show_real else snap.total_spent),
            format_brl_compact(_deflate(snap.investment_balance, snap, show_real)),
        ]
        if not is_rent:
            cells.append(format_brl_compact(_deflate(snap.property_value, snap, show_real)))
        if is_finance:
            cells.append(
                format_brl_compact(_deflate(snap.outstanding_debt, snap, show_real)) if snap.outstanding_debt > 0 else "—"
            )
        cells.append(format_brl_compact(snap.total_wealth_real if show_real else snap.total_wealth))
        rows.append(cells)

    return markdown_table(headers, rows)


def _parameter_rows(inputs: SimulationInputs) -> List[List[str]]:
    rows: List[List[str]] = [
        ["**Current situation**", ""],
        ["Available capital", format_brl(inputs.current_capital)],
        ["Current rent", format_brl(inputs.current_rent)],
        ["Monthly savings", format_brl(inputs.monthly_savings)],
        ["**Property**", ""],
        ["Property value", format_brl(inputs.property_value)],
        ["Real appreciation", format_percent(inputs.property_appreciation_rate)],
        ["**Rent**", ""],
        ["Monthly rent", format_brl(inputs.monthly_rent)],
        ["Adjustment index", inputs.rent_adjustment_index.value],
        ["Adjustment rate", format_percent(inputs.effective_rent_adjustment_rate())],
        ["**Financing**", ""],
        ["Down payment", format_percent(inputs.down_payment_percent)],
        ["Annual rate (CET)", format_percent(inputs.financing_rate)],
        ["Term", f"{inputs.financing_term_years} years"],
        ["Amortization", inputs.amortization_type.value],
        ["Uses FGTS", "Yes" if inputs.use_fgts else "No"],
    ]
    if inputs.use_fgts:
        rows.append(["FGTS amount", format_brl(inputs.fgts_amount)])
    rows += [
        ["**Cash purchase**", ""],
        ["Cash discount", format_percent(inputs.cash_discount_percent)],
        ["**Ownership costs**", ""],
        ["IPTU (% of value/year)", format_percent(inputs.iptu_rate)],
        ["Condo fee/month", format_brl(inputs.condominio_monthly)],
        ["ITBI", format_percent(inputs.itbi_rate)],
        ["Deed (escritura)", format_percent(inputs.escritura_rate)],
        ["Registry", format_percent(inputs.registro_rate)],
        ["Renter insurance/month", format_brl(inputs.renter_insurance_monthly)],
        ["**Financing insurance and fees**", ""],
        ["MIP (monthly, on balance)", format_percent(inputs.mip_rate)],
        ["DFI (monthly, on property)", format_percent(inputs.dfi_rate)],
        ["Admin fee/month", format_brl(inputs.admin_fee_monthly)],
        ["Appraisal fee", format_brl(inputs.appraisal_fee)],
        ["**Investment**", ""],
        ["Selic", format_percent(inputs.selic_rate)],
        ["IPCA", format_percent(inputs.ipca_rate)],
        ["IPCA+ spread", format_percent(inputs.tesouro_spread)],
        ["IGP-M", format_percent(inputs.igpm_rate)],
        ["**Buyer profile**", ""],
        ["Monthly income", format_brl(inputs.monthly_income)],
        ["Employment", inputs.employment_type.value],
        ["First property", "Yes" if inputs.is_first_property else "No"],
        ["**Horizon**", ""],
        ["Simulation horizon", f"{inputs.time_horizon_years} years"],
    ]
    if inputs.selected_city:
        rows.append(["City", inputs.selected_city])
    return rows


def export_markdown(
    inputs: SimulationInputs,
    results: SimulationResults,
    show_real_values: bool | None = None,
    *,
    generated_on: _dt.date | None = None,
) -> str:
    show_real = bool(inputs.show_real_values if show_real_values is None else show_real_values)
    mode = "Real values (deflated)" if show_real else "Nominal values"
    date = (generated_on or _dt.date.today()).strftime("%d/%m/%Y")
    scenarios = results.scenarios

    lines: List[str] = []
    lines.append("# Rent, Buy Cash or Finance? Simulation report")
    lines.append("")
    lines.append(f"> Generated on {date} · {mode}")
    lines.append("")

    lines.append("## Result")
    lines.append("")
    lines.append(
        f"**{results.winner_label}** is the best option, ending with **{format_brl(results.advantage)}** "
        f"(+{results.advantage_percent:.1f}%) more wealth than the runner-up."
    )
    lines.append("")
    lines.append(f"- **Current capital:** {format_brl(results.starting_capital)}")
    lines.append(f"- **Monthly savings:** {format_brl(results.monthly_savings)}/month")
    lines.append(f"- **Monthly budget:** {format_brl_cents(results.monthly_budget)}/month ({results.budget_policy})")
    lines.append("")

    lines.append("## Summary by scenario")
    lines.append("")
    summary_rows = [
        [
            s.label,
            format_brl(s.final_wealth_real if show_real else s.final_wealth),
            format_brl(s.total_spent_real if show_real else s.total_spent),
            format_brl(s.effective_monthly_avg_cost_real if show_real else s.effective_monthly_avg_cost),
            format_brl(s.total_interest_paid) if s.total_interest_paid > 0 else "—",
            format_brl(s.upfront_cost),
            format_months(s.savings_phase_months),
        ]
        for s in scenarios
    ]
    lines.append(
        markdown_table(
            ["Scenario", "Final wealth", "Total spent", "Avg monthly cost", "Interest paid", "Upfront", "Saving"],
            summary_rows,
        )
    )
    lines.append("")

    lines.append("## Where the money went")
    lines.append("")
    cost_rows = []
    for s in scenarios:
        c = cost_breakdown(s)
        cost_rows.append(
            [
                s.label,
                format_brl(c["upfront"]),
                format_brl(c["rent"]) if c["rent"] > 0 else "—",
                format_brl(c["interest"]) if c["interest"] > 0 else "—",
                format_brl(c["principal"]) if c["principal"] > 0 else "—",
                format_brl(c["condominio"]),
                format_brl(c["iptu"]),
                format_brl(c["insurance"]) if c["insurance"] > 0 else "—",
            ]
        )
    lines.append(
        markdown_table(
            ["Scenario", "Upfront", "Rent", "Interest", "Principal", "Condo", "IPTU", "Insurance"],
            cost_rows,
        )
    )
    lines.append("")

    lines.append("## Yearly detail")
    lines.append("")
    for s in scenarios:
        lines.append(f"### {s.label}")
        lines.append("")
        lines.append(scenario_yearly_table(s, show_real))
        lines.append("")

    lines.append("## Parameters")
    lines.append("")
    lines.append(markdown_table(["Parameter", "Value"], _parameter_rows(inputs)))
    lines.append("")
    lines.append(f"_Tax tables last reviewed on {TAX_RULES_LAST_REVIEWED.strftime('%d/%m/%Y')}._")
    lines.append("")

    return "\n".join(lines)
