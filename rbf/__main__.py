"""CLI / headless entry point for the Rent / Buy Cash / Finance simulator.

Usage
-----
Run with a JSON scenario file:
    python -m rbf --config scenario.json --output results.csv

Dump an example scenario file:
    python -m rbf --example

Override individual parameters on the command line:
    python -m rbf --config scenario.json --set time_horizon_years=10 --set financing_rate=0.11

Pick a city preset and the budget policy:
    python -m rbf --city CURITIBA --budget-policy rent_plus_savings --json

The JSON config's ``cfg`` section maps directly to ``SimulationInputs`` field
names. See --example for all supported keys and their default values.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

import pandas as pd

from rbf.core.city_defaults import CITY_DEFAULTS, apply_city_defaults, build_city_change_summary, city_options
from rbf.core.constants import DEFAULT_CFG
from rbf.core.engine import BudgetPolicy, results_summary, run_simulation
from rbf.core.mortgage import InvalidLoanTermError
from rbf.core.shortfall_checks import detect_funding_shortfall, format_shortfall_warning
from rbf.core.validation import get_validation_warnings, resolve_inputs
from rbf.ui.export_markdown import export_markdown


def _build_example() -> dict:
    """Return a complete example scenario dict."""
    return {
        "_comment": (
            "RBF CLI scenario file. 'cfg' keys are SimulationInputs field names; "
            "rates are decimals (0.045 = 4.5%). Set financing_rate to null to estimate it."
        ),
        "cfg": DEFAULT_CFG.copy(),
    }


def _coerce(raw: str):
    if raw.lower() in ("true", "false"):
        return raw.lower() == "true"
    if raw.lower() in ("none", "null"):
        return None
    try:
        return int(raw)
    except ValueError:
        try:
            return float(raw)
        except ValueError:
            return raw


def _apply_overrides(d: dict, overrides: list[str]) -> dict:
    """Apply --set key=value overrides, with basic type coercion."""
    for kv in overrides or []:
        if "=" not in kv:
            print(f"Warning: ignoring malformed --set argument (expected key=value): {kv!r}", file=sys.stderr)
            continue
        key, _, raw = kv.partition("=")
        d[key.strip()] = _coerce(raw.strip())
    return d


def _write(text: str, output: str) -> None:
    if output == "-":
        print(text, end="" if text.endswith("\n") else "\n")
    else:
        out_path = Path(output)
        out_path.write_text(text if text.endswith("\n") else text + "\n")
        print(f"Results written to {out_path}", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m rbf",
        description="Rent vs Buy Cash vs Finance simulator (headless/CLI mode).",
    )
    parser.add_argument(
        "--config", "-c",
        metavar="FILE",
        help="Path to a JSON scenario file. Use --example to generate a template.",
    )
    parser.add_argument(
        "--output", "-o",
        metavar="FILE",
        default="-",
        help="Output file path. Use '-' (default) to print to stdout.",
    )
    parser.add_argument(
        "--set", "-s",
        dest="overrides",
        metavar="key=value",
        action="append",
        help="Override a cfg parameter. Repeat for multiple overrides.",
    )
    parser.add_argument(
        "--example",
        action="store_true",
        help="Print an example JSON scenario file and exit.",
    )
    fmt = parser.add_mutually_exclusive_group()
    fmt.add_argument(
        "--json",
        action="store_true",
        help="Output a summary as JSON instead of the monthly CSV time-series.",
    )
    fmt.add_argument(
        "--markdown",
        action="store_true",
        help="Output a markdown report instead of the monthly CSV time-series.",
    )
    parser.add_argument(
        "--city",
        metavar="KEY",
        help="Apply a city preset. One of: " + ", ".join(f"{k} ({label})" for k, label in city_options()) + ".",
    )
    parser.add_argument(
        "--budget-policy",
        choices=[p.value for p in BudgetPolicy],
        default=BudgetPolicy.MAX_FIRST_MONTH_COST.value,
        help="How the shared monthly budget is derived (default: %(default)s).",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging on stderr.",
    )

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.example:
        print(json.dumps(_build_example(), indent=2))
        return 0

    scenario = _build_example()
    if args.config:
        config_path = Path(args.config)
        if not config_path.exists():
            print(f"Error: config file not found: {config_path}", file=sys.stderr)
            return 1
        try:
            with config_path.open() as fh:
                user_scenario = json.load(fh)
        except json.JSONDecodeError as exc:
            print(f"Error: invalid JSON in {config_path}: {exc}", file=sys.stderr)
            return 1
        scenario["cfg"].update(user_scenario.get("cfg", {}))

    cfg = scenario["cfg"]
    if args.city:
        key = args.city.strip().upper()
        if key not in CITY_DEFAULTS:
            print(f"Error: unknown city {args.city!r}", file=sys.stderr)
            return 1
        cfg, changes = apply_city_defaults(cfg, key)
        for line in build_city_change_summary(changes):
            print(f"City preset: {line}", file=sys.stderr)

    overrides = _apply_overrides({}, args.overrides or [])

    try:
        inputs = resolve_inputs(cfg, city_lookup=CITY_DEFAULTS, overrides=overrides)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(
        f"Running simulation: property=R${inputs.property_value:,.0f}, rent=R${inputs.monthly_rent:,.0f}, "
        f"rate={inputs.financing_rate:.2%}, term={inputs.financing_term_years}y, "
        f"horizon={inputs.time_horizon_years}y, {inputs.amortization_type.value}",
        file=sys.stderr,
    )

    try:
        results = run_simulation(inputs, budget_policy=BudgetPolicy(args.budget_policy))
    except InvalidLoanTermError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for msg in get_validation_warnings(inputs, monthly_budget=results.monthly_budget):
        print(f"Warning: {msg}", file=sys.stderr)
    for scenario_result in results.scenarios:
        msg = format_shortfall_warning(scenario_result.label, detect_funding_shortfall(scenario_result.to_frame()))
        if msg:
            print(f"Warning: {msg}", file=sys.stderr)

    print(
        f"Complete. Winner: {results.winner_label}  |  "
        f"Advantage: R${results.advantage:,.2f} ({results.advantage_percent:.1f}%)  |  "
        f"Monthly budget: R${results.monthly_budget:,.2f}",
        file=sys.stderr,
    )

    if args.json:
        _write(json.dumps(results_summary(results, real=inputs.show_real_values), indent=2), args.output)
        return 0

    if args.markdown:
        _write(export_markdown(inputs, results), args.output)
        return 0

    # Default: CSV output, one block of monthly rows per scenario
    frames = []
    for scenario_result in results.scenarios:
        df = scenario_result.to_frame()
        df.insert(0, "Scenario", scenario_result.label)
        frames.append(df)
    _write(pd.concat(frames, ignore_index=True).to_csv(index=False), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
