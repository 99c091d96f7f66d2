# main.py
"""
Entry Point — finsim

Purpose
-------
Run the calculators end-to-end and emit a Markdown report:
  1) Load inputs (built-in sample or --config JSON).
  2) Run the selected calculators:
       - Loan amortization (monthly ledger, yearly rollup, guard flags)
       - XIRR (explicit cash flows, or a recurring plan plus yearly growth)
       - FIRE corpus projection
  3) Write a Markdown report; optionally print the raw results as JSON.

Usage
-----
    python main.py
    python main.py --config finsim.json --calc loan --out loan.md
    python main.py --config finsim.json --json --verbose
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import Any

from finsim.core.finance import FINANCE_ERRORS, project, project_growth, simulate, solve, solve_plan
from finsim.inputs.inputs import CALC_NAMES, AppInputs, InputsLoader, RunOptions, XIRRInputs
from finsim.logconfig import configure_logging
from finsim.reports.generator import write_report
from finsim.schemas.models import (
    FIREInputs,
    InvestmentFrequency,
    InvestmentPlan,
    LoanParameters,
    RepaymentStrategy,
)

logger = logging.getLogger("finsim.cli")


def build_sample_inputs() -> AppInputs:
    """Return the web app's default screens as one input bundle."""
    return AppInputs(
        loan=LoanParameters(
            principal=10_000_000.0,
            annual_rate_percent=8.5,
            tenure_years=20,
            strategy=RepaymentStrategy.REDUCE_TENURE,
        ),
        xirr=XIRRInputs(
            plan=InvestmentPlan(
                start_date=date(2024, 1, 1),
                end_date=date(2029, 1, 1),
                recurring_amount=10_000.0,
                frequency=InvestmentFrequency.MONTHLY,
                maturity_amount=850_000.0,
            )
        ),
        fire=FIREInputs(
            monthly_income=150_000.0,
            monthly_expense=60_000.0,
            inflation_rate_percent=6.0,
            current_age=30,
            retirement_age=50,
            life_expectancy=85,
            post_retirement_return_percent=8.0,
        ),
        run=RunOptions(),
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for configurable runs."""
    p = argparse.ArgumentParser(description="finsim: loan amortization, XIRR and FIRE calculators")
    p.add_argument("--config", type=str, default=None, help="Path to JSON inputs (AppInputs or a bare loan).")
    p.add_argument("--calc", type=str, default=None, choices=list(CALC_NAMES), help="Calculator(s) to run (overrides config).")
    p.add_argument("--out", type=str, default=None, help="Output Markdown path (overrides config).")
    p.add_argument("--monthly", action="store_true", help="Include the full monthly ledger in the report.")
    p.add_argument("--json", action="store_true", help="Also print results as JSON to stdout.")
    p.add_argument("--verbose", action="store_true", help="Debug logging to the console.")
    return p.parse_args(argv)


def run_calculations(cfg: AppInputs) -> dict[str, Any]:
    """
    Run every calculator selected by cfg.run.calc that has inputs.
    Returns keyword arguments for generate_report().
    """
    calc = cfg.run.calc
    sections: dict[str, Any] = {}

    if calc in ("loan", "all") and cfg.loan is not None:
        sections["loan_params"] = cfg.loan
        sections["loan"] = simulate(cfg.loan)

    if calc in ("xirr", "all") and cfg.xirr is not None:
        if cfg.xirr.plan is not None:
            result = solve_plan(cfg.xirr.plan)
            sections["projection"] = project_growth(cfg.xirr.plan, result)
        else:
            result = solve(cfg.xirr.cash_flows or [])
        sections["xirr"] = result

    if calc in ("fire", "all") and cfg.fire is not None:
        sections["fire_inputs"] = cfg.fire
        sections["fire"] = project(cfg.fire)

    if not sections:
        logger.warning("no inputs for calculator %r; report will be empty", calc)
    return sections


def _results_json(sections: dict[str, Any]) -> str:
    payload: dict[str, Any] = {}
    for key in ("loan", "xirr", "fire"):
        if key in sections:
            payload[key] = sections[key].model_dump(mode="json")
    if "projection" in sections:
        payload["projection"] = [p.model_dump(mode="json") for p in sections["projection"]]
    return json.dumps(payload, indent=2)


def main(argv: list[str] | None = None) -> int:
    """Run the selected calculators and write the report (or chosen output)."""
    args = parse_args(argv)
    configure_logging(verbose=args.verbose)

    loader = InputsLoader()
    try:
        cfg = loader.load(args.config) if args.config else build_sample_inputs()
        cfg = loader.with_overrides(cfg, out=args.out, calc=args.calc)
        sections = run_calculations(cfg)
    except FINANCE_ERRORS as e:
        logger.error("calculation failed: %s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    try:
        write_report(cfg.run.out, include_monthly=args.monthly, **sections)
    except OSError as e:
        logger.error("could not write report to %s: %s", cfg.run.out, e)
        print(f"Error: cannot write report: {e}", file=sys.stderr)
        return 2
    if args.json:
        # stdout stays machine-readable
        print(f"Report written to {cfg.run.out}", file=sys.stderr)
        print(_results_json(sections))
    else:
        print(f"Report written to {cfg.run.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
