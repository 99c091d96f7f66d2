# finsim/inputs/inputs.py
"""
Inputs loader for finsim.

Goals
-----
- File-first inputs validated with Pydantic.
- One JSON document may carry any combination of the three calculators.
- Accepts the saved-state shape of the web app's loan screen
  (camelCase LoanInput) and a bare loan object at the root.
- Minimal environment-variable overrides for CLI convenience.

Supported JSON shapes
---------------------
1) Structured (root = AppInputs)
   {
     "loan": { ... LoanParameters ... },
     "xirr": { "cash_flows": [{"date": "2024-01-01", "amount": -1000}, ...] }
          or { "plan": { ... InvestmentPlan ... } },
     "fire": { ... FIREInputs ... },
     "run":  { "out": "finsim_report.md", "calc": "all" }
   }

2) Bare loan (root = LoanParameters, snake_case or the app's camelCase)
   { "principal": 10000000, "interestRate": 8.5, "tenureYears": 20,
     "prepaymentStrategy": "TENURE", "emiOverrides": {"1": 100000} }

Environment overrides (optional)
--------------------------------
- FINSIM_OUT   -> AppInputs.run.out
- FINSIM_CALC  -> AppInputs.run.calc (loan | xirr | fire | all)

Public API
----------
- class InputsLoader:
    - load(path) -> AppInputs
    - load_json(text) -> AppInputs
    - with_overrides(cfg, out=..., calc=...) -> AppInputs
- function load_inputs(path) -> AppInputs
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError, model_validator

from finsim.core.finance.errors import InvalidInputError
from finsim.schemas.models import CashFlow, FIREInputs, InvestmentPlan, LoanParameters

CalcName = Literal["loan", "xirr", "fire", "all"]
CALC_NAMES: tuple[str, ...] = ("loan", "xirr", "fire", "all")

# camelCase keys written by the web app's loan screen -> LoanParameters fields
_APP_LOAN_KEYS = {
    "interestRate": "annual_rate_percent",
    "tenureYears": "tenure_years",
    "prepaymentStrategy": "strategy",
    "interestRateOverrides": "rate_overrides",
    "emiOverrides": "emi_overrides",
}

# ----------------------------
# Pydantic models for structured inputs
# ----------------------------


class XIRRInputs(BaseModel):
    """Either explicit dated cash flows or a recurring plan (exactly one)."""

    cash_flows: list[CashFlow] | None = Field(None, description="Dated flows; negative = outflow.")
    plan: InvestmentPlan | None = Field(None, description="Recurring plan expanded into flows.")

    @model_validator(mode="after")
    def _exactly_one(self) -> XIRRInputs:
        if (self.cash_flows is None) == (self.plan is None):
            raise ValueError("provide exactly one of 'cash_flows' or 'plan'")
        return self


class RunOptions(BaseModel):
    """Runtime (non-financial) options."""

    out: str = Field("finsim_report.md", description="Path to write the Markdown report.")
    calc: CalcName = Field("all", description="Which calculators to run.")


class AppInputs(BaseModel):
    """
    Full input payload.

    Attributes:
        loan: Loan to simulate (optional).
        xirr: Cash flows or plan to solve (optional).
        fire: Retirement inputs to project (optional).
        run:  Runtime options.
    """

    loan: LoanParameters | None = None
    xirr: XIRRInputs | None = None
    fire: FIREInputs | None = None
    run: RunOptions = RunOptions()


# ----------------------------
# Loader
# ----------------------------


@dataclass(frozen=True)
class InputsLoader:
    """
    File-first inputs loader with light env overrides.

    Default search (when path=None):
        1) ./finsim.json
        2) ./config.json
    """

    env_prefix: str = "FINSIM_"

    # ---------- Public API ----------

    def load(self, path: str | Path | None = None) -> AppInputs:
        """Load inputs from a JSON file (or the default search order)."""
        p = self._resolve_path(path)
        raw = self._read_json_file(p)
        return self._finish(raw)

    def load_json(self, text: str) -> AppInputs:
        """Load inputs from a JSON string."""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Invalid JSON payload: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidInputError("Inputs root must be a JSON object")
        return self._finish(raw)

    def with_overrides(self, cfg: AppInputs, *, out: str | None = None, calc: str | None = None) -> AppInputs:
        """Return a *new* AppInputs with non-null run overrides applied."""
        updates: dict[str, Any] = {}
        if out is not None:
            updates["out"] = out
        if calc is not None:
            if calc not in CALC_NAMES:
                raise InvalidInputError(f"unknown calculator {calc!r}; expected one of {', '.join(CALC_NAMES)}")
            updates["calc"] = calc

        if not updates:
            return cfg

        run_new = cfg.run.model_copy(update=updates)
        return cfg.model_copy(update={"run": run_new})

    # ---------- Internals ----------

    def _finish(self, raw: dict[str, Any]) -> AppInputs:
        data = self._maybe_translate_bare_loan(raw)
        cfg = self._parse_root(data)
        return self._apply_env_overrides(cfg)

    def _resolve_path(self, path: str | Path | None) -> Path:
        if path is not None:
            p = Path(path)
            if not p.exists():
                raise FileNotFoundError(f"Inputs file not found: {p}")
            return p

        for candidate in (Path("finsim.json"), Path("config.json")):
            if candidate.exists():
                return candidate
        raise FileNotFoundError("No inputs path provided and no default inputs found. Looked for ./finsim.json and ./config.json.")

    def _read_json_file(self, p: Path) -> dict[str, Any]:
        if p.suffix.lower() != ".json":
            raise InvalidInputError(f"Unsupported inputs format for {p.name}; only .json is supported.")
        try:
            raw = json.loads(p.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise InvalidInputError(f"Invalid JSON in {p}: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Inputs root in {p} must be a JSON object")
        return cast(dict[str, Any], raw)

    def _maybe_translate_bare_loan(self, raw: dict[str, Any]) -> dict[str, Any]:
        """
        A root carrying 'principal' is a bare loan; wrap it and rename the app's camelCase keys.
        """
        if "principal" not in raw:
            return raw
        loan = {_APP_LOAN_KEYS.get(k, k): v for k, v in raw.items()}
        return {"loan": loan}

    def _parse_root(self, data: dict[str, Any]) -> AppInputs:
        try:
            return AppInputs.model_validate(data)
        except ValidationError as e:
            raise InvalidInputError(f"Inputs validation failed:\n{e}") from e

    def _apply_env_overrides(self, cfg: AppInputs) -> AppInputs:
        prefix = self.env_prefix
        updates: dict[str, Any] = {}

        out = os.getenv(f"{prefix}OUT")
        if out:
            updates["out"] = out

        calc = os.getenv(f"{prefix}CALC")
        if calc:
            normalized = calc.strip().lower()
            if normalized in CALC_NAMES:
                updates["calc"] = normalized

        if not updates:
            return cfg

        run_new = cfg.run.model_copy(update=updates)
        return cfg.model_copy(update={"run": run_new})


# ----------------------------
# Convenience function
# ----------------------------


def load_inputs(path: str | Path | None = None) -> AppInputs:
    """Convenience wrapper for one-shot callers."""
    return InputsLoader().load(path)
