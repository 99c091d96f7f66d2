# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

from datetime import date
from typing import Any

from finsim.core.finance.xirr import add_months
from finsim.schemas.models import (
    CashFlow,
    FIREInputs,
    InvestmentFrequency,
    InvestmentPlan,
    LoanParameters,
    RepaymentStrategy,
)

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_PRINCIPAL = 10_000_000.0  # ₹1 crore
DEFAULT_RATE = 8.5
DEFAULT_TENURE = 20
DEFAULT_EMI = 86_782.0  # annuity EMI for the defaults above, rounded

DEFAULT_PLAN_START = date(2024, 1, 1)
DEFAULT_PLAN_END = date(2029, 1, 1)

# -----------------------------
# Loan factories
# -----------------------------


def make_loan(**overrides: Any) -> LoanParameters:
    fields: dict[str, Any] = {
        "principal": DEFAULT_PRINCIPAL,
        "annual_rate_percent": DEFAULT_RATE,
        "tenure_years": DEFAULT_TENURE,
        "strategy": RepaymentStrategy.REDUCE_TENURE,
    }
    fields.update(overrides)
    return LoanParameters(**fields)


# -----------------------------
# XIRR factories
# -----------------------------


def make_plan(**overrides: Any) -> InvestmentPlan:
    fields: dict[str, Any] = {
        "start_date": DEFAULT_PLAN_START,
        "end_date": DEFAULT_PLAN_END,
        "recurring_amount": 10_000.0,
        "frequency": InvestmentFrequency.MONTHLY,
        "maturity_amount": 850_000.0,
    }
    fields.update(overrides)
    return InvestmentPlan(**fields)


def compounded_flows(
    rate: float,
    *,
    months: int = 60,
    amount: float = 10_000.0,
    start: date = date(2020, 1, 1),
) -> list[CashFlow]:
    """
    Monthly outflows plus a maturity computed by compounding each one at `rate`
    (day count / 365), so the XIRR of the result is exactly `rate`.
    """
    end = add_months(start, months)
    flows = [CashFlow(date=add_months(start, i), amount=-amount) for i in range(months)]
    maturity = sum(amount * (1.0 + rate) ** ((end - f.date).days / 365.0) for f in flows)
    return flows + [CashFlow(date=end, amount=maturity)]


# -----------------------------
# FIRE factories
# -----------------------------


def make_fire_inputs(**overrides: Any) -> FIREInputs:
    fields: dict[str, Any] = {
        "monthly_income": 150_000.0,
        "monthly_expense": 60_000.0,
        "inflation_rate_percent": 6.0,
        "current_age": 30,
        "retirement_age": 50,
        "life_expectancy": 85,
        "post_retirement_return_percent": 8.0,
    }
    fields.update(overrides)
    return FIREInputs(**fields)
