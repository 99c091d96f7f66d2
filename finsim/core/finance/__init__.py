# finsim/core/finance/__init__.py

from .amortization import (
    aggregate_yearly,
    annuity_payment,
    build_loan_parameters,
    month_for_period,
    simulate,
)
from .errors import FINANCE_ERRORS, DivergenceError, FinanceError, InvalidInputError
from .fire import project, to_investment_plan
from .xirr import build_cash_flows, project_growth, solve, solve_plan

__all__ = [
    "simulate",
    "annuity_payment",
    "aggregate_yearly",
    "build_loan_parameters",
    "month_for_period",
    "solve",
    "solve_plan",
    "build_cash_flows",
    "project_growth",
    "project",
    "to_investment_plan",
    "FinanceError",
    "InvalidInputError",
    "DivergenceError",
    "FINANCE_ERRORS",
]
