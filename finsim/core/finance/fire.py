# finsim/core/finance/fire.py

from __future__ import annotations

import logging
from datetime import date

from finsim.schemas.models import FIREInputs, FIREResult, InvestmentFrequency, InvestmentPlan

from .errors import InvalidInputError
from .xirr import add_months

logger = logging.getLogger(__name__)

EMERGENCY_FUND_MONTHS = 6
FOUR_PERCENT_MULTIPLE = 25  # 1 / 0.04


def real_return(nominal_percent: float, inflation_percent: float) -> float:
    """Inflation-adjusted return as a fraction: (1 + nominal) / (1 + inflation) - 1."""
    return (1.0 + nominal_percent / 100.0) / (1.0 + inflation_percent / 100.0) - 1.0


def sustenance_corpus(annual_expense: float, years: int, real_rate: float) -> float:
    """
    Present value of `years` annual withdrawals of `annual_expense` at `real_rate` (ordinary annuity).
    A zero real rate falls back to the straight-line sum.
    """
    if real_rate == 0:
        return annual_expense * years
    return annual_expense * (1.0 - (1.0 + real_rate) ** (-years)) / real_rate


def project(inputs: FIREInputs) -> FIREResult:
    """
    Retirement corpus requirements.

    - Expense is inflated to the retirement year, then annualized.
    - 4% rule: 25x the first retirement year's expense.
    - Sustenance: the same expense drawn every year of retirement, discounted at the real return.
    """
    years_to_retirement = inputs.retirement_age - inputs.current_age
    years_in_retirement = inputs.life_expectancy - inputs.retirement_age
    inflation = inputs.inflation_rate_percent / 100.0

    future_monthly_expense = inputs.monthly_expense * (1.0 + inflation) ** years_to_retirement
    annual_future_expense = future_monthly_expense * 12.0
    r_real = real_return(inputs.post_retirement_return_percent, inputs.inflation_rate_percent)

    logger.debug("FIRE: %d years to retirement, real return %.6f", years_to_retirement, r_real)
    return FIREResult(
        monthly_surplus=inputs.monthly_income - inputs.monthly_expense,
        emergency_fund_target=inputs.monthly_expense * EMERGENCY_FUND_MONTHS,
        years_to_retirement=years_to_retirement,
        years_in_retirement=years_in_retirement,
        future_monthly_expense=future_monthly_expense,
        annual_future_expense=annual_future_expense,
        corpus_by_four_percent_rule=annual_future_expense * FOUR_PERCENT_MULTIPLE,
        corpus_by_sustenance_model=sustenance_corpus(annual_future_expense, years_in_retirement, r_real),
    )


def to_investment_plan(result: FIREResult, start: date) -> InvestmentPlan:
    """
    Monthly plan that invests the current surplus until retirement, targeting the sustenance corpus.
    Solving it with xirr.solve_plan gives the return the plan needs to reach the corpus.
    """
    if result.years_to_retirement <= 0:
        raise InvalidInputError("already at retirement age; nothing to invest toward")
    surplus = round(result.monthly_surplus)
    if surplus <= 0:
        raise InvalidInputError("monthly surplus must be positive to build an investment plan")

    return InvestmentPlan(
        start_date=start,
        end_date=add_months(start, 12 * result.years_to_retirement),
        recurring_amount=float(surplus),
        frequency=InvestmentFrequency.MONTHLY,
        maturity_amount=float(round(result.corpus_by_sustenance_model)),
    )
