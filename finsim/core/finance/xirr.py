# finsim/core/finance/xirr.py

from __future__ import annotations

import calendar
import logging
import math
from collections.abc import Iterable
from datetime import date, timedelta

import numpy as np
from numpy.typing import NDArray

from finsim.schemas.models import (
    CashFlow,
    InvestmentFrequency,
    InvestmentPlan,
    ProjectionPoint,
    XIRRResult,
)

from .errors import DivergenceError, InvalidInputError

logger = logging.getLogger(__name__)

CashFlowItem = CashFlow | tuple[date, float]

DAYS_PER_YEAR = 365.0
MAX_ITER = 100
STEP_TOL = 1e-5
DERIVATIVE_FLOOR = 1e-7

_MIN_BASE = 1e-4  # keeps 1 + rate positive under fractional exponents
_FLAT_NPV_TOL = 1e-6  # relative to gross cash-flow magnitude

_MONTHS_PER_STEP = {
    InvestmentFrequency.MONTHLY: 1,
    InvestmentFrequency.QUARTERLY: 3,
    InvestmentFrequency.HALF_YEARLY: 6,
    InvestmentFrequency.YEARLY: 12,
}
_FORTNIGHT_DAYS = 15


def _normalize(cash_flows: Iterable[CashFlowItem]) -> list[CashFlow]:
    out: list[CashFlow] = []
    for item in cash_flows:
        if isinstance(item, CashFlow):
            out.append(item)
        else:
            d, amount = item
            out.append(CashFlow(date=d, amount=float(amount)))
    # Stable sort: the earliest flow anchors the day count
    return sorted(out, key=lambda f: f.date)


def _year_fractions(flows: list[CashFlow]) -> NDArray[np.float64]:
    t0 = flows[0].date
    return np.array([(f.date - t0).days / DAYS_PER_YEAR for f in flows], dtype=np.float64)


def solve(cash_flows: Iterable[CashFlowItem]) -> XIRRResult:
    """
    Annualized internal rate of return for dated cash flows (XIRR).

    Accepts CashFlow records or (date, amount) tuples; negative = outflow, positive = inflow.

    Method:
      Newton-Raphson on NPV(r) = sum(a_i / (1 + r)^t_i), t_i = days since the first flow / 365,
      with the analytic derivative. Starts at +10% when inflows exceed outflows, else -10%.
      Stops when a step moves less than STEP_TOL. If the derivative flattens below
      DERIVATIVE_FLOOR, the current rate is kept only if NPV is already ~0. A step that
      would take the rate to or below -100% is replaced by the midpoint towards -1.

    Raises:
      InvalidInputError: fewer than 2 flows, zero-day span, or no outflow/inflow.
      DivergenceError: no convergence within MAX_ITER steps or a flat curve away from the root.
    """
    flows = _normalize(cash_flows)
    if len(flows) < 2:
        raise InvalidInputError("XIRR needs at least two cash flows")
    if flows[-1].date <= flows[0].date:
        raise InvalidInputError("cash flows must span more than zero days")

    amounts = np.array([f.amount for f in flows], dtype=np.float64)
    times = _year_fractions(flows)

    total_in = float(amounts[amounts > 0].sum())
    total_out = float(-amounts[amounts < 0].sum())
    if total_in <= 0 or total_out <= 0:
        raise InvalidInputError("XIRR needs at least one negative and one positive cash flow")

    def npv(rate: float) -> float:
        base = max(1.0 + rate, _MIN_BASE)
        return float(np.sum(amounts / base**times))

    def dnpv(rate: float) -> float:
        # derivative of NPV w.r.t. rate
        base = max(1.0 + rate, _MIN_BASE)
        return float(np.sum(-times * amounts * base ** (-times - 1.0)))

    gross = float(np.abs(amounts).sum())
    rate = 0.10 if total_in > total_out else -0.10

    for step in range(MAX_ITER):
        f = npv(rate)
        df = dnpv(rate)
        if abs(df) < DERIVATIVE_FLOOR:
            if abs(f) <= _FLAT_NPV_TOL * gross:
                break
            raise DivergenceError(f"NPV curve is flat at rate {rate:.6f} (NPV {f:.4f}); cannot compute return")
        next_rate = rate - f / df
        if not math.isfinite(next_rate):
            raise DivergenceError(f"Newton step produced a non-finite rate after {step + 1} steps")
        if 1.0 + next_rate <= _MIN_BASE:
            # overshot below -100%: halve the distance to -1 instead
            next_rate = (rate - 1.0) / 2.0
        if abs(next_rate - rate) < STEP_TOL:
            rate = next_rate
            break
        rate = next_rate
    else:
        raise DivergenceError(f"XIRR did not converge within {MAX_ITER} steps (last rate {rate:.6f})")

    logger.debug("xirr converged at %.6f over %d flows", rate, len(flows))
    return XIRRResult(
        rate=rate,
        rate_percent=rate * 100.0,
        total_invested=total_out,
        total_gain=total_in - total_out,
        cash_flow_count=len(flows),
    )


# =========================
# Recurring investment plans
# =========================


def add_months(d: date, months: int) -> date:
    """Calendar month arithmetic; the day is clamped to the target month's length."""
    years, month0 = divmod(d.month - 1 + months, 12)
    year = d.year + years
    month = month0 + 1
    return date(year, month, min(d.day, calendar.monthrange(year, month)[1]))


def _installment_date(start: date, frequency: InvestmentFrequency, n: int) -> date:
    # Anchored on the start date so short months do not drift later installments
    if frequency == InvestmentFrequency.FORTNIGHTLY:
        return start + timedelta(days=_FORTNIGHT_DAYS * n)
    return add_months(start, _MONTHS_PER_STEP[frequency] * n)


def build_cash_flows(plan: InvestmentPlan) -> list[CashFlow]:
    """
    Expand a plan into installments (dated strictly before end_date) plus the maturity inflow.
    """
    if plan.start_date >= plan.end_date:
        raise InvalidInputError("plan start_date must be before end_date")

    flows: list[CashFlow] = []
    n = 0
    current = plan.start_date
    while current < plan.end_date:
        flows.append(CashFlow(date=current, amount=-plan.recurring_amount))
        n += 1
        current = _installment_date(plan.start_date, plan.frequency, n)

    flows.append(CashFlow(date=plan.end_date, amount=plan.maturity_amount))
    return flows


def solve_plan(plan: InvestmentPlan) -> XIRRResult:
    """Solve a recurring plan; cash_flow_count reports installments (the maturity flow excluded)."""
    flows = build_cash_flows(plan)
    result = solve(flows)
    return result.model_copy(update={"cash_flow_count": len(flows) - 1})


def project_growth(plan: InvestmentPlan, result: XIRRResult) -> list[ProjectionPoint]:
    """
    Year-by-year invested capital and earnings, compounding each installment at the solved rate.
    The last point is the maturity date.
    """
    flows = build_cash_flows(plan)
    installments = [f for f in flows if f.amount < 0]
    base = max(1.0 + result.rate, _MIN_BASE)

    # Plan anniversaries up to (and including the first one at or past) maturity
    years = 1
    while add_months(plan.start_date, 12 * years) < plan.end_date:
        years += 1

    points: list[ProjectionPoint] = []
    for i in range(1, years + 1):
        target = min(add_months(plan.start_date, 12 * i), plan.end_date)
        paid = [f for f in installments if f.date <= target]
        invested = sum(-f.amount for f in paid)
        value = sum(-f.amount * base ** ((target - f.date).days / DAYS_PER_YEAR) for f in paid)
        points.append(
            ProjectionPoint(
                year=i,
                label="Maturity" if i == years else f"Year {i}",
                invested=invested,
                earnings=max(0.0, value - invested),
            )
        )
    return points
