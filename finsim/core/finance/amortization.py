# finsim/core/finance/amortization.py

from __future__ import annotations

import logging
from typing import Any

from finsim.schemas.models import (
    AmortizationResult,
    LoanParameters,
    RepaymentStrategy,
    ScheduleRow,
    ScheduleSummary,
    ScheduleView,
)

from .errors import InvalidInputError, finance_error_guard

logger = logging.getLogger(__name__)

MAX_SIMULATION_MONTHS = 480  # hard safety ceiling
TENURE_CAP_MONTHS = 360  # REDUCE_TENURE must clear the loan within this many months
PAYOFF_TOLERANCE = 0.05
MIN_PRINCIPAL_INCREMENT = 100.0
MAX_TENURE_YEARS = 30

_EMI_REL_TOL = 1e-9  # float noise between two annuities that are equal on paper


def annuity_payment(principal: float, annual_rate_percent: float, months: int) -> float:
    """
    Level monthly payment that clears `principal` over `months` months.

    Formula (standard annuity):
        EMI = P * r * (1 + r)^n / ((1 + r)^n - 1),  r = annual_rate_percent / 1200

    Notes:
        - A 0% rate reduces to P / n.
    """
    if months <= 0:
        raise InvalidInputError(f"months must be > 0, got {months}")
    r = annual_rate_percent / 1200.0
    if r == 0:
        return principal / months
    growth = (1.0 + r) ** months
    return principal * r * growth / (growth - 1.0)


def month_for_period(period: int, view: ScheduleView = "monthly") -> int:
    """
    Map a row edited in a schedule view to the month index its override is stored under.
    Yearly rows map to the first month of that year.
    """
    if period < 1:
        raise InvalidInputError(f"period is 1-based, got {period}")
    if view == "monthly":
        return period
    if view == "yearly":
        return (period - 1) * 12 + 1
    raise InvalidInputError(f"unknown schedule view: {view!r}")


def build_loan_parameters(**fields: Any) -> LoanParameters:
    """Construct LoanParameters, surfacing validation failures as InvalidInputError."""
    with finance_error_guard():
        return LoanParameters(**fields)


def _check_structure(params: LoanParameters) -> None:
    # Re-checked here so records built with model_construct() cannot bypass validation.
    if params.principal <= 0:
        raise InvalidInputError(f"principal must be > 0, got {params.principal}")
    if params.annual_rate_percent < 0:
        raise InvalidInputError(f"annual rate must be >= 0, got {params.annual_rate_percent}")
    if not 1 <= params.tenure_years <= MAX_TENURE_YEARS:
        raise InvalidInputError(f"tenure must be 1..{MAX_TENURE_YEARS} years, got {params.tenure_years}")


def aggregate_yearly(monthly: list[ScheduleRow]) -> list[ScheduleRow]:
    """
    Roll monthly rows into 12-month blocks.

    - principal / interest / prepayment / total payment: summed
    - EMI: averaged over the months present in the block
    - outstanding and cumulative figures: last month of the block
    - rate: first month of the block
    """
    out: list[ScheduleRow] = []
    for start in range(0, len(monthly), 12):
        block = monthly[start : start + 12]
        last = block[-1]
        out.append(
            ScheduleRow(
                period=start // 12 + 1,
                emi_paid=sum(r.emi_paid for r in block) / len(block),
                principal_paid=sum(r.principal_paid for r in block),
                interest_paid=sum(r.interest_paid for r in block),
                total_payment=sum(r.total_payment for r in block),
                outstanding_principal=last.outstanding_principal,
                cumulative_interest=last.cumulative_interest,
                cumulative_principal=last.cumulative_principal,
                prepayment=sum(r.prepayment for r in block),
                effective_annual_rate=block[0].effective_annual_rate,
            )
        )
    return out


def simulate(params: LoanParameters) -> AmortizationResult:
    """
    Simulate the loan month by month.

    Each month:
      1. A rate override at this month replaces the current rate (persists until the next one).
      2. An EMI override at this month replaces the manual EMI (persists until the next one).
      3. Without a manual EMI, REDUCE_EMI re-sizes the EMI to finish on the original end date;
         REDUCE_TENURE keeps the base EMI unless a higher one is needed to clear within 360 months.
      4. An EMI that does not exceed the month's interest is lifted to interest + MIN_PRINCIPAL_INCREMENT.
      5. Principal portion is clamped to the outstanding; a prepayment is applied on top.

    Stops when the outstanding falls to PAYOFF_TOLERANCE or at MAX_SIMULATION_MONTHS.
    """
    _check_structure(params)

    base_months = min(TENURE_CAP_MONTHS, params.tenure_years * 12)
    base_emi = annuity_payment(params.principal, params.annual_rate_percent, base_months)

    outstanding = float(params.principal)
    cumulative_interest = 0.0
    cumulative_principal = 0.0
    current_rate = params.annual_rate_percent
    manual_emi: float | None = None
    cap_triggered = False
    guard_triggered = False

    monthly: list[ScheduleRow] = []

    for m in range(1, MAX_SIMULATION_MONTHS + 1):
        if outstanding <= PAYOFF_TOLERANCE:
            break

        if m in params.rate_overrides:
            current_rate = params.rate_overrides[m]
            logger.debug("month %d: rate override -> %.4f%%", m, current_rate)

        if m in params.emi_overrides:
            manual_emi = params.emi_overrides[m]
            logger.debug("month %d: manual EMI -> %.2f", m, manual_emi)

        if manual_emi is not None:
            emi = manual_emi
        elif params.strategy == RepaymentStrategy.REDUCE_EMI:
            emi = annuity_payment(outstanding, current_rate, max(1, base_months - m + 1))
        else:
            min_emi_for_cap = annuity_payment(outstanding, current_rate, max(1, TENURE_CAP_MONTHS - m + 1))
            if min_emi_for_cap > base_emi * (1.0 + _EMI_REL_TOL):
                if not cap_triggered:
                    logger.warning("month %d: EMI raised to %.2f to clear within %d months", m, min_emi_for_cap, TENURE_CAP_MONTHS)
                emi = min_emi_for_cap
                cap_triggered = True
            else:
                emi = base_emi

        interest = outstanding * (current_rate / 1200.0)
        if emi <= interest:
            if not guard_triggered:
                logger.warning("month %d: EMI %.2f does not cover interest %.2f; enforcing minimal principal", m, emi, interest)
            emi = interest + MIN_PRINCIPAL_INCREMENT
            guard_triggered = True

        principal_part = emi - interest
        emi_paid = emi
        # Final month: never repay more than is outstanding
        if principal_part > outstanding:
            principal_part = outstanding
            emi_paid = interest + principal_part
        prepayment = max(0.0, min(params.prepayments.get(m, 0.0), outstanding - principal_part))

        outstanding -= principal_part + prepayment
        cumulative_interest += interest
        cumulative_principal += principal_part + prepayment

        monthly.append(
            ScheduleRow(
                period=m,
                emi_paid=emi_paid,
                principal_paid=principal_part,
                interest_paid=interest,
                total_payment=emi_paid + prepayment,
                outstanding_principal=max(0.0, outstanding),
                cumulative_interest=cumulative_interest,
                cumulative_principal=cumulative_principal,
                prepayment=prepayment,
                effective_annual_rate=current_rate,
            )
        )

    ceiling_hit = len(monthly) == MAX_SIMULATION_MONTHS and outstanding > PAYOFF_TOLERANCE
    if ceiling_hit:
        logger.warning("loan still outstanding (%.2f) after %d months", outstanding, MAX_SIMULATION_MONTHS)

    summary = ScheduleSummary(
        base_emi=base_emi,
        first_emi=monthly[0].emi_paid if monthly else 0.0,
        last_emi=monthly[-1].emi_paid if monthly else 0.0,
        total_interest=cumulative_interest,
        total_payment=cumulative_principal + cumulative_interest,
        actual_tenure_months=len(monthly),
        cap_triggered=cap_triggered,
        negative_amortization_guard_triggered=guard_triggered,
        ceiling_hit=ceiling_hit,
    )
    logger.debug("simulated %d months; total interest %.2f", len(monthly), cumulative_interest)

    return AmortizationResult(monthly=monthly, yearly=aggregate_yearly(monthly), summary=summary)
