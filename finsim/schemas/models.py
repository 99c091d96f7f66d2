# finsim/schemas/models.py

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

# =========================
# Enumerations
# =========================


class RepaymentStrategy(str, Enum):
    """How the scheduler re-sizes the EMI when no manual EMI is in force."""

    REDUCE_TENURE = "TENURE"
    REDUCE_EMI = "EMI"


class InvestmentFrequency(str, Enum):
    """Installment cadence of a recurring investment plan."""

    FORTNIGHTLY = "15DAYS"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    HALF_YEARLY = "HALFYEARLY"
    YEARLY = "YEARLY"


ScheduleView = Literal["monthly", "yearly"]

# =========================
# Amortization
# =========================


class LoanParameters(BaseModel):
    """
    Loan terms plus mid-schedule overrides. All override maps are keyed by 1-based month index.
    Rates are nominal annual percentages (8.5 = 8.5%).
    """

    model_config = ConfigDict(frozen=True)

    principal: float = Field(..., gt=0, description="Amount borrowed (currency units).")
    annual_rate_percent: float = Field(..., ge=0, description="Base nominal annual interest rate in percent.")
    tenure_years: int = Field(..., ge=1, le=30, description="Original tenure in whole years (1..30).")
    strategy: RepaymentStrategy = Field(
        RepaymentStrategy.REDUCE_TENURE,
        description="REDUCE_TENURE keeps the EMI and shortens the loan; REDUCE_EMI keeps the end date and re-sizes the EMI.",
    )
    rate_overrides: dict[int, float] = Field(
        default_factory=dict, description="Month -> annual rate percent. In force from that month until superseded."
    )
    emi_overrides: dict[int, float] = Field(
        default_factory=dict, description="Month -> fixed EMI. In force from that month until superseded."
    )
    prepayments: dict[int, float] = Field(
        default_factory=dict, description="Month -> one-off extra principal paid in that month only."
    )

    @field_validator("rate_overrides", "emi_overrides", "prepayments")
    @classmethod
    def _check_override_map(cls, v: dict[int, float]) -> dict[int, float]:
        for month, amount in v.items():
            if month < 1:
                raise ValueError(f"override month must be >= 1, got {month}")
            if amount < 0:
                raise ValueError(f"override value must be >= 0, got {amount} at month {month}")
        return v


class ScheduleRow(BaseModel):
    """
    One simulated month, or one aggregated year (then `period` is the 1-based year).
    Values are unrounded; presentation rounding belongs to the caller.
    """

    period: int = Field(..., description="1-based month index (monthly view) or year index (yearly view).")
    emi_paid: float = Field(..., description="EMI actually paid: principal_paid + interest_paid. Averaged in yearly rows.")
    principal_paid: float = Field(..., description="Principal portion of the EMI (excludes prepayment).")
    interest_paid: float = Field(..., description="Interest charged on the opening outstanding.")
    total_payment: float = Field(..., description="EMI paid plus prepayment.")
    outstanding_principal: float = Field(..., description="Closing balance, never below zero.")
    cumulative_interest: float = Field(..., description="Interest paid since month 1.")
    cumulative_principal: float = Field(..., description="Principal repaid since month 1, prepayments included.")
    prepayment: float = Field(0.0, description="One-off extra principal applied in this period.")
    effective_annual_rate: float = Field(..., description="Annual rate percent in force (first month's rate for yearly rows).")


class ScheduleSummary(BaseModel):
    """Headline figures and soft-warning flags for one simulation."""

    base_emi: float = Field(..., description="Annuity EMI for principal, base rate and original tenure.")
    first_emi: float = Field(0.0, description="EMI paid in month 1 (0 if no rows).")
    last_emi: float = Field(0.0, description="EMI paid in the final simulated month (0 if no rows).")
    total_interest: float = Field(0.0, description="Sum of interest across all months.")
    total_payment: float = Field(0.0, description="Principal + total interest.")
    actual_tenure_months: int = Field(0, description="Number of simulated months.")
    cap_triggered: bool = Field(
        False, description="REDUCE_TENURE raised the EMI to clear the loan within the 360-month cap."
    )
    negative_amortization_guard_triggered: bool = Field(
        False, description="An EMI at or below the month's interest was lifted to interest + a fixed principal increment."
    )
    ceiling_hit: bool = Field(False, description="Simulation stopped at the 480-month ceiling with balance outstanding.")


class AmortizationResult(BaseModel):
    """Full ledger, yearly rollup and summary."""

    monthly: list[ScheduleRow] = Field(default_factory=list)
    yearly: list[ScheduleRow] = Field(default_factory=list)
    summary: ScheduleSummary

    @property
    def warnings(self) -> list[str]:
        out: list[str] = []
        s = self.summary
        if s.cap_triggered:
            out.append("Tenure reached the 30-year cap; EMI was auto-adjusted to clear the debt.")
        if s.negative_amortization_guard_triggered:
            out.append("EMI fell to or below monthly interest; a minimal principal payment was enforced.")
        if s.ceiling_hit:
            out.append("Loan still outstanding after 480 months; schedule stopped at the simulation ceiling.")
        return out


# =========================
# XIRR
# =========================


class CashFlow(BaseModel):
    """A dated amount. Negative = outflow (investment), positive = inflow (redemption/maturity)."""

    model_config = ConfigDict(frozen=True)

    date: dt.date = Field(..., description="Calendar date of the flow.")
    amount: float = Field(..., description="Signed amount in currency units.")


class XIRRResult(BaseModel):
    """Solved annualized return and the totals it was computed from."""

    rate: float = Field(..., description="Annualized return as a fraction (0.12 = 12%).")
    rate_percent: float = Field(..., description="rate * 100.")
    total_invested: float = Field(..., description="Sum of outflow magnitudes.")
    total_gain: float = Field(..., description="Sum of inflows minus total invested (negative for a loss).")
    cash_flow_count: int = Field(..., description="Flows supplied, or installments when solved from a plan.")


class InvestmentPlan(BaseModel):
    """Recurring investment (SIP) ending in a single maturity amount."""

    model_config = ConfigDict(frozen=True)

    start_date: dt.date = Field(..., description="Date of the first installment.")
    end_date: dt.date = Field(..., description="Maturity date; installments are scheduled strictly before it.")
    recurring_amount: float = Field(..., gt=0, description="Installment amount (positive).")
    frequency: InvestmentFrequency = Field(InvestmentFrequency.MONTHLY, description="Installment cadence.")
    maturity_amount: float = Field(..., ge=0, description="Amount received on end_date.")


class ProjectionPoint(BaseModel):
    """Invested capital and earnings at the end of one plan-year."""

    year: int = Field(..., description="1-based plan year.")
    label: str = Field(..., description='"Year n", or "Maturity" for the final point.')
    invested: float = Field(..., description="Installments paid on or before the point's date.")
    earnings: float = Field(..., description="Value compounded at the solved rate minus invested, floored at 0.")


# =========================
# FIRE
# =========================


class FIREInputs(BaseModel):
    """Household cash flow and retirement assumptions. Percentages are given as percent (6 = 6%)."""

    model_config = ConfigDict(frozen=True)

    monthly_income: float = Field(..., ge=0, description="Take-home income per month.")
    monthly_expense: float = Field(..., ge=0, description="Current living expense per month.")
    inflation_rate_percent: float = Field(6.0, gt=-100, description="Expected annual inflation in percent.")
    current_age: int = Field(..., ge=0, description="Age today in years.")
    retirement_age: int = Field(..., ge=0, description="Target retirement age.")
    life_expectancy: int = Field(..., ge=0, description="Planning horizon age.")
    post_retirement_return_percent: float = Field(
        8.0, gt=-100, description="Expected nominal annual return on the corpus after retirement, in percent."
    )

    @model_validator(mode="after")
    def _ages_in_order(self) -> FIREInputs:
        if not (self.current_age <= self.retirement_age <= self.life_expectancy):
            raise ValueError("ages must satisfy current_age <= retirement_age <= life_expectancy")
        return self


class FIREResult(BaseModel):
    """Corpus requirements under the 4% rule and the inflation-adjusted sustenance model."""

    monthly_surplus: float = Field(..., description="Income minus expense per month.")
    emergency_fund_target: float = Field(..., description="Six months of current expenses.")
    years_to_retirement: int = Field(..., description="retirement_age - current_age.")
    years_in_retirement: int = Field(..., description="life_expectancy - retirement_age.")
    future_monthly_expense: float = Field(..., description="Monthly expense inflated to the retirement year.")
    annual_future_expense: float = Field(..., description="future_monthly_expense * 12.")
    corpus_by_four_percent_rule: float = Field(..., description="25x the first retirement year's expense.")
    corpus_by_sustenance_model: float = Field(
        ..., description="Present value of the retirement-year expense as an annuity at the real return."
    )
