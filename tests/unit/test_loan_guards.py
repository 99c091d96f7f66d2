# tests/unit/test_loan_guards.py
import logging

import pytest

from finsim.core.finance import annuity_payment, simulate
from finsim.core.finance.amortization import MAX_SIMULATION_MONTHS, MIN_PRINCIPAL_INCREMENT, TENURE_CAP_MONTHS
from tests.utils import make_loan


def test_rate_hike_triggers_tenure_cap(schedule_factory):
    # At 12% the base EMI (~86.8k) cannot clear ₹1 crore within 360 months
    result = schedule_factory(rate_overrides={1: 12.0})
    s = result.summary
    assert s.cap_triggered
    assert s.actual_tenure_months == TENURE_CAP_MONTHS
    assert s.first_emi == pytest.approx(annuity_payment(10_000_000, 12.0, 360), rel=1e-12)
    assert s.first_emi > s.base_emi
    assert not s.ceiling_hit
    assert "Tenure reached the 30-year cap; EMI was auto-adjusted to clear the debt." in result.warnings


def test_cap_is_logged_once(schedule_factory, caplog):
    with caplog.at_level(logging.WARNING, logger="finsim"):
        schedule_factory(rate_overrides={1: 12.0})
    cap_lines = [r for r in caplog.records if "to clear within" in r.getMessage()]
    assert len(cap_lines) == 1


def test_thirty_year_loan_does_not_trip_cap_on_rounding():
    result = simulate(make_loan(tenure_years=30))
    assert result.summary.actual_tenure_months == 360
    assert not result.summary.cap_triggered


def test_guard_lifts_emi_below_interest(schedule_factory):
    # Month-1 interest on ₹1 crore @ 8.5% is ~70,833; a 50k EMI would grow the debt
    result = schedule_factory(emi_overrides={1: 50_000.0})
    first = result.monthly[0]
    assert result.summary.negative_amortization_guard_triggered
    assert first.principal_paid == pytest.approx(MIN_PRINCIPAL_INCREMENT, rel=1e-9)
    assert first.emi_paid == pytest.approx(first.interest_paid + MIN_PRINCIPAL_INCREMENT, rel=1e-12)
    monthly = result.monthly
    for prev, cur in zip(monthly, monthly[1:]):
        assert cur.outstanding_principal < prev.outstanding_principal


def test_manual_emi_runs_past_tenure_cap_to_ceiling(schedule_factory):
    # The 360-month cap only re-sizes automatic EMIs; a manual EMI is bounded by the 480 ceiling.
    result = schedule_factory(emi_overrides={1: 50_000.0})
    s = result.summary
    assert not s.cap_triggered
    assert s.actual_tenure_months == MAX_SIMULATION_MONTHS
    assert len(result.monthly) > TENURE_CAP_MONTHS
    assert s.ceiling_hit
    # Principal shrinks by exactly the guard increment each month
    assert result.monthly[-1].outstanding_principal == pytest.approx(10_000_000 - 480 * 100.0, rel=1e-9)
    assert len(result.warnings) == 2


def test_guard_at_zero_rate_and_zero_emi():
    # 0% and a ₹0 EMI: the guard pays ₹100 a month
    result = simulate(make_loan(principal=10_000.0, annual_rate_percent=0.0, tenure_years=1, emi_overrides={1: 0.0}))
    s = result.summary
    assert s.negative_amortization_guard_triggered
    assert s.actual_tenure_months == 100
    assert s.total_interest == 0.0
    assert not s.ceiling_hit


def test_loan_paid_off_exactly_at_ceiling_is_not_flagged():
    # ₹48,000 at 0% with a ₹100 EMI clears in month 480
    result = simulate(make_loan(principal=48_000.0, annual_rate_percent=0.0, tenure_years=1, emi_overrides={1: 100.0}))
    assert result.summary.actual_tenure_months == 480
    assert not result.summary.ceiling_hit
    assert not result.summary.negative_amortization_guard_triggered
