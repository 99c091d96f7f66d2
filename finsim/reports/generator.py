# finsim/reports/generator.py

from __future__ import annotations

from pathlib import Path

from finsim.schemas.models import (
    AmortizationResult,
    FIREInputs,
    FIREResult,
    LoanParameters,
    ProjectionPoint,
    RepaymentStrategy,
    ScheduleRow,
    XIRRResult,
)

from .formatting import fmt_inr, fmt_pct, to_indian_words


def _section(title: str) -> str:
    """
    Render a level-2 heading for Markdown sections.
    """
    return f"\n## {title}\n"


# -----------------------
# Loan
# -----------------------


def _render_loan_summary(params: LoanParameters | None, result: AmortizationResult) -> str:
    """
    Headline loan figures as a bullet list.
    """
    s = result.summary
    lines = [_section("Loan Summary")]
    if params is not None:
        lines += [
            f"- **Principal:** {fmt_inr(params.principal)} ({to_indian_words(params.principal)})",
            f"- **Base Rate:** {fmt_pct(params.annual_rate_percent)}",
            f"- **Tenure:** {params.tenure_years} years",
            f"- **Strategy:** {'Reduce EMI' if params.strategy == RepaymentStrategy.REDUCE_EMI else 'Reduce Tenure'}",
        ]
    years, months = divmod(s.actual_tenure_months, 12)
    lines += [
        f"- **Initial EMI:** {fmt_inr(s.base_emi)}",
        f"- **First / Last EMI Paid:** {fmt_inr(s.first_emi)} / {fmt_inr(s.last_emi)}",
        f"- **Total Interest:** {fmt_inr(s.total_interest)}",
        f"- **Total Payment:** {fmt_inr(s.total_payment)}",
        f"- **Actual Tenure:** {s.actual_tenure_months} months ({years}y {months}m)",
    ]
    return "\n".join(lines) + "\n"


def _render_schedule_table(rows: list[ScheduleRow], *, yearly: bool) -> str:
    """
    Columns:
      Period | Rate | EMI | Principal | Interest | Prepayment | Outstanding
    """
    if not rows:
        return ""
    label = "Year" if yearly else "Month"
    emi_label = "Avg EMI" if yearly else "EMI"
    header = [
        _section(f"{'Yearly' if yearly else 'Monthly'} Schedule"),
        f"| {label} | Rate | {emi_label} | Principal | Interest | Prepayment | Outstanding |",
        "| ---: | ---: | ---: | ---: | ---: | ---: | ---: |",
    ]
    body = [
        f"| {r.period} "
        f"| {fmt_pct(r.effective_annual_rate)} "
        f"| {fmt_inr(r.emi_paid)} "
        f"| {fmt_inr(r.principal_paid)} "
        f"| {fmt_inr(r.interest_paid)} "
        f"| {fmt_inr(r.prepayment)} "
        f"| {fmt_inr(r.outstanding_principal)} |"
        for r in rows
    ]
    return "\n".join(header + body) + "\n"


def _render_warnings(warnings: list[str]) -> str:
    """
    Render guardrail warnings, if any.
    """
    if not warnings:
        return ""
    lines = [_section("Warnings")]
    for w in warnings:
        lines.append(f"- {w}")
    return "\n".join(lines) + "\n"


# -----------------------
# XIRR
# -----------------------


def _render_xirr(result: XIRRResult, projection: list[ProjectionPoint] | None) -> str:
    lines = [
        _section("Returns (XIRR)"),
        f"- **XIRR:** {fmt_pct(result.rate_percent)}",
        f"- **Total Invested:** {fmt_inr(result.total_invested)}",
        f"- **Total Gain:** {fmt_inr(result.total_gain)}",
        f"- **Installments / Flows:** {result.cash_flow_count}",
    ]
    if projection:
        lines += [
            "",
            "| Year | Invested | Earnings | Value |",
            "| :--- | ---: | ---: | ---: |",
        ]
        for p in projection:
            lines.append(f"| {p.label} | {fmt_inr(p.invested)} | {fmt_inr(p.earnings)} | {fmt_inr(p.invested + p.earnings)} |")
    return "\n".join(lines) + "\n"


# -----------------------
# FIRE
# -----------------------


def _render_fire(inputs: FIREInputs | None, result: FIREResult) -> str:
    lines = [_section("FIRE Corpus")]
    if inputs is not None:
        lines += [
            f"- **Ages:** {inputs.current_age} → retire {inputs.retirement_age} → plan to {inputs.life_expectancy}",
            f"- **Inflation / Post-Retirement Return:** {fmt_pct(inputs.inflation_rate_percent)} / "
            f"{fmt_pct(inputs.post_retirement_return_percent)}",
        ]
    lines += [
        f"- **Monthly Surplus:** {fmt_inr(result.monthly_surplus)}",
        f"- **Emergency Fund Target:** {fmt_inr(result.emergency_fund_target)}",
        f"- **Monthly Expense at Retirement:** {fmt_inr(result.future_monthly_expense)}",
        f"- **Corpus (4% Rule):** {fmt_inr(result.corpus_by_four_percent_rule)}",
        f"- **Corpus (Sustenance Model, {result.years_in_retirement} years):** {fmt_inr(result.corpus_by_sustenance_model)}",
        f"  - {to_indian_words(result.corpus_by_sustenance_model)}",
    ]
    return "\n".join(lines) + "\n"


# -----------------------
# Orchestration
# -----------------------


def generate_report(
    *,
    loan_params: LoanParameters | None = None,
    loan: AmortizationResult | None = None,
    xirr: XIRRResult | None = None,
    projection: list[ProjectionPoint] | None = None,
    fire_inputs: FIREInputs | None = None,
    fire: FIREResult | None = None,
    title_override: str | None = None,
    include_monthly: bool = False,
) -> str:
    """
    Generate a Markdown report for whichever calculators were run.

    Sections:
      - Loan Summary, Yearly Schedule, Warnings (if a loan result is given);
        the Monthly Schedule too when include_monthly=True
      - Returns (XIRR) with the yearly growth table (if given)
      - FIRE Corpus (if given)
    """
    parts = [f"# {title_override or 'Financial Simulation Report'}\n"]
    if loan is not None:
        parts += [
            _render_loan_summary(loan_params, loan),
            _render_schedule_table(loan.yearly, yearly=True),
            _render_schedule_table(loan.monthly, yearly=False) if include_monthly else "",
            _render_warnings(loan.warnings),
        ]
    if xirr is not None:
        parts.append(_render_xirr(xirr, projection))
    if fire is not None:
        parts.append(_render_fire(fire_inputs, fire))
    return "\n".join(part for part in parts if part).strip() + "\n"


def write_report(path: str | Path, **sections: object) -> None:
    """
    Convenience helper to write the generated report to disk.
    Keyword arguments are passed through to generate_report().
    """
    md = generate_report(**sections)  # type: ignore[arg-type]
    with open(path, "w", encoding="utf-8") as f:
        f.write(md)
