# tests/unit/test_inputs_loader.py
import json
from datetime import date

import pytest

from finsim.core.finance import InvalidInputError
from finsim.inputs.inputs import AppInputs, InputsLoader, load_inputs
from finsim.schemas.models import InvestmentFrequency, RepaymentStrategy

STRUCTURED = {
    "loan": {"principal": 5_000_000, "annual_rate_percent": 9.0, "tenure_years": 15},
    "xirr": {
        "plan": {
            "start_date": "2024-01-01",
            "end_date": "2027-01-01",
            "recurring_amount": 5_000,
            "frequency": "QUARTERLY",
            "maturity_amount": 70_000,
        }
    },
    "fire": {
        "monthly_income": 200_000,
        "monthly_expense": 80_000,
        "current_age": 35,
        "retirement_age": 55,
        "life_expectancy": 90,
    },
    "run": {"out": "custom.md", "calc": "loan"},
}


def _write(tmp_path, payload, name="finsim.json"):
    p = tmp_path / name
    p.write_text(json.dumps(payload), encoding="utf-8")
    return p


def test_loads_structured_file(tmp_path):
    cfg = InputsLoader().load(_write(tmp_path, STRUCTURED))
    assert cfg.loan is not None and cfg.loan.principal == 5_000_000
    assert cfg.loan.strategy == RepaymentStrategy.REDUCE_TENURE
    assert cfg.xirr is not None and cfg.xirr.plan is not None
    assert cfg.xirr.plan.frequency == InvestmentFrequency.QUARTERLY
    assert cfg.xirr.plan.start_date == date(2024, 1, 1)
    # FIRE defaults fill in inflation and return
    assert cfg.fire is not None and cfg.fire.inflation_rate_percent == 6.0
    assert cfg.run.out == "custom.md"
    assert cfg.run.calc == "loan"


def test_loads_bare_app_loan_with_camel_case_keys():
    payload = {
        "principal": 10_000_000,
        "interestRate": 8.5,
        "tenureYears": 20,
        "prepaymentStrategy": "EMI",
        "emiOverrides": {"13": 95_000},
        "interestRateOverrides": {"25": 9.25},
    }
    cfg = InputsLoader().load_json(json.dumps(payload))
    loan = cfg.loan
    assert loan is not None
    assert loan.annual_rate_percent == 8.5
    assert loan.strategy == RepaymentStrategy.REDUCE_EMI
    assert loan.emi_overrides == {13: 95_000.0}
    assert loan.rate_overrides == {25: 9.25}
    assert cfg.xirr is None and cfg.fire is None


def test_explicit_cash_flows():
    payload = {"xirr": {"cash_flows": [{"date": "2023-01-01", "amount": -100}, {"date": "2024-01-01", "amount": 110}]}}
    cfg = InputsLoader().load_json(json.dumps(payload))
    assert cfg.xirr is not None and len(cfg.xirr.cash_flows or []) == 2
    assert cfg.run == AppInputs().run


@pytest.mark.parametrize(
    "xirr",
    [
        {},
        {
            "cash_flows": [{"date": "2023-01-01", "amount": -100}],
            "plan": {"start_date": "2024-01-01", "end_date": "2025-01-01", "recurring_amount": 1, "maturity_amount": 20},
        },
    ],
    ids=["neither", "both"],
)
def test_xirr_requires_exactly_one_source(xirr):
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json(json.dumps({"xirr": xirr}))


def test_validation_failure_is_invalid_input():
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json(json.dumps({"loan": {"principal": -1, "annual_rate_percent": 8, "tenure_years": 10}}))


def test_fire_ages_out_of_order_is_invalid_input():
    fire = dict(STRUCTURED["fire"], retirement_age=30)
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json(json.dumps({"fire": fire}))


def test_bad_json_and_non_object_root(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        InputsLoader().load(bad)
    with pytest.raises(InvalidInputError):
        InputsLoader().load_json("[1, 2, 3]")


def test_non_json_extension_rejected(tmp_path):
    p = tmp_path / "inputs.yaml"
    p.write_text("loan: {}", encoding="utf-8")
    with pytest.raises(InvalidInputError):
        InputsLoader().load(p)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        InputsLoader().load(tmp_path / "nope.json")


def test_default_search_order(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        load_inputs()
    _write(tmp_path, {"fire": STRUCTURED["fire"]}, name="config.json")
    assert load_inputs().fire is not None
    _write(tmp_path, {"loan": STRUCTURED["loan"]}, name="finsim.json")
    cfg = load_inputs()
    assert cfg.loan is not None and cfg.fire is None


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("FINSIM_OUT", "env.md")
    monkeypatch.setenv("FINSIM_CALC", " XIRR ")
    cfg = InputsLoader().load(_write(tmp_path, STRUCTURED))
    assert cfg.run.out == "env.md"
    assert cfg.run.calc == "xirr"


def test_invalid_env_calc_is_ignored(tmp_path, monkeypatch):
    monkeypatch.setenv("FINSIM_CALC", "mortgage")
    cfg = InputsLoader().load(_write(tmp_path, STRUCTURED))
    assert cfg.run.calc == "loan"


def test_with_overrides_returns_new_object():
    loader = InputsLoader()
    cfg = loader.load_json(json.dumps(STRUCTURED))
    updated = loader.with_overrides(cfg, out="x.md", calc="fire")
    assert updated.run.out == "x.md" and updated.run.calc == "fire"
    assert cfg.run.out == "custom.md" and cfg.run.calc == "loan"
    assert loader.with_overrides(cfg) is cfg
    with pytest.raises(InvalidInputError):
        loader.with_overrides(cfg, calc="mortgage")
