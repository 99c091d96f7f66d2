# tests/conftest.py
from __future__ import annotations

import pytest

from finsim.core.finance import simulate
from tests.utils import make_fire_inputs, make_loan, make_plan


# -------- Environment isolation --------
@pytest.fixture(autouse=True)
def _clear_finsim_env(monkeypatch):
    for name in ("FINSIM_OUT", "FINSIM_CALC", "FINSIM_DEBUG_LOG"):
        monkeypatch.delenv(name, raising=False)
    yield


# -------- Loan fixtures --------
@pytest.fixture
def schedule_factory():
    """Factory that builds a loan from overrides and simulates it."""

    def _factory(**overrides):
        return simulate(make_loan(**overrides))

    return _factory


@pytest.fixture
def baseline_schedule():
    return simulate(make_loan())


# -------- XIRR / FIRE fixtures --------
@pytest.fixture
def sample_plan():
    return make_plan()


@pytest.fixture
def fire_inputs_factory():
    def _factory(**overrides):
        return make_fire_inputs(**overrides)

    return _factory
