# finsim/core/finance/errors.py
"""
Typed errors for the finance engines.

Exports
-------
- FinanceError, InvalidInputError, DivergenceError
- FINANCE_ERRORS
- finance_error_guard()

Soft conditions (EMI cap, negative-amortization guard, 480-month ceiling) are
not errors; they are reported as flags on the amortization summary.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import ValidationError

# =========================
# Exception types
# =========================


class FinanceError(ValueError):
    """Base class for finance engine failures."""


class InvalidInputError(FinanceError):
    """Parameters are structurally invalid (non-positive principal, degenerate cash flows, tenure out of range)."""


class DivergenceError(FinanceError):
    """XIRR Newton-Raphson iteration did not converge for this cash-flow shape."""


# Selector tuple for grouped exception handling
FINANCE_ERRORS = (
    InvalidInputError,
    DivergenceError,
)


@contextmanager
def finance_error_guard() -> Iterator[None]:
    """Re-raise pydantic validation failures as InvalidInputError; finance errors pass through."""
    try:
        yield
    except FINANCE_ERRORS:
        raise
    except ValidationError as exc:
        raise InvalidInputError(str(exc)) from exc


__all__ = [
    "FinanceError",
    "InvalidInputError",
    "DivergenceError",
    "FINANCE_ERRORS",
    "finance_error_guard",
]
