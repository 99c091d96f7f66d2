"""finsim: deterministic loan amortization, XIRR and FIRE corpus calculations."""

__version__ = "0.1.0"
