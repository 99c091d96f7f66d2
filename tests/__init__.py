"""
Expose common test utilities so tests can import directly:
    from tests import make_loan, make_plan
"""

from .utils import compounded_flows, make_fire_inputs, make_loan, make_plan

__all__ = ["make_loan", "make_plan", "make_fire_inputs", "compounded_flows"]
