"""
Cycle tracking: calendar, completion ledger and planning.
"""

from twelve_week_year.tracking.clock import week_number, calc_end_date
from twelve_week_year.tracking.ledger import CompletionLedger
from twelve_week_year.tracking.planner import CyclePlanner

__all__ = ["week_number", "calc_end_date", "CompletionLedger", "CyclePlanner"]
