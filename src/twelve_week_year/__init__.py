"""
12 Week Year Tracker

A local-first tracker for the 12 Week Year execution methodology.
Plans cycles, goals and weekly tactics, records daily completion,
and computes weekly execution scores.
"""

__version__ = "0.1.0"
__author__ = "12 Week Year Tracker Team"

from twelve_week_year.config import Config

__all__ = ["Config", "__version__"]
