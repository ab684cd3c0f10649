"""
Exceptions raised at the entity store boundary.

Scoring functions never raise on well-formed store state; only operations
that open, write or replace the store can fail.
"""


class TrackerError(RuntimeError):
    """Base class for tracker failures."""


class StoreUnavailableError(TrackerError):
    """The entity store could not be opened, initialized or was closed."""


class ImportValidationError(TrackerError):
    """An imported snapshot is not a usable tracker database."""
