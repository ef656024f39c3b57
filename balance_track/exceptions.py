"""
Error hierarchy for Balance Track.

DESIGN DECISION: Malformed keys and invalid rules are rejected at the
point they enter the system. The projection and analytics functions
assume well-formed snapshots and never re-check rule invariants.
"""

from typing import Any, Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""
    pass


class MalformedKey(LedgerError, ValueError):
    """A month key or calendar day string failed to parse."""

    def __init__(self, value: Any, expected: str = "YYYY-MM"):
        self.value = value
        self.expected = expected
        super().__init__(f"Malformed key {value!r}: expected {expected}")


class InvalidRule(LedgerError):
    """A rule or expense was rejected at construction/edit time."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[list[dict]] = None,
    ):
        self.field = field
        self.errors = errors or []
        super().__init__(message)


class RecordNotFound(LedgerError):
    """An edit or delete referenced an id that is not in the snapshot."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No record with id {record_id!r} in {collection}")
