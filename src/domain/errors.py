"""
Ledger error taxonomy.

Every rejected transition raises one of these inside the operation's
transaction, so the store is rolled back before the caller sees the error.
The ``code`` values are stable identifiers surfaced to API clients.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for all rejected ledger transitions."""

    code: str = "u100"
    http_status: int = 400

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__doc__ or self.code)


class NotFoundError(LedgerError):
    """Referenced vehicle, ride or schedule does not exist."""

    code = "u101"
    http_status = 404


class UnauthorizedError(LedgerError):
    """Caller is not the owner of the record."""

    code = "u102"
    http_status = 403


class InvalidStateError(LedgerError):
    """Operation is not allowed from the record's current state."""

    code = "u104"
    http_status = 409


class SettlementError(LedgerError):
    """The settlement rail rejected a transfer."""

    code = "u105"
    http_status = 502


class InvalidArgumentError(LedgerError):
    """Operation input is outside its accepted range."""

    code = "u106"
    http_status = 422
