# src/taskboard/core/errors.py

from __future__ import annotations

"""
Failure taxonomy shared by the task store, the move coordinator and gateways.

Gateways never raise for expected outcomes: every call returns Ok or Failure.
Exceptions that escape an adapter anyway are classified with classify_exception()
at the store boundary.
"""

import sqlite3
from dataclasses import dataclass
from enum import StrEnum
from typing import Generic, TypeVar

import httpx

T = TypeVar("T")


class ErrorKind(StrEnum):
    VALIDATION = "validation"
    CONFLICT = "conflict"
    PERMISSION_DENIED = "permission_denied"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"

    @property
    def retryable(self) -> bool:
        return self in (ErrorKind.RATE_LIMITED, ErrorKind.UNAVAILABLE)

    @property
    def stale(self) -> bool:
        """The entity vanished remotely; the caller should refresh."""
        return self is ErrorKind.NOT_FOUND


_DEFAULT_MESSAGES = {
    ErrorKind.VALIDATION: "The request was rejected as invalid.",
    ErrorKind.CONFLICT: "This task already exists.",
    ErrorKind.PERMISSION_DENIED: "You do not have permission to perform this action.",
    ErrorKind.NOT_FOUND: "Task not found. It may have been deleted.",
    ErrorKind.RATE_LIMITED: "Too many requests. Please wait a moment and try again.",
    ErrorKind.UNAVAILABLE: (
        "Unable to connect to the server. "
        "Please check your internet connection and try again."
    ),
    ErrorKind.UNKNOWN: "An unexpected error occurred. Please try again.",
}


@dataclass(slots=True, frozen=True)
class Ok(Generic[T]):
    value: T | None = None

    @property
    def ok(self) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class Failure:
    kind: ErrorKind
    message: str
    code: str | None = None

    @property
    def ok(self) -> bool:
        return False

    @property
    def retryable(self) -> bool:
        return self.kind.retryable

    @classmethod
    def of(cls, kind: ErrorKind, message: str | None = None, code: str | None = None) -> Failure:
        return cls(kind=kind, message=message or _DEFAULT_MESSAGES[kind], code=code)

    @classmethod
    def validation(cls, message: str) -> Failure:
        return cls(kind=ErrorKind.VALIDATION, message=message, code="VALIDATION_ERROR")


# Postgres / PostgREST codes seen from the hosted store.
_CODE_KINDS = {
    "23505": ErrorKind.CONFLICT,  # unique_violation
    "23503": ErrorKind.CONFLICT,  # foreign_key_violation
    "23502": ErrorKind.VALIDATION,  # not_null_violation
    "23514": ErrorKind.VALIDATION,  # check_violation
    "22P02": ErrorKind.VALIDATION,  # invalid_text_representation (bad uuid/enum)
    "42501": ErrorKind.PERMISSION_DENIED,
    "PGRST116": ErrorKind.NOT_FOUND,
    "PGRST301": ErrorKind.RATE_LIMITED,
}

_CODE_MESSAGES = {
    "23503": "Invalid reference. The task may have been deleted.",
}


def _kind_from_http_status(status: int) -> ErrorKind | None:
    if status in (400, 422):
        return ErrorKind.VALIDATION
    if status in (401, 403):
        return ErrorKind.PERMISSION_DENIED
    if status == 404:
        return ErrorKind.NOT_FOUND
    if status == 409:
        return ErrorKind.CONFLICT
    if status == 429:
        return ErrorKind.RATE_LIMITED
    if status >= 500:
        return ErrorKind.UNAVAILABLE
    return None


def _kind_from_text(message: str) -> ErrorKind | None:
    low = message.lower()
    if "fetch" in low or "network" in low:
        return ErrorKind.UNAVAILABLE
    if "permission" in low:
        return ErrorKind.PERMISSION_DENIED
    if "not found" in low:
        return ErrorKind.NOT_FOUND
    if "rate limit" in low:
        return ErrorKind.RATE_LIMITED
    return None


def classify_error(
    *,
    code: str | None = None,
    message: str | None = None,
    http_status: int | None = None,
) -> Failure:
    """
    Map a store error (code / message / HTTP status) onto the closed taxonomy.

    Precedence: known error code, then message text, then HTTP status.
    The message shown to users is the friendly default for the kind, except for
    UNKNOWN where the store's own message is kept when present.
    """
    code = (code or "").strip() or None
    text = (message or "").strip()

    kind: ErrorKind | None = None
    if code is not None:
        kind = _CODE_KINDS.get(code)
    if kind is None and text:
        kind = _kind_from_text(text)
    if kind is None and http_status is not None:
        kind = _kind_from_http_status(int(http_status))
    if kind is None:
        return Failure(kind=ErrorKind.UNKNOWN, message=text or _DEFAULT_MESSAGES[ErrorKind.UNKNOWN], code=code)

    if code is not None and code in _CODE_MESSAGES:
        return Failure(kind=kind, message=_CODE_MESSAGES[code], code=code)
    return Failure.of(kind, code=code)


def _is_connection_error(exc: BaseException) -> bool:
    if isinstance(exc, (ConnectionError, TimeoutError, httpx.TransportError)):
        return True
    return exc.__class__.__name__ in {
        "APIConnectionError",
        "ConnectTimeout",
        "ReadTimeout",
        "WriteTimeout",
        "PoolTimeout",
    }


def classify_exception(exc: BaseException) -> Failure:
    """Classify an exception that escaped a gateway adapter."""
    if _is_connection_error(exc):
        return Failure.of(ErrorKind.UNAVAILABLE, code=exc.__class__.__name__)

    if isinstance(exc, httpx.HTTPStatusError):
        return classify_error(message=str(exc), http_status=exc.response.status_code)

    if isinstance(exc, sqlite3.IntegrityError):
        text = str(exc)
        if "NOT NULL" in text or "CHECK" in text:
            return Failure.of(ErrorKind.VALIDATION, message=text, code="IntegrityError")
        return Failure.of(ErrorKind.CONFLICT, code="IntegrityError")

    if isinstance(exc, sqlite3.OperationalError):
        # "database is locked", "unable to open database file", ...
        return Failure.of(ErrorKind.UNAVAILABLE, code="OperationalError")

    if isinstance(exc, PermissionError):
        return Failure.of(ErrorKind.PERMISSION_DENIED, code=exc.__class__.__name__)

    if isinstance(exc, (ValueError, TypeError)):
        return Failure.of(ErrorKind.VALIDATION, message=str(exc) or None, code=exc.__class__.__name__)

    failure = classify_error(message=str(exc))
    if failure.kind is ErrorKind.UNKNOWN:
        return Failure.of(ErrorKind.UNKNOWN, code=exc.__class__.__name__)
    return failure
