"""Exception types and driver fault classification.

Raw driver errors (pyodbc, psycopg2) are mapped onto a small tagged set so
that check results read the same whatever database sits underneath.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any


class FaultKind(str, Enum):
    """Coarse category of an infrastructure failure."""

    CONNECTIVITY = "CONNECTIVITY"
    AUTHORIZATION = "AUTHORIZATION"
    TIMEOUT = "TIMEOUT"
    OTHER = "OTHER"


# Permission denied on a single object: SQL Server 229 and 300, PostgreSQL 42501.
OBJECT_PERMISSION_CODES = frozenset({"229", "300", "42501"})


@dataclass(frozen=True)
class Fault:
    """A classified driver error."""

    kind: FaultKind
    code: str
    message: str

    def describe(self) -> str:
        return f"{self.kind.value} | Code: {self.code or 'n/a'} | {self.message}"

    @property
    def fatal(self) -> bool:
        """True when the fault concerns the connection or login, not one statement."""
        if self.kind == FaultKind.CONNECTIVITY:
            return True
        return self.kind == FaultKind.AUTHORIZATION and self.code not in OBJECT_PERMISSION_CODES


class SqlDiagError(Exception):
    """Base class for all SQLDiag errors."""


class ConfigurationError(SqlDiagError):
    """The connection handle or configuration cannot be used at all."""


class QueryError(SqlDiagError):
    """A round trip to the target database failed."""

    def __init__(self, fault: Fault) -> None:
        super().__init__(fault.message)
        self.fault = fault

    @property
    def kind(self) -> FaultKind:
        return self.fault.kind


# SQL Server native error numbers
_SQLSERVER_NUMBERS: dict[int, FaultKind] = {
    -2: FaultKind.TIMEOUT,
    -1: FaultKind.CONNECTIVITY,
    2: FaultKind.CONNECTIVITY,
    40: FaultKind.CONNECTIVITY,
    53: FaultKind.CONNECTIVITY,
    11001: FaultKind.CONNECTIVITY,
    10061: FaultKind.CONNECTIVITY,
    18456: FaultKind.AUTHORIZATION,
    18452: FaultKind.AUTHORIZATION,
    4060: FaultKind.AUTHORIZATION,
    4064: FaultKind.AUTHORIZATION,
    229: FaultKind.AUTHORIZATION,
    300: FaultKind.AUTHORIZATION,
}

_NATIVE_NUMBER = re.compile(r"\((-?\d+)\)\s*(?:\(SQL\w+\)\s*)?$")

_TIMEOUT_STATES = ("HYT00", "HYT01", "57014")
_AUTH_STATES = ("28000", "28P01", "42501")

_PSYCOPG_CLASS_KINDS: dict[str, FaultKind] = {
    "QueryCanceled": FaultKind.TIMEOUT,
    "InsufficientPrivilege": FaultKind.AUTHORIZATION,
    "InvalidPassword": FaultKind.AUTHORIZATION,
    "InvalidAuthorizationSpecification": FaultKind.AUTHORIZATION,
}


def classify_fault(exc: BaseException) -> Fault:
    """Map a raw driver or builtin exception to a :class:`Fault`."""
    if isinstance(exc, QueryError):
        return exc.fault

    message = _driver_message(exc)
    state = _sql_state(exc)
    number = _native_number(message) if state and not getattr(exc, "pgcode", None) else None

    if isinstance(exc, TimeoutError):
        return Fault(FaultKind.TIMEOUT, state, message)
    if isinstance(exc, PermissionError):
        return Fault(FaultKind.AUTHORIZATION, state, message)
    if isinstance(exc, ConnectionError):
        return Fault(FaultKind.CONNECTIVITY, state, message)

    class_kind = _PSYCOPG_CLASS_KINDS.get(type(exc).__name__)
    if class_kind is not None:
        return Fault(class_kind, state, message)

    number_kind = _SQLSERVER_NUMBERS.get(number) if number is not None else None
    # Connection-level numbers only count when the SQLSTATE agrees.
    if number_kind == FaultKind.CONNECTIVITY and not state.startswith("08"):
        number_kind = None
    if number_kind is not None:
        return Fault(number_kind, str(number), message)

    if state:
        if state in _TIMEOUT_STATES:
            return Fault(FaultKind.TIMEOUT, state, message)
        if state in _AUTH_STATES:
            return Fault(FaultKind.AUTHORIZATION, state, message)
        if state.startswith("08"):
            return Fault(FaultKind.CONNECTIVITY, state, message)

    if type(exc).__name__ in ("OperationalError", "InterfaceError") and not state:
        return Fault(FaultKind.CONNECTIVITY, "", message)

    return Fault(FaultKind.OTHER, state or (str(number) if number is not None else ""), message)


def _sql_state(exc: BaseException) -> str:
    """SQLSTATE from psycopg2 (pgcode) or pyodbc (args[0])."""
    pgcode = getattr(exc, "pgcode", None)
    if pgcode:
        return str(pgcode)
    args: tuple[Any, ...] = getattr(exc, "args", ())
    if len(args) >= 2 and isinstance(args[0], str) and len(args[0]) == 5:
        return args[0]
    return ""


def _driver_message(exc: BaseException) -> str:
    args: tuple[Any, ...] = getattr(exc, "args", ())
    if len(args) >= 2 and isinstance(args[1], str):
        return args[1].strip()
    text = str(exc).strip()
    return text or type(exc).__name__


def _native_number(message: str) -> int | None:
    """Native error number pyodbc appends to the message.

    The number is the last parenthesised integer, optionally followed by the
    ODBC function marker: ``... Login failed. (18456) (SQLDriverConnect)``.
    Earlier parenthesised numbers belong to quoted data, not the driver.
    """
    match = _NATIVE_NUMBER.search(message)
    return int(match.group(1)) if match else None
