"""Database error classification.

Maps driver errors (asyncpg SQLSTATE codes, socket errors, SQLAlchemy wrappers)
onto a small set of domain error kinds with human-readable messages.
"""

from enum import Enum

from sqlalchemy.exc import IntegrityError


class ErrorKind(str, Enum):
    CONNECTION_REFUSED = "connection_refused"
    AUTHENTICATION_FAILED = "authentication_failed"
    DATABASE_NOT_FOUND = "database_not_found"
    PERMISSION_DENIED = "permission_denied"
    CONSTRAINT_VIOLATION = "constraint_violation"
    DRIVER_ERROR = "driver_error"


_SQLSTATE_KINDS = {
    "28P01": ErrorKind.AUTHENTICATION_FAILED,  # invalid_password
    "3D000": ErrorKind.DATABASE_NOT_FOUND,  # invalid_catalog_name
    "28000": ErrorKind.PERMISSION_DENIED,  # invalid_authorization_specification
    "42501": ErrorKind.PERMISSION_DENIED,  # insufficient_privilege
}

_MESSAGES = {
    ErrorKind.CONNECTION_REFUSED: (
        "Could not connect to the database server. "
        "Check that it is running and reachable at the given host and port."
    ),
    ErrorKind.AUTHENTICATION_FAILED: "Password authentication failed for the given user.",
    ErrorKind.DATABASE_NOT_FOUND: "The requested database does not exist.",
    ErrorKind.PERMISSION_DENIED: "The user is not authorized to access this database.",
    ErrorKind.CONSTRAINT_VIOLATION: "A database constraint was violated; no rows were written.",
}


def _exception_chain(exc: BaseException):
    """Yield exc and every error it wraps (DBAPIError.orig, __cause__, __context__)."""
    seen = set()
    stack = [exc]
    while stack:
        current = stack.pop()
        if current is None or id(current) in seen:
            continue
        seen.add(id(current))
        yield current
        stack.append(getattr(current, "orig", None))
        stack.append(current.__cause__)
        stack.append(current.__context__)


def _sqlstate(exc: BaseException) -> str | None:
    code = getattr(exc, "sqlstate", None) or getattr(exc, "pgcode", None)
    return code if isinstance(code, str) else None


def classify_error(exc: BaseException) -> ErrorKind:
    """Return the domain error kind for a driver or SQLAlchemy exception."""
    chain = list(_exception_chain(exc))

    for err in chain:
        code = _sqlstate(err)
        if code is None:
            continue
        if code in _SQLSTATE_KINDS:
            return _SQLSTATE_KINDS[code]
        if code.startswith("23"):
            return ErrorKind.CONSTRAINT_VIOLATION

    for err in chain:
        if isinstance(err, IntegrityError):
            return ErrorKind.CONSTRAINT_VIOLATION
        # ConnectionRefusedError, socket.gaierror and TimeoutError are all OSError
        if isinstance(err, OSError):
            return ErrorKind.CONNECTION_REFUSED

    return ErrorKind.DRIVER_ERROR


def describe_error(kind: ErrorKind, exc: BaseException | None = None) -> str:
    if kind in _MESSAGES:
        return _MESSAGES[kind]
    return f"Database error: {exc}" if exc is not None else "Database error"


class PersistenceError(Exception):
    """A database operation failed; its transaction has been rolled back."""

    def __init__(self, operation: str, kind: ErrorKind, message: str):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.kind = kind
        self.message = message

    @classmethod
    def from_exception(cls, operation: str, exc: BaseException) -> "PersistenceError":
        kind = classify_error(exc)
        return cls(operation, kind, describe_error(kind, exc))
