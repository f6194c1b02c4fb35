"""
Exception types for pylinalg.

Every failure raised by the numeric core is a LinalgError tagged with an
ErrorKind. Callers match on the kind instead of on a subclass:

    try:
        x = forwardsolve(L, b)
    except LinalgError as err:
        if err.kind is ErrorKind.SINGULAR_SYSTEM:
            ...

Design principles:
    - Exceptions carry diagnostic information as attributes
    - Error messages are actionable with actual vs expected values
    - Never catch and re-raise with less information
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Failure categories of the numeric core."""

    # Operand shapes are incompatible, or an index lies outside the operand
    DIMENSION_MISMATCH = 'dimension_mismatch'

    # Zero pivot in substitution, Cholesky, or scalar SPD inversion
    SINGULAR_SYSTEM = 'singular_system'

    # Real square root of a negative residual, or another undefined value
    DOMAIN_ERROR = 'domain_error'

    # Unrecognised algorithm name, dtype, or mode
    INVALID_ARGUMENT = 'invalid_argument'


class PyLinalgError(Exception):
    """Base exception for all pylinalg errors."""
    pass


class LinalgError(PyLinalgError):
    """
    Tagged numeric-core failure.

    Attributes:
        kind: Which invariant was violated
        operation: Name of the operation that failed (e.g. 'matmul')
        expected: Expected shape, size, or value, if meaningful
        actual: Offending shape, size, or value, if meaningful
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        operation: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.operation = operation
        self.expected = expected
        self.actual = actual

    def __repr__(self) -> str:
        return f"LinalgError({self.kind.name}, {str(self)!r})"


def dimension_mismatch(message: str, **diagnostics: Any) -> LinalgError:
    """Build a DIMENSION_MISMATCH error."""
    return LinalgError(ErrorKind.DIMENSION_MISMATCH, message, **diagnostics)


def singular_system(message: str, **diagnostics: Any) -> LinalgError:
    """Build a SINGULAR_SYSTEM error."""
    return LinalgError(ErrorKind.SINGULAR_SYSTEM, message, **diagnostics)


def domain_error(message: str, **diagnostics: Any) -> LinalgError:
    """Build a DOMAIN_ERROR error."""
    return LinalgError(ErrorKind.DOMAIN_ERROR, message, **diagnostics)


def invalid_argument(message: str, **diagnostics: Any) -> LinalgError:
    """Build an INVALID_ARGUMENT error."""
    return LinalgError(ErrorKind.INVALID_ARGUMENT, message, **diagnostics)
