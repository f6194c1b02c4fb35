"""
pylinalg: dense linear algebra with sequential and offloaded execution.

Vectors and matrices carry an execution mode. Arithmetic runs on an
accelerator (through PyTorch) when every operand is flagged offloaded,
and on the host otherwise; both paths give the same numbers within
floating-point tolerance.

Submodules:
    vector: Vector type, vector arithmetic and statistics
    matrix: Matrix type and matrix arithmetic
    decomposition: Triangular solves, Cholesky, Householder QR, inversion
    kernels: Sequential and offloaded kernel backends, dispatch policy
    core: Errors, validation, modes, tolerances, accelerator contexts
"""

import logging

__version__ = "0.1.0"

from pylinalg.core.exceptions import ErrorKind, LinalgError, PyLinalgError
from pylinalg.core.modes import MODE_OFFLOADED, MODE_SEQUENTIAL
from pylinalg.core.compute import (
    HostContext,
    TorchContext,
    get_default_context,
    set_default_context,
    use_context,
)
from pylinalg.vector import (
    Vector,
    dot,
    magnitude,
    unit,
    vcomp,
    mean,
    variance,
    std_dev,
    covariance,
    correlation,
)
from pylinalg.matrix import Matrix, matmul, transpose, sqrt, diag, identity
from pylinalg.decomposition import (
    QRResult,
    forwardsolve,
    backsolve,
    triangularinvert,
    cholesky,
    spd,
    qr_dive,
    qr_decomp,
    invert,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "__version__",
    # Errors
    "ErrorKind",
    "LinalgError",
    "PyLinalgError",
    # Modes and contexts
    "MODE_OFFLOADED",
    "MODE_SEQUENTIAL",
    "HostContext",
    "TorchContext",
    "get_default_context",
    "set_default_context",
    "use_context",
    # Vectors
    "Vector",
    "dot",
    "magnitude",
    "unit",
    "vcomp",
    "mean",
    "variance",
    "std_dev",
    "covariance",
    "correlation",
    # Matrices
    "Matrix",
    "matmul",
    "transpose",
    "sqrt",
    "diag",
    "identity",
    # Decompositions
    "QRResult",
    "forwardsolve",
    "backsolve",
    "triangularinvert",
    "cholesky",
    "spd",
    "qr_dive",
    "qr_decomp",
    "invert",
]
