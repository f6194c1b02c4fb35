"""
Vectors and vector arithmetic.
"""

from pylinalg.vector.vector import Vector
from pylinalg.vector.operations import (
    add,
    subtract,
    scale,
    dot,
    magnitude,
    unit,
    vcomp,
)
from pylinalg.vector.stats import (
    mean,
    variance,
    std_dev,
    covariance,
    correlation,
)

__all__ = [
    "Vector",
    "add",
    "subtract",
    "scale",
    "dot",
    "magnitude",
    "unit",
    "vcomp",
    "mean",
    "variance",
    "std_dev",
    "covariance",
    "correlation",
]
