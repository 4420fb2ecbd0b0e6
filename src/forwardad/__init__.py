from loguru import logger

from .autodiff import Dual, HigherOrderDual, derivative, eval, grad, val, wrt
from .function import (
    abs,
    abs2,
    acos,
    asin,
    atan,
    conj,
    cos,
    exp,
    imag,
    log,
    log10,
    pow,
    real,
    sin,
    sqrt,
    tan,
)

logger.disable("forwardad")

__all__ = [
    "Dual",
    "HigherOrderDual",
    "derivative",
    "eval",
    "grad",
    "val",
    "wrt",
    "abs",
    "abs2",
    "acos",
    "asin",
    "atan",
    "conj",
    "cos",
    "exp",
    "imag",
    "log",
    "log10",
    "pow",
    "real",
    "sin",
    "sqrt",
    "tan",
]
