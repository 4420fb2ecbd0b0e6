"""
######################################################
Automatic differentiation (:mod:`forwardad.autodiff`)
######################################################

.. currentmodule:: forwardad.autodiff

This module provides forward-mode automatic differentiation based on dual numbers and
lazily built expressions.

Differential operators
----------------------

.. autosummary::
    :toctree: generated/

    derivative
    grad
    wrt
    seed
    unseed
    seeded

Dual numbers
------------

.. autosummary::
    :toctree: generated/

    Dual
    HigherOrderDual
    eval
    val

Expressions
-----------

.. autosummary::
    :toctree: generated/

    Expr
    Leaf
    UnaryExpr
    BinaryExpr
    TernaryExpr
    Op
    compose
    leaves

Context
-------

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

from .autodiff import derivative, grad, seed, seeded, unseed, wrt
from .context import Context, getcontext, localcontext, setcontext
from .dual import Dual, HigherOrderDual, eval, val
from .expr import BinaryExpr, Expr, Leaf, TernaryExpr, UnaryExpr, compose, leaves
from .op import Op

__all__ = [
    "derivative",
    "grad",
    "seed",
    "seeded",
    "unseed",
    "wrt",
    "Context",
    "getcontext",
    "localcontext",
    "setcontext",
    "Dual",
    "HigherOrderDual",
    "eval",
    "val",
    "BinaryExpr",
    "Expr",
    "Leaf",
    "TernaryExpr",
    "UnaryExpr",
    "compose",
    "leaves",
    "Op",
]
