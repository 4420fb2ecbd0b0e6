"""
##################################################
Mathematical functions (:mod:`forwardad.function`)
##################################################

.. currentmodule:: forwardad.function

This module provides mathematical functions. Applied to an expression (such as
:class:`~forwardad.autodiff.Dual`), each function returns a new expression node
instead of computing a result. Applied to a plain number, it computes the result in the
type of the number: mpmath numbers are handled by mpmath, numpy floating scalars and
built-in numbers by numpy. Domain violations never raise for built-in numbers and
numpy scalars; they produce ``nan`` or infinities as IEEE 754 prescribes.

Constant functions
==================

.. autosummary::
    :toctree: generated/

    ln10

Trigonometric functions
=======================

.. autosummary::
    :toctree: generated/

    sin
    cos
    tan
    asin
    acos
    atan

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    log
    log10
    pow
    sqrt

Other functions
===============

.. autosummary::
    :toctree: generated/

    abs
    abs2
    conj
    real
    imag

"""

import math
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, overload

import mpmath
import mpmath.ctx_mp_python
import numpy

from forwardad.typing import isnumber

if TYPE_CHECKING:
    from forwardad.autodiff.expr import Expr


def _apply(x, mpfun: Callable, npfun: Callable, /):
    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpfun(x)

        case numpy.floating():
            with numpy.errstate(all="ignore"):
                return npfun(x)

        case float() | int() | numpy.integer():
            with numpy.errstate(all="ignore"):
                return float(npfun(float(x)))

        case _:
            raise TypeError(f"unsupported operand type: {type(x).__name__}")


def _apply2(fun: Callable, x, y, mpfun: Callable, npfun: Callable, /):
    linearized = (x, y)

    if type(x) is not type(y) and issubclass(type(y), type(x)):
        linearized = (y, x)

    for z in linearized:
        if hook := getattr(type(z), "_forwardad_overload_", None):
            if (res := hook(z, fun, x, y)) is not NotImplemented:
                return res

    mpnumeric = mpmath.ctx_mp_python.mpnumeric

    match x, y:
        case (mpnumeric(), _) | (_, mpnumeric()):
            return mpfun(x, y)

        case (numpy.floating(), _) | (_, numpy.floating()):
            with numpy.errstate(all="ignore"):
                return npfun(x, y)

        case (float() | int() | numpy.integer(), float() | int() | numpy.integer()):
            with numpy.errstate(all="ignore"):
                return float(npfun(float(x), float(y)))

        case _:
            raise TypeError


def _divide(x, y, /):
    """True division. Dividing built-in numbers by zero gives an infinity or ``nan``."""
    return _apply2(_divide, x, y, _truediv, numpy.true_divide)


def _truediv(x, y, /):
    return x / y


@overload
def ln10(x: "Expr", /) -> Any: ...


@overload
def ln10(x: float | int, /) -> float: ...


@overload
def ln10(x: Any, /) -> Any: ...


def ln10(x, /):
    """Natural logarithm of 10, in the value type of `x`.

    Examples
    --------
    >>> print(format(ln10(1.0), ".6f"))
    2.302585
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, ln10, x)) is not NotImplemented:
            return res

        raise TypeError

    match x:
        case mpmath.ctx_mp_python.mpnumeric():
            return mpmath.mpf(mpmath.ln10)

        case numpy.floating():
            return numpy.log(type(x)(10))

        case float() | int() | numpy.integer():
            return math.log(10)

        case _:
            raise TypeError


@overload
def sin(x: "Expr", /) -> "Expr": ...


@overload
def sin(x: float | int, /) -> float: ...


@overload
def sin(x: Any, /) -> Any: ...


def sin(x, /):
    """Sine.

    Examples
    --------
    >>> print(format(sin(1.0), ".6f"))
    0.841471
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, sin, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.sin, numpy.sin)


@overload
def cos(x: "Expr", /) -> "Expr": ...


@overload
def cos(x: float | int, /) -> float: ...


@overload
def cos(x: Any, /) -> Any: ...


def cos(x, /):
    """Cosine.

    Examples
    --------
    >>> print(format(cos(1.0), ".6f"))
    0.540302
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, cos, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.cos, numpy.cos)


@overload
def tan(x: "Expr", /) -> "Expr": ...


@overload
def tan(x: float | int, /) -> float: ...


@overload
def tan(x: Any, /) -> Any: ...


def tan(x, /):
    """Tangent.

    Examples
    --------
    >>> print(format(tan(1.0), ".6f"))
    1.557408
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, tan, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.tan, numpy.tan)


@overload
def asin(x: "Expr", /) -> "Expr": ...


@overload
def asin(x: float | int, /) -> float: ...


@overload
def asin(x: Any, /) -> Any: ...


def asin(x, /):
    """Inverse sine.

    Examples
    --------
    >>> print(format(asin(0.5), ".6f"))
    0.523599

    Arguments outside [-1, 1] are not rejected.

    >>> asin(2.0)
    nan
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, asin, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.asin, numpy.arcsin)


@overload
def acos(x: "Expr", /) -> "Expr": ...


@overload
def acos(x: float | int, /) -> float: ...


@overload
def acos(x: Any, /) -> Any: ...


def acos(x, /):
    """Inverse cosine.

    Examples
    --------
    >>> print(format(acos(0.5), ".6f"))
    1.047198
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, acos, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.acos, numpy.arccos)


@overload
def atan(x: "Expr", /) -> "Expr": ...


@overload
def atan(x: float | int, /) -> float: ...


@overload
def atan(x: Any, /) -> Any: ...


def atan(x, /):
    """Inverse tangent.

    Examples
    --------
    >>> print(format(atan(1.0), ".6f"))
    0.785398
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, atan, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.atan, numpy.arctan)


@overload
def exp(x: "Expr", /) -> "Expr": ...


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


def exp(x, /):
    """Exponential.

    Examples
    --------
    >>> print(format(exp(2), ".6f"))
    7.389056
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, exp, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.exp, numpy.exp)


@overload
def log(x: "Expr", /) -> "Expr": ...


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


def log(x, /):
    """Natural logarithm.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> log(0.0)
    -inf
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, log, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.log, numpy.log)


@overload
def log10(x: "Expr", /) -> "Expr": ...


@overload
def log10(x: float | int, /) -> float: ...


@overload
def log10(x: Any, /) -> Any: ...


def log10(x, /):
    """Base-10 logarithm.

    Examples
    --------
    >>> print(format(log10(2.0), ".6f"))
    0.301030
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, log10, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.log10, numpy.log10)


@overload
def pow(x: "Expr", y: Any, /) -> "Expr": ...


@overload
def pow(x: Any, y: "Expr", /) -> "Expr": ...


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: Any, /) -> Any: ...


def pow(x, y, /):
    """`x` raised to the power `y`.

    Examples
    --------
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    """
    return _apply2(pow, x, y, mpmath.power, numpy.power)


@overload
def sqrt(x: "Expr", /) -> "Expr": ...


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


def sqrt(x, /):
    """Square root.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, sqrt, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.sqrt, numpy.sqrt)


@overload
def abs(x: "Expr", /) -> "Expr": ...


@overload
def abs(x: float | int, /) -> float: ...


@overload
def abs(x: Any, /) -> Any: ...


def abs(x, /):
    """Absolute value.

    Examples
    --------
    >>> abs(-2.5)
    2.5
    """
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, abs, x)) is not NotImplemented:
            return res

        raise TypeError

    return _apply(x, mpmath.fabs, numpy.abs)


def abs2(x, /):
    """Squared absolute value, ``x * x`` for real arguments."""
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, abs2, x)) is not NotImplemented:
            return res

        raise TypeError

    if not isnumber(x):
        raise TypeError

    return x * x


def conj(x, /):
    """Complex conjugate, which is `x` itself for real arguments."""
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, conj, x)) is not NotImplemented:
            return res

        raise TypeError

    if not isnumber(x):
        raise TypeError

    return x


def real(x, /):
    """Real part, which is `x` itself for real arguments."""
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, real, x)) is not NotImplemented:
            return res

        raise TypeError

    if not isnumber(x):
        raise TypeError

    return x


def imag(x, /):
    """Imaginary part, which is zero for real arguments."""
    if fun := getattr(type(x), "_forwardad_overload_", None):
        if (res := fun(x, imag, x)) is not NotImplemented:
            return res

        raise TypeError

    if not isnumber(x):
        raise TypeError

    return x * 0
