"""
################################
Typing (:mod:`forwardad.typing`)
################################

This module provides type definitions commonly used between modules.

.. autoclass:: Scalar
    :show-inheritance:
    :no-members:

.. autofunction:: isnumber

"""

import numbers
from abc import abstractmethod
from typing import Protocol, Self

import mpmath.ctx_mp_python


class Scalar(Protocol):
    """Protocol that ensures scalar-like behavior.

    Values and derivatives held by :class:`~forwardad.autodiff.Dual` must have four
    arithmetic operations defined, and these operations must be compatible with
    integers. Built-in numbers, numpy floating scalars, mpmath numbers and
    :class:`~forwardad.autodiff.Dual` itself all satisfy this protocol.
    """

    __slots__ = ()

    @abstractmethod
    def __add__(self, rhs: Self | int) -> Self: ...

    @abstractmethod
    def __sub__(self, rhs: Self | int) -> Self: ...

    @abstractmethod
    def __mul__(self, rhs: Self | int) -> Self: ...

    @abstractmethod
    def __truediv__(self, rhs: Self | int) -> Self: ...

    @abstractmethod
    def __radd__(self, lhs: Self | int) -> Self: ...

    @abstractmethod
    def __rsub__(self, lhs: Self | int) -> Self: ...

    @abstractmethod
    def __rmul__(self, lhs: Self | int) -> Self: ...

    @abstractmethod
    def __rtruediv__(self, lhs: Self | int) -> Self: ...

    @abstractmethod
    def __neg__(self) -> Self: ...

    @abstractmethod
    def __pos__(self) -> Self: ...


def isnumber(value: object) -> bool:
    """Return ``True`` if `value` is a plain number.

    Plain numbers are instances of :class:`numbers.Real` (which covers :class:`int`,
    :class:`float` and numpy floating scalars) and mpmath numbers. Expressions,
    including :class:`~forwardad.autodiff.Dual`, are not plain numbers.

    Examples
    --------
    >>> import mpmath
    >>> isnumber(1.5), isnumber(mpmath.mpf(2)), isnumber("1.5")
    (True, True, False)
    """
    return isinstance(value, numbers.Real | mpmath.ctx_mp_python.mpnumeric)
