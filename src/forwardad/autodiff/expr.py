import dataclasses
from abc import ABC
from collections.abc import Iterator
from typing import Any

from forwardad import function as fn
from forwardad.autodiff import dual as _dual
from forwardad.autodiff.context import getcontext
from forwardad.autodiff.op import Op
from forwardad.typing import isnumber


def _isoperand(value: object) -> bool:
    return isinstance(value, Expr) or isnumber(value)


class Expr(ABC):
    """Abstract base class for expressions.

    An expression is either a :class:`Leaf` (that is, a
    :class:`~forwardad.autodiff.Dual`) or a node built from other expressions and
    numbers by arithmetic operators and the functions of :mod:`forwardad.function`.
    Nodes are never computed when they are built; they are collapsed into a
    :class:`~forwardad.autodiff.Dual` by :func:`~forwardad.autodiff.eval`.

    Comparison operators compare only the values of the operands. Derivatives never
    take part in comparisons.
    """

    __slots__ = ()
    __array_ufunc__ = None

    def _forwardad_overload_(self, fun, *args):
        match fun:
            case fn.sin:
                return unary(Op.SIN, self)

            case fn.cos:
                return unary(Op.COS, self)

            case fn.tan:
                return unary(Op.TAN, self)

            case fn.asin:
                return unary(Op.ASIN, self)

            case fn.acos:
                return unary(Op.ACOS, self)

            case fn.atan:
                return unary(Op.ATAN, self)

            case fn.exp:
                return unary(Op.EXP, self)

            case fn.log:
                return unary(Op.LOG, self)

            case fn.log10:
                return unary(Op.LOG10, self)

            case fn.sqrt:
                return unary(Op.SQRT, self)

            case fn.abs:
                return unary(Op.ABS, self)

            case fn.pow:
                return power(*args)

            case fn._divide:
                return divide(*args)

            case fn.abs2:
                return multiply(self, self)

            case fn.conj | fn.real:
                return self

            case fn.imag:
                return _dual.val(self) * 0

            case fn.ln10:
                return fn.ln10(_dual.val(self))

        return NotImplemented

    def __float__(self) -> float:
        return float(_dual.val(self))

    def __eq__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) == _dual.val(other)

    def __ne__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) != _dual.val(other)

    def __lt__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) < _dual.val(other)

    def __le__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) <= _dual.val(other)

    def __gt__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) > _dual.val(other)

    def __ge__(self, other) -> bool:
        if not _isoperand(other):
            return NotImplemented

        return _dual.val(self) >= _dual.val(other)

    def __add__(self, rhs) -> "Expr":
        if not _isoperand(rhs):
            return NotImplemented

        return add(self, rhs)

    def __sub__(self, rhs) -> "Expr":
        if not _isoperand(rhs):
            return NotImplemented

        return subtract(self, rhs)

    def __mul__(self, rhs) -> "Expr":
        if not _isoperand(rhs):
            return NotImplemented

        return multiply(self, rhs)

    def __truediv__(self, rhs) -> "Expr":
        if not _isoperand(rhs):
            return NotImplemented

        return divide(self, rhs)

    def __pow__(self, rhs) -> "Expr":
        if not _isoperand(rhs):
            return NotImplemented

        return power(self, rhs)

    def __neg__(self) -> "Expr":
        return negative(self)

    def __pos__(self) -> "Expr":
        return self

    def __abs__(self) -> "Expr":
        return unary(Op.ABS, self)

    def __radd__(self, lhs) -> "Expr":
        if not _isoperand(lhs):
            return NotImplemented

        return add(lhs, self)

    def __rsub__(self, lhs) -> "Expr":
        if not _isoperand(lhs):
            return NotImplemented

        return subtract(lhs, self)

    def __rmul__(self, lhs) -> "Expr":
        if not _isoperand(lhs):
            return NotImplemented

        return multiply(lhs, self)

    def __rtruediv__(self, lhs) -> "Expr":
        if not _isoperand(lhs):
            return NotImplemented

        return divide(lhs, self)

    def __rpow__(self, lhs) -> "Expr":
        if not _isoperand(lhs):
            return NotImplemented

        return power(lhs, self)


class Leaf(Expr):
    """Abstract base class for expressions that hold data, i.e. dual numbers."""

    __slots__ = ()


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class UnaryExpr(Expr):
    """Node applying a unary operator to `operand`."""

    op: Op
    operand: Any


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class BinaryExpr(Expr):
    """Node applying a binary operator to `left` and `right`.

    For ``ADD`` and ``MUL`` nodes, a number operand is always stored in `left`.
    """

    op: Op
    left: Any
    right: Any


@dataclasses.dataclass(frozen=True, slots=True, eq=False)
class TernaryExpr(Expr):
    """Node applying a ternary operator to `a`, `b` and `c`.

    The only ternary node is the fused product ``TernaryExpr(MUL, a, b, c)`` of a
    number `a` and two dual numbers `b` and `c`, equivalent to ``(a * b) * c``.
    """

    op: Op
    a: Any
    b: Any
    c: Any


def _check(*operands) -> None:
    if not all(_isoperand(x) for x in operands):
        raise TypeError("operands must be numbers or expressions")

    if all(isnumber(x) for x in operands):
        raise TypeError("at least one operand must be an expression")


def negative(x):
    """Return ``-x``, simplifying double negations and negated products."""
    if isnumber(x):
        return -x

    if not isinstance(x, Expr):
        raise TypeError

    if getcontext().simplify:
        match x:
            case UnaryExpr(Op.NEG, operand):
                return operand

            case BinaryExpr(Op.MUL, left, right) if isnumber(left):
                return BinaryExpr(Op.MUL, -left, right)

            case TernaryExpr(Op.MUL, a, b, c):
                return TernaryExpr(Op.MUL, -a, b, c)

    return UnaryExpr(Op.NEG, x)


def inverse(x):
    """Return ``1 / x``, simplifying double reciprocals."""
    if isnumber(x):
        return fn._divide(1, x)

    if not isinstance(x, Expr):
        raise TypeError

    if getcontext().simplify:
        match x:
            case UnaryExpr(Op.INV, operand):
                return operand

    return UnaryExpr(Op.INV, x)


def add(lhs, rhs):
    """Return ``lhs + rhs``.

    A number operand is moved to the left, and with simplification enabled,
    ``(-a) + (-b)`` becomes ``-(a + b)``.
    """
    _check(lhs, rhs)

    if isnumber(rhs):
        lhs, rhs = rhs, lhs

    if getcontext().simplify:
        match lhs, rhs:
            case UnaryExpr(Op.NEG, a), UnaryExpr(Op.NEG, b):
                return negative(add(a, b))

    return BinaryExpr(Op.ADD, lhs, rhs)


def subtract(lhs, rhs):
    """Return ``lhs - rhs``, built as ``lhs + (-rhs)``."""
    _check(lhs, rhs)
    return add(lhs, negative(rhs))


def multiply(lhs, rhs):
    """Return ``lhs * rhs``.

    A number operand is moved to the left. With simplification enabled, the following
    rewrites apply, where `c` and `k` are numbers and `d` and `e` are dual numbers:

    ============================  ============================
    Product                       Result
    ============================  ============================
    ``1 * x``                     ``x``
    ``k * (c * e)``               ``(k * c) * e``
    ``k * -x``                    ``(-k) * x``
    ``(-a) * (-b)``               ``a * b``
    ``(1 / a) * (1 / b)``         ``1 / (a * b)``
    ``(c * d) * e``               ``TernaryExpr(MUL, c, d, e)``
    ============================  ============================
    """
    _check(lhs, rhs)

    if isnumber(rhs):
        lhs, rhs = rhs, lhs

    if not getcontext().simplify:
        return BinaryExpr(Op.MUL, lhs, rhs)

    if isnumber(lhs):
        if lhs == 1:
            return rhs

        match rhs:
            case BinaryExpr(Op.MUL, c, e) if isnumber(c):
                return BinaryExpr(Op.MUL, lhs * c, e)

            case TernaryExpr(Op.MUL, a, b, c):
                return TernaryExpr(Op.MUL, lhs * a, b, c)

            case UnaryExpr(Op.NEG, operand):
                return multiply(-lhs, operand)

        return BinaryExpr(Op.MUL, lhs, rhs)

    match lhs, rhs:
        case UnaryExpr(Op.NEG, a), UnaryExpr(Op.NEG, b):
            return multiply(a, b)

        case UnaryExpr(Op.INV, a), UnaryExpr(Op.INV, b):
            return inverse(multiply(a, b))

        case BinaryExpr(Op.MUL, c, Leaf() as d), Leaf() if isnumber(c):
            return TernaryExpr(Op.MUL, c, d, rhs)

    return BinaryExpr(Op.MUL, lhs, rhs)


def divide(lhs, rhs):
    """Return ``lhs / rhs``, built as ``lhs * (1 / rhs)``."""
    _check(lhs, rhs)
    return multiply(lhs, inverse(rhs))


def power(lhs, rhs):
    """Return `lhs` raised to the power `rhs`."""
    _check(lhs, rhs)
    return BinaryExpr(Op.POW, lhs, rhs)


_FUNCTIONS = {
    Op.SIN: fn.sin,
    Op.COS: fn.cos,
    Op.TAN: fn.tan,
    Op.ASIN: fn.asin,
    Op.ACOS: fn.acos,
    Op.ATAN: fn.atan,
    Op.EXP: fn.exp,
    Op.LOG: fn.log,
    Op.LOG10: fn.log10,
    Op.SQRT: fn.sqrt,
    Op.ABS: fn.abs,
}


def unary(op: Op, x):
    """Apply the unary operator `op` to `x`.

    If `x` is a number, the result is computed immediately.
    """
    match op:
        case Op.NEG:
            return negative(x)

        case Op.INV:
            return inverse(x)

    if op not in _FUNCTIONS:
        raise ValueError(f"{op!r} is not a unary operator")

    if isnumber(x):
        return _FUNCTIONS[op](x)

    if not isinstance(x, Expr):
        raise TypeError

    return UnaryExpr(op, x)


def compose(op: Op, *operands):
    """Build the expression applying `op` to `operands` through the smart constructors.

    Parameters
    ----------
    op : Op
        Operator tag. ``SUB`` and ``DIV`` are accepted and rewritten.
    *operands
        Numbers or expressions. Their number must match ``op.arity``.

    Examples
    --------
    >>> from forwardad.autodiff import Dual
    >>> x = Dual(2.0)
    >>> compose(Op.SUB, x, 1)
    BinaryExpr(op=Op.ADD, left=-1, right=Dual(val=2.0, grad=0.0))
    """
    if len(operands) != op.arity:
        raise TypeError(f"{op!r} takes {op.arity} operand(s)")

    match op:
        case Op.ADD:
            return add(*operands)

        case Op.SUB:
            return subtract(*operands)

        case Op.MUL:
            return multiply(*operands)

        case Op.DIV:
            return divide(*operands)

        case Op.POW:
            return power(*operands)

        case _:
            return unary(op, *operands)


def leaves(x) -> Iterator[Any]:
    """Iterate over the dual numbers contained in the expression `x`."""
    match x:
        case Leaf():
            yield x

        case UnaryExpr(_, operand):
            yield from leaves(operand)

        case BinaryExpr(_, left, right):
            yield from leaves(left)
            yield from leaves(right)

        case TernaryExpr(_, a, b, c):
            yield from leaves(a)
            yield from leaves(b)
            yield from leaves(c)
