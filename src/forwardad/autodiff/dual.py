import functools
from typing import Any, ClassVar, Self

from loguru import logger

from forwardad import function as fn
from forwardad.autodiff.expr import (
    BinaryExpr,
    Expr,
    Leaf,
    TernaryExpr,
    UnaryExpr,
    inverse,
    leaves,
    negative,
)
from forwardad.autodiff.op import Op
from forwardad.typing import Scalar, isnumber


class Dual[T: Scalar, G: Scalar](Leaf):
    r"""Dual number.

    Parameters
    ----------
    val : T | Expr, default=0
        Value. If `val` is an expression and `grad` is omitted, the expression is
        collapsed into the new dual number (a dual number is copied).
    grad : G | None, default=None
        Derivative. If `grad` is omitted, it is zero in the type of `val`.

    Attributes
    ----------
    val : T
    grad : G

    See Also
    --------
    HigherOrderDual

    Notes
    -----
    A dual number is a pair :math:`(v, g)` behaving like :math:`v + g\varepsilon`
    with :math:`\varepsilon^2 = 0`. `grad` may itself be a dual number, in which case
    higher-order derivatives are carried as well.

    Arithmetic operators and the functions of :mod:`forwardad.function` do not compute
    anything: they build an expression that is collapsed when it is assigned to a dual
    number. The in-place operators ``+=``, ``-=``, ``*=``, ``/=`` and ``**=`` update
    the dual number without building intermediate dual numbers.

    Examples
    --------
    >>> from forwardad import function as fn
    >>> x = Dual(1.5, 1.0)
    >>> y = Dual(fn.sin(x) * x)
    >>> print(format(y.val, ".6f"), format(y.grad, ".6f"))
    1.496242 1.103601
    >>> print(format(y, ".4f"))
    1.4962
    """

    __slots__ = ("val", "grad")
    _depth: ClassVar[int] = 1
    val: T
    grad: G

    def __init__(self, val: Any = 0, grad: Any = None):
        if isinstance(val, Expr) and grad is None:
            self.val = _field(0, self._depth - 1)
            self.grad = _field(0, self._depth - 1)
            assign(self, val)
            return

        if not isnumber(val) and not isinstance(val, Expr):
            raise TypeError(f"unsupported value type: {type(val).__name__}")

        if grad is None:
            grad = val * 0

        self.val = _field(val, self._depth - 1)
        self.grad = _field(grad, self._depth - 1)

    @property
    def depth(self) -> int:
        """Nesting depth, which is the highest order of derivatives it can carry."""
        return 1 + (self.val.depth if isinstance(self.val, Dual) else 0)

    def copy(self) -> Self:
        return self.__class__(self)

    def assign(self, other) -> Self:
        """Collapse `other` into this dual number."""
        if not isinstance(other, Expr) and not isnumber(other):
            raise TypeError

        assign(self, _detach(self, other))
        return self

    def __copy__(self) -> Self:
        return self.copy()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(val={self.val!r}, grad={self.grad!r})"

    def __str__(self) -> str:
        return str(self.val)

    def __format__(self, format_spec: str) -> str:
        return format(self.val, format_spec)

    def __iadd__(self, rhs) -> Self:
        if not isinstance(rhs, Expr) and not isnumber(rhs):
            return NotImplemented

        accumulate_add(self, _detach(self, rhs))
        return self

    def __isub__(self, rhs) -> Self:
        if not isinstance(rhs, Expr) and not isnumber(rhs):
            return NotImplemented

        accumulate_sub(self, _detach(self, rhs))
        return self

    def __imul__(self, rhs) -> Self:
        if not isinstance(rhs, Expr) and not isnumber(rhs):
            return NotImplemented

        accumulate_mul(self, _detach(self, rhs))
        return self

    def __itruediv__(self, rhs) -> Self:
        if not isinstance(rhs, Expr) and not isnumber(rhs):
            return NotImplemented

        accumulate_div(self, _detach(self, rhs))
        return self

    def __ipow__(self, rhs) -> Self:
        if not isinstance(rhs, Expr) and not isnumber(rhs):
            return NotImplemented

        accumulate_pow(self, _detach(self, rhs))
        return self


def _detach(dual: Dual, x):
    if isinstance(x, Expr) and any(leaf is dual for leaf in leaves(x)):
        return Dual(x)

    return x


def _field(value, depth: int):
    match value:
        case Dual():
            return value.copy()

        case Expr():
            return Dual(value)

        case _ if isnumber(value):
            return value if depth == 0 else HigherOrderDual(depth)(value)

        case _:
            raise TypeError(f"unsupported value type: {type(value).__name__}")


def _snapshot(x):
    if isinstance(x, Expr) and not isinstance(x, Dual):
        return Dual(x)

    return x


def _materialize(x):
    if isinstance(x, Dual):
        return x.copy()

    return _snapshot(x)


def _scratch(tmp: Dual | None) -> Dual:
    return Dual() if tmp is None else tmp


def _store(dual: Dual, name: str, value) -> None:
    value = _snapshot(value)

    if isinstance(slot := getattr(dual, name), Dual):
        assign(slot, value)
    else:
        setattr(dual, name, _materialize(value))


def _iadd(dual: Dual, name: str, value) -> None:
    if isinstance(slot := getattr(dual, name), Dual):
        accumulate_add(slot, value)
    else:
        setattr(dual, name, _materialize(slot + value))


def _isub(dual: Dual, name: str, value) -> None:
    if isinstance(slot := getattr(dual, name), Dual):
        accumulate_sub(slot, value)
    else:
        setattr(dual, name, _materialize(slot - value))


def _imul(dual: Dual, name: str, value) -> None:
    if isinstance(slot := getattr(dual, name), Dual):
        accumulate_mul(slot, value)
    else:
        setattr(dual, name, _materialize(slot * value))


def assign(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Overwrite `dual` with the result of collapsing `other`.

    Parameters
    ----------
    dual : Dual
        Target dual number. `other` must not contain `dual`.
    other : Expr | T
        Expression or number.
    tmp : Dual, optional
        Scratch dual number used when an operand has to be materialized.
    """
    match other:
        case Dual():
            _store(dual, "val", other.val)
            _store(dual, "grad", other.grad)

        case UnaryExpr(op, operand):
            assign(dual, operand, tmp)
            apply(dual, op)

        case BinaryExpr(Op.ADD, left, right):
            assign(dual, right, tmp)
            accumulate_add(dual, left, tmp)

        case BinaryExpr(Op.MUL, left, right):
            assign(dual, right, tmp)
            accumulate_mul(dual, left, tmp)

        case BinaryExpr(Op.POW, left, right):
            assign(dual, left, tmp)
            accumulate_pow(dual, right, tmp)

        case TernaryExpr(Op.MUL, a, b, c):
            assign(dual, c, tmp)
            accumulate_mul(dual, a)
            accumulate_mul(dual, b)

        case _ if isnumber(other):
            _store(dual, "val", other)
            _store(dual, "grad", other * 0)

        case _:
            raise TypeError(f"cannot assign {type(other).__name__}")


def accumulate_add(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Add `other` to `dual` in place. `other` must not contain `dual`."""
    match other:
        case Dual():
            _iadd(dual, "val", other.val)
            _iadd(dual, "grad", other.grad)

        case BinaryExpr(Op.MUL, c, Dual() as d) if isnumber(c):
            _iadd(dual, "val", c * d.val)
            _iadd(dual, "grad", c * d.grad)

        case UnaryExpr(Op.NEG, operand):
            tmp = _scratch(tmp)
            assign(tmp, operand)
            _isub(dual, "val", tmp.val)
            _isub(dual, "grad", tmp.grad)

        case UnaryExpr(Op.INV, operand):
            tmp = _scratch(tmp)
            assign(tmp, operand)
            aux = _snapshot(fn._divide(1, tmp.val))
            _iadd(dual, "val", aux)
            _isub(dual, "grad", aux * aux * tmp.grad)

        case BinaryExpr(Op.ADD, left, right):
            accumulate_add(dual, left, tmp)
            accumulate_add(dual, right, tmp)

        case _ if isnumber(other):
            _iadd(dual, "val", other)

        case Expr():
            tmp = _scratch(tmp)
            assign(tmp, other)
            accumulate_add(dual, tmp)

        case _:
            raise TypeError(f"cannot add {type(other).__name__}")


def accumulate_sub(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Subtract `other` from `dual` in place. `other` must not contain `dual`."""
    match other:
        case Dual():
            _isub(dual, "val", other.val)
            _isub(dual, "grad", other.grad)

        case _ if isnumber(other):
            _isub(dual, "val", other)

        case Expr():
            accumulate_add(dual, negative(other), tmp)

        case _:
            raise TypeError(f"cannot subtract {type(other).__name__}")


def accumulate_mul(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Multiply `dual` by `other` in place. `other` must not contain `dual`."""
    match other:
        case Dual():
            _store(dual, "grad", dual.grad * other.val + dual.val * other.grad)
            _imul(dual, "val", other.val)

        case UnaryExpr(Op.NEG, operand):
            accumulate_mul(dual, operand, tmp)
            negate(dual)

        case BinaryExpr(Op.MUL, left, right):
            accumulate_mul(dual, left, tmp)
            accumulate_mul(dual, right, tmp)

        case TernaryExpr(Op.MUL, a, b, c):
            accumulate_mul(dual, a)
            accumulate_mul(dual, b)
            accumulate_mul(dual, c)

        case _ if isnumber(other):
            _imul(dual, "val", other)
            _imul(dual, "grad", other)

        case Expr():
            tmp = _scratch(tmp)
            assign(tmp, other)
            accumulate_mul(dual, tmp)

        case _:
            raise TypeError(f"cannot multiply by {type(other).__name__}")


def accumulate_div(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Divide `dual` by `other` in place. `other` must not contain `dual`."""
    match other:
        case Dual():
            aux = _snapshot(fn._divide(1, other.val))
            _imul(dual, "val", aux)
            _store(dual, "grad", (dual.grad - dual.val * other.grad) * aux)

        case _ if isnumber(other):
            accumulate_mul(dual, fn._divide(1, other))

        case Expr():
            accumulate_mul(dual, inverse(other), tmp)

        case _:
            raise TypeError(f"cannot divide by {type(other).__name__}")


def accumulate_pow(dual: Dual, other, tmp: Dual | None = None) -> None:
    """Raise `dual` to the power `other` in place. `other` must not contain `dual`.

    Notes
    -----
    With a number exponent :math:`c`, the derivative is updated as
    :math:`g \\leftarrow g \\cdot (c / v) \\cdot v^c`, which is ``nan`` at
    :math:`v = 0`.
    """
    match other:
        case Dual():
            p = _snapshot(fn.pow(dual.val, other.val))
            lg = _snapshot(fn.log(dual.val))
            aux = _snapshot(fn._divide(other.val, dual.val))
            _store(dual, "grad", (dual.grad * aux + lg * other.grad) * p)
            _store(dual, "val", p)

        case _ if isnumber(other):
            p = _snapshot(fn.pow(dual.val, other))
            aux = _snapshot(fn._divide(other, dual.val) * p)
            _imul(dual, "grad", aux)
            _store(dual, "val", p)

        case Expr():
            tmp = _scratch(tmp)
            assign(tmp, other)
            accumulate_pow(dual, tmp)

        case _:
            raise TypeError(f"cannot raise to {type(other).__name__}")


def negate(dual: Dual) -> None:
    """Negate both fields of `dual` in place."""
    for name in ("val", "grad"):
        if isinstance(slot := getattr(dual, name), Dual):
            negate(slot)
        else:
            setattr(dual, name, -slot)


def apply(dual: Dual, op: Op) -> None:
    """Apply the unary operator `op` to `dual` in place (chain rule)."""
    v = dual.val

    match op:
        case Op.NEG:
            negate(dual)
            return

        case Op.INV:
            new = _snapshot(fn._divide(1, v))
            mult = -(new * new)

        case Op.SIN:
            new, mult = fn.sin(v), fn.cos(v)

        case Op.COS:
            new, mult = fn.cos(v), -fn.sin(v)

        case Op.TAN:
            c = _snapshot(fn.cos(v))
            new, mult = fn.tan(v), fn._divide(1, c * c)

        case Op.ASIN:
            new, mult = fn.asin(v), fn._divide(1, fn.sqrt(1 - v * v))

        case Op.ACOS:
            new, mult = fn.acos(v), fn._divide(-1, fn.sqrt(1 - v * v))

        case Op.ATAN:
            new, mult = fn.atan(v), fn._divide(1, 1 + v * v)

        case Op.EXP:
            new = _snapshot(fn.exp(v))
            mult = new

        case Op.LOG:
            new, mult = fn.log(v), fn._divide(1, v)

        case Op.LOG10:
            new, mult = fn.log10(v), fn._divide(1, fn.ln10(v) * v)

        case Op.SQRT:
            new = _snapshot(fn.sqrt(v))
            mult = fn._divide(0.5, new)

        case Op.ABS:
            new, mult = fn.abs(v), fn._divide(v, fn.abs(v))

        case _:
            raise ValueError(f"{op!r} is not a unary operator")

    new = _snapshot(new)
    mult = _snapshot(mult)
    _store(dual, "val", new)
    _imul(dual, "grad", mult)


def eval(x) -> Dual:
    """Collapse the expression `x` into a dual number.

    A dual number is returned as it is. With simplification enabled, an expression may
    reduce to one of its leaves when it is built (``1 * x``, ``-(-x)`` and ``1 / (1 /
    x)`` all become ``x``), so the result can be that very dual number. Use
    ``Dual(x)`` to always obtain a new dual number.

    Examples
    --------
    >>> x = Dual(3.0, 1.0)
    >>> eval(x * x)
    Dual(val=9.0, grad=6.0)
    >>> eval(x) is x
    True
    >>> eval(1 * x) is x, Dual(1 * x) is x
    (True, False)
    """
    match x:
        case Dual():
            return x

        case Expr():
            return Dual(x)

        case _:
            raise TypeError(f"{type(x).__name__} is not an expression")


def val(x):
    """Return the innermost value of a number, a dual number or an expression.

    Examples
    --------
    >>> x = Dual(Dual(2.0, 1.0), Dual(1.0, 0.0))
    >>> val(x)
    2.0
    >>> val(x * 3)
    6.0
    """
    match x:
        case Dual():
            return val(x.val)

        case Expr():
            return val(Dual(x))

        case _ if isnumber(x):
            return x

        case _:
            raise TypeError(f"unsupported operand type: {type(x).__name__}")


@functools.cache
def HigherOrderDual(order: int) -> type:
    """Return the dual number type carrying derivatives up to `order`.

    Order 0 is :class:`float`, order 1 is :class:`Dual`. A type of order :math:`n \\ge
    2` is a subclass of :class:`Dual` whose constructor nests numbers so that both
    fields are of order :math:`n - 1`.

    Examples
    --------
    >>> D3 = HigherOrderDual(3)
    >>> x = D3(2.0)
    >>> x.depth
    3
    >>> type(x.val) is HigherOrderDual(2)
    True
    """
    if order < 0:
        raise ValueError("order must be non-negative")

    match order:
        case 0:
            return float

        case 1:
            return Dual

    logger.debug("create dual number type of order {}", order)
    namespace = {"__slots__": (), "_depth": order, "__module__": __name__}
    return type(f"HigherOrderDual{order}", (Dual,), namespace)
