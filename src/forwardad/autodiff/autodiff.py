import contextlib
from collections.abc import Callable, Iterator
from typing import Any, overload

from loguru import logger

from forwardad.autodiff.dual import Dual, assign, val
from forwardad.autodiff.expr import Expr


def wrt(*duals: Dual) -> tuple[Dual, ...]:
    """Return the variables with respect to which a function is differentiated.

    The `i`-th variable (counted from zero) is seeded at nesting depth ``i + 1``, that
    is, on the derivative field of ``var.val.val...`` with `.val` taken `i` times.
    Therefore, a derivative of order `n` requires `n` variables and dual numbers of
    depth at least `n`. Repeating a variable requests a higher derivative with respect
    to it.

    Examples
    --------
    >>> from forwardad.autodiff import HigherOrderDual
    >>> x = HigherOrderDual(2)(1.0)
    >>> len(wrt(x, x))
    2
    """
    for x in duals:
        if not isinstance(x, Dual):
            raise TypeError(f"{type(x).__name__} is not a dual number")

    return duals


def _target(var: Dual, index: int) -> Dual:
    target = var

    for _ in range(index):
        if not isinstance(target.val, Dual):
            raise ValueError(
                f"variable {index} must be a dual number of depth at least {index + 1}"
            )

        target = target.val

    return target


def _setgrad(target: Dual, num: int) -> None:
    if isinstance(target.grad, Dual):
        assign(target.grad, val(target.grad) * 0 + num)
    else:
        target.grad = target.grad * 0 + num


def seed(variables: tuple[Dual, ...] | Dual) -> None:
    """Set the derivative fields selected by `variables` to one.

    Parameters
    ----------
    variables : tuple[Dual, ...] | Dual
        Variables returned by :func:`wrt`, or a single dual number.

    Raises
    ------
    ValueError
        If a variable is not deep enough. In that case, no variable is seeded.
    """
    if isinstance(variables, Dual):
        variables = (variables,)

    targets = [_target(x, i) for i, x in enumerate(wrt(*variables))]
    logger.debug("seed {} variable(s)", len(targets))

    for target in targets:
        _setgrad(target, 1)


def unseed(variables: tuple[Dual, ...] | Dual) -> None:
    """Set the derivative fields selected by `variables` back to zero."""
    if isinstance(variables, Dual):
        variables = (variables,)

    targets = [_target(x, i) for i, x in enumerate(wrt(*variables))]
    logger.debug("unseed {} variable(s)", len(targets))

    for target in targets:
        _setgrad(target, 0)


@contextlib.contextmanager
def seeded(variables: tuple[Dual, ...] | Dual) -> Iterator[None]:
    """Return a context manager that seeds `variables` on entry to the with-statement
    and unseeds them when exiting the with-statement, even if an exception is raised.

    Examples
    --------
    >>> x = Dual(2.0)
    >>> with seeded(wrt(x)):
    ...     y = Dual(x * x)
    >>> print(y.grad, x.grad)
    4.0 0.0
    """
    seed(variables)

    try:
        yield
    finally:
        unseed(variables)


@overload
def derivative(order: int, dual: Expr, /) -> Any: ...


@overload
def derivative(
    fun: Callable[..., Any], variables: tuple[Dual, ...] | Dual, /, *args, **kwargs
) -> Any: ...


def derivative(first, second, /, *args, **kwargs):
    """Return a derivative.

    ``derivative(order, dual)`` extracts the derivative of order `order` from `dual`:
    order 0 is ``dual.val`` and order `n` is ``dual.grad`` followed `n` times.

    ``derivative(fun, variables, *args, **kwargs)`` seeds `variables`, evaluates
    ``fun(*args, **kwargs)``, unseeds `variables` and returns the derivative of order
    ``len(variables)`` of the result.

    Raises
    ------
    ValueError
        If `order` is negative or exceeds the nesting depth.

    Examples
    --------
    >>> from forwardad import function as fn
    >>> from forwardad.autodiff import HigherOrderDual
    >>> x = Dual(1.0)
    >>> print(format(derivative(fn.sin, wrt(x), x), ".6f"))
    0.540302

    The second derivative requires a dual number of depth 2.

    >>> x = HigherOrderDual(2)(2.0)
    >>> derivative(lambda x: x**3, wrt(x, x), x)
    12.0
    """
    if callable(first) and not isinstance(first, Expr):
        variables = (second,) if isinstance(second, Dual) else tuple(second)

        with seeded(variables):
            result = Dual(first(*args, **kwargs))

        return derivative(len(variables), result)

    if args or kwargs:
        raise TypeError("too many arguments")

    order, dual = first, second

    if isinstance(dual, Expr) and not isinstance(dual, Dual):
        dual = Dual(dual)

    if not isinstance(dual, Dual):
        raise TypeError(f"{type(dual).__name__} is not an expression")

    if order < 0:
        raise ValueError("order must be non-negative")

    logger.debug("extract derivative of order {}", order)

    if order == 0:
        return dual.val

    result: Any = dual

    for _ in range(order):
        if not isinstance(result, Dual):
            raise ValueError(f"order {order} exceeds the nesting depth")

        result = result.grad

    return result


def grad[**P](fun: Callable[P, Any]) -> Callable[..., Any]:
    """Return a function that evaluates a partial derivative of `fun`.

    Parameters
    ----------
    fun : Callable
        Differentiated function taking dual numbers.

    Returns
    -------
    Callable
        Function called as ``g(variables, *args, **kwargs)``, where `variables` is a
        dual number or the result of :func:`wrt`, that returns
        ``derivative(fun, variables, *args, **kwargs)``.

    Examples
    --------
    >>> from forwardad import function as fn
    >>> f = lambda x, y: fn.exp(y / x) + 2
    >>> x, y = Dual(1.2), Dual(3.5)
    >>> g = grad(f)
    >>> print(format(g(x, x, y), ".4f"), format(g(y, x, y), ".4f"))
    -44.9157 15.3997
    """

    def result(variables, *args, **kwargs):
        return derivative(fun, variables, *args, **kwargs)

    return result
