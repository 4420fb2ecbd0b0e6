import contextlib
import contextvars
from typing import Self

from loguru import logger


class Context:
    """Create a new context.

    The context controls how expressions are built. Every expression built while a
    context is current follows its settings; expressions already built are not affected.

    Parameters
    ----------
    simplify : bool, default=True
        If `simplify` is ``True``, expression nodes are simplified when they are built:
        double negations and reciprocals cancel, negations and reciprocals of products
        are merged, and number factors are folded together. Subtraction and division are
        rewritten into addition and multiplication regardless of `simplify`.
    """

    __slots__ = ("_simplify",)
    _simplify: bool

    def __init__(self, simplify: bool = True):
        self._simplify = simplify

    @property
    def simplify(self) -> bool:
        return self._simplify

    def copy(self) -> Self:
        return self.__class__(self._simplify)

    def __str__(self):
        return f"{type(self).__name__}(simplify={self._simplify!r})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("autodiff")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    logger.debug("set context: {}", ctx)
    _var.set(ctx)


@contextlib.contextmanager
def localcontext(ctx: Context | None = None, *, simplify: bool | None = None):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> with localcontext(simplify=False) as ctx:
    ...     print(ctx)
    Context(simplify=False)
    """
    if ctx is None:
        ctx = getcontext()

    if simplify is None:
        simplify = ctx._simplify

    ctx = Context(simplify)
    logger.debug("enter local context: {}", ctx)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)
