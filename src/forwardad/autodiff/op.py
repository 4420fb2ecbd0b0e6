import enum


class Op(enum.Enum):
    """Operator tags carried by expression nodes.

    Each member identifies the elementary rule applied when a node is collapsed into a
    :class:`~forwardad.autodiff.Dual`. ``SUB`` and ``DIV`` are part of the catalogue but
    never appear on a node: subtraction and division are rewritten into ``ADD`` of a
    ``NEG`` node and ``MUL`` by an ``INV`` node when the expression is built.

    Examples
    --------
    >>> Op.SIN
    Op.SIN
    >>> Op.POW.arity
    2
    """

    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    DIV = enum.auto()
    NEG = enum.auto()
    INV = enum.auto()
    SIN = enum.auto()
    COS = enum.auto()
    TAN = enum.auto()
    ASIN = enum.auto()
    ACOS = enum.auto()
    ATAN = enum.auto()
    EXP = enum.auto()
    LOG = enum.auto()
    LOG10 = enum.auto()
    SQRT = enum.auto()
    POW = enum.auto()
    ABS = enum.auto()

    @property
    def arity(self) -> int:
        """Number of operands the operator takes."""
        if self in (Op.ADD, Op.SUB, Op.MUL, Op.DIV, Op.POW):
            return 2

        return 1

    def __repr__(self):
        return f"{type(self).__name__}.{self.name}"
