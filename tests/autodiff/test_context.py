import numpy
from loguru import logger

from forwardad.autodiff import (
    Context,
    Dual,
    Op,
    UnaryExpr,
    autodiff,
    eval,
    getcontext,
    localcontext,
    setcontext,
)


def test_default():
    assert getcontext().simplify
    assert not Context(simplify=False).simplify
    assert str(Context()) == "Context(simplify=True)"


def test_localcontext():
    ctx = getcontext()

    with localcontext(simplify=False) as local:
        assert getcontext() is local
        assert not getcontext().simplify

        with localcontext() as inner:
            assert not inner.simplify

        with localcontext(Context(True)):
            assert getcontext().simplify

    assert getcontext() is ctx


def test_setcontext():
    ctx = getcontext()

    try:
        setcontext(Context(simplify=False))
        assert not getcontext().simplify
    finally:
        setcontext(ctx)

    assert getcontext() is ctx


def test_no_simplification():
    x, y = Dual(2.0, 1.0), Dual(3.0, 0.0)

    with localcontext(simplify=False):
        result = -(-x)
        assert isinstance(result, UnaryExpr) and result.operand.op is Op.NEG

        result = 1 * x
        assert result.op is Op.MUL and result.left == 1

        result = (-x) * (-y)
        assert result.left.op is Op.NEG and result.right.op is Op.NEG

        result = x - y
        assert result.op is Op.ADD and result.right.op is Op.NEG

    result = -(-x)
    assert result is x


def test_simplification_preserves_values():
    rng = numpy.random.default_rng(7)

    for a, b in rng.uniform(-10.0, 10.0, (20, 2)):
        x, y = Dual(float(a), 1.0), Dual(float(b), -0.5)
        expected = eval(x * y)

        with localcontext(simplify=False):
            unsimplified = eval((-x) * (-y))

        simplified = eval((-x) * (-y))
        assert (simplified.val, simplified.grad) == (expected.val, expected.grad)
        assert (unsimplified.val, unsimplified.grad) == (expected.val, expected.grad)

        with localcontext(simplify=False):
            unsimplified = eval(-(-x))

        assert (unsimplified.val, unsimplified.grad) == (x.val, x.grad)


def test_logging():
    messages = []
    logger.enable("forwardad")
    handler = logger.add(messages.append, level="DEBUG", format="{message}")

    try:
        x = Dual(1.0)
        autodiff.seed(autodiff.wrt(x))
        autodiff.unseed(autodiff.wrt(x))
    finally:
        logger.remove(handler)
        logger.disable("forwardad")

    assert any("seed 1 variable(s)" in message for message in messages)
    assert any("unseed 1 variable(s)" in message for message in messages)
