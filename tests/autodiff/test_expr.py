import numpy
import pytest

from forwardad import function as fn
from forwardad.autodiff import (
    BinaryExpr,
    Dual,
    Expr,
    Op,
    TernaryExpr,
    UnaryExpr,
    compose,
    leaves,
)
from forwardad.autodiff.expr import add, inverse, multiply, negative, power, unary


def test_negation():
    x, y = Dual(1.0), Dual(2.0)
    assert -(-x) is x

    result = -(2 * x)
    assert isinstance(result, BinaryExpr)
    assert result.op is Op.MUL and result.left == -2 and result.right is x

    result = (-x) + (-y)
    assert isinstance(result, UnaryExpr) and result.op is Op.NEG
    assert result.operand.op is Op.ADD
    assert result.operand.left is x and result.operand.right is y

    assert negative(3.0) == -3.0
    assert +x is x


def test_product():
    x, y = Dual(1.0), Dual(2.0)

    result = 3 * (2 * x)
    assert result.op is Op.MUL and result.left == 6 and result.right is x

    result = 3 * (-x)
    assert result.op is Op.MUL and result.left == -3 and result.right is x

    result = (-x) * (-y)
    assert result.op is Op.MUL and result.left is x and result.right is y

    result = (1 / x) * (1 / y)
    assert isinstance(result, UnaryExpr) and result.op is Op.INV
    assert result.operand.left is x and result.operand.right is y

    assert x * 1 is x
    assert multiply(x, 4).left == 4


def test_fused_product():
    x, y = Dual(1.0), Dual(2.0)

    result = (2 * x) * y
    assert isinstance(result, TernaryExpr)
    assert (result.a, result.b is x, result.c is y) == (2, True, True)

    result = -((2 * x) * y)
    assert isinstance(result, TernaryExpr) and result.a == -2

    result = 3 * ((2 * x) * y)
    assert isinstance(result, TernaryExpr) and result.a == 6


def test_reciprocal():
    x = Dual(2.0)
    assert inverse(inverse(x)) is x
    assert 1 / (1 / x) is x
    assert inverse(4.0) == 0.25
    assert inverse(0.0) == float("inf")


def test_normal_form():
    x, y = Dual(1.0), Dual(2.0)

    result = x - y
    assert result.op is Op.ADD and result.left is x
    assert result.right.op is Op.NEG and result.right.operand is y

    result = x / y
    assert result.op is Op.MUL and result.left is x
    assert result.right.op is Op.INV and result.right.operand is y

    result = x - 2
    assert result.op is Op.ADD and result.left == -2 and result.right is x

    result = x / 4
    assert result.op is Op.MUL and result.left == 0.25 and result.right is x

    result = x + 1
    assert result.left == 1 and result.right is x

    result = x**2
    assert result.op is Op.POW and result.left is x and result.right == 2

    result = abs(x)
    assert result.op is Op.ABS and result.operand is x


def test_compose():
    x = Dual(0.5)
    assert compose(Op.SIN, x).op is Op.SIN
    assert compose(Op.SUB, x, x).right.op is Op.NEG
    assert compose(Op.DIV, 1, x).op is Op.INV
    assert compose(Op.NEG, x).operand is x
    assert compose(Op.POW, 2, x).left == 2
    assert unary(Op.EXP, 0.0) == 1.0

    with pytest.raises(TypeError):
        compose(Op.SIN, x, x)

    with pytest.raises(TypeError):
        compose(Op.ADD, 1.0, 2.0)

    with pytest.raises(ValueError):
        unary(Op.ADD, x)


def test_invalid_operands():
    x = Dual(1.0)

    with pytest.raises(TypeError):
        add(1, 2)

    with pytest.raises(TypeError):
        power(2.0, 3.0)

    with pytest.raises(TypeError):
        x + "1"

    with pytest.raises(TypeError):
        [1.0] * x

    with pytest.raises(TypeError):
        negative("x")


def test_numpy_scalars():
    x = Dual(1.0)
    result = numpy.float64(2.0) * x
    assert isinstance(result, BinaryExpr) and result.left == 2.0

    result = numpy.float64(2.0) - x
    assert isinstance(result, Expr)


def test_leaves():
    x, y = Dual(1.0), Dual(2.0)
    result = list(leaves(fn.sin(x) * y + 2))
    assert len(result) == 2 and result[0] is x and result[1] is y

    result = list(leaves((2 * x) * y - x))
    assert [id(z) for z in result] == [id(x), id(y), id(x)]
    assert list(leaves(3.0)) == []


def test_pass_through():
    x = Dual(1.5, 1.0)
    result = fn.abs2(x)
    assert result.op is Op.MUL and result.left is x and result.right is x
    assert fn.conj(x) is x
    assert fn.real(x) is x
    assert fn.imag(x) == 0.0
