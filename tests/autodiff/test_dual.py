import copy

import mpmath
import pytest

from forwardad import function as fn
from forwardad.autodiff import Dual, HigherOrderDual, eval, val


def test_construct():
    x = Dual()
    assert (x.val, x.grad) == (0, 0)

    x = Dual(2.5)
    assert (x.val, x.grad) == (2.5, 0.0)

    x = Dual(2.5, 1.0)
    assert (x.val, x.grad) == (2.5, 1.0)

    y = Dual(x * x + 1)
    assert (y.val, y.grad) == (7.25, 5.0)

    with pytest.raises(TypeError):
        Dual("2.5")


def test_copy():
    x = Dual(Dual(2.0, 1.0), Dual(1.0, 0.0))
    y = x.copy()
    z = copy.copy(x)
    y.val.val = 5.0
    z.grad.val = 5.0
    assert x.val.val == 2.0 and x.grad.val == 1.0

    y = Dual(x)
    assert y.val is not x.val and y.grad is not x.grad
    assert y.val.grad == 1.0


def test_depth():
    assert Dual(1.0).depth == 1
    assert Dual(Dual(1.0), Dual(0.0)).depth == 2
    assert HigherOrderDual(4)(1.0).depth == 4


def test_higher_order_dual():
    assert HigherOrderDual(0) is float
    assert HigherOrderDual(1) is Dual
    assert HigherOrderDual(2) is HigherOrderDual(2)
    assert issubclass(HigherOrderDual(3), Dual)

    x = HigherOrderDual(2)(3.0)
    assert type(x.val) is Dual and type(x.grad) is Dual
    assert (x.val.val, x.val.grad, x.grad.val, x.grad.grad) == (3.0, 0.0, 0.0, 0.0)

    x = HigherOrderDual(2)(3.0, 1.0)
    assert (x.grad.val, x.grad.grad) == (1.0, 0.0)

    with pytest.raises(ValueError):
        HigherOrderDual(-1)


def test_format():
    x = Dual(1.25, 3.0)
    assert str(x) == "1.25"
    assert format(x, ".1f") == "1.2"
    assert repr(x) == "Dual(val=1.25, grad=3.0)"
    assert str(HigherOrderDual(2)(0.5)) == "0.5"
    assert float(x + 1) == 2.25


def test_compare():
    a, b = Dual(1.0, 2.0), Dual(1.0, -3.0)
    assert a == b
    assert not a != b
    assert a <= b and a >= b
    assert a < Dual(2.0) and Dual(2.0) > a
    assert a == 1.0 and 1.0 == a
    assert a + 1 > b
    assert a != "1.0"

    with pytest.raises(TypeError):
        hash(a)


def test_inplace():
    x = Dual(2.0, 1.0)
    x += 1
    assert (x.val, x.grad) == (3.0, 1.0)
    x -= Dual(1.0, 1.0)
    assert (x.val, x.grad) == (2.0, 0.0)
    x += Dual(0.0, 1.0)
    x *= Dual(3.0, 1.0)
    assert (x.val, x.grad) == (6.0, 5.0)
    x /= 2
    assert (x.val, x.grad) == (3.0, 2.5)
    x **= 2
    assert (x.val, x.grad) == (9.0, 15.0)

    x = Dual(3.0, 1.0)
    x -= fn.sin(Dual(0.0, 1.0))
    assert (x.val, x.grad) == (3.0, 0.0)

    with pytest.raises(TypeError):
        x += "1"


def test_self_reference():
    x = Dual(3.0, 1.0)
    x *= x
    assert (x.val, x.grad) == (9.0, 6.0)

    x = Dual(3.0, 1.0)
    x += x
    assert (x.val, x.grad) == (6.0, 2.0)

    x, y = Dual(2.0, 1.0), Dual(1.0, 0.0)
    y.assign(x + y)
    assert (y.val, y.grad) == (3.0, 1.0)
    y.assign(y * y + x)
    assert (y.val, y.grad) == (11.0, 7.0)

    x = Dual(2.0, 1.0)
    x /= x + 2
    assert (x.val, x.grad) == (0.5, 0.125)


def test_eval_val():
    x = Dual(2.0, 1.0)
    assert eval(x) is x

    y = eval(fn.exp(x))
    assert isinstance(y, Dual)
    assert y.val == y.grad == fn.exp(2.0)

    with pytest.raises(TypeError):
        eval(2.0)

    y = Dual(1 * x)
    assert eval(1 * x) is x and y is not x
    y += 1
    assert (x.val, x.grad) == (2.0, 1.0) and (y.val, y.grad) == (3.0, 1.0)

    assert val(3.0) == 3.0
    assert val(Dual(Dual(2.0, 1.0), Dual(1.0, 0.0))) == 2.0
    assert val(x * 3 - 1) == 5.0

    with pytest.raises(TypeError):
        val("x")


def test_mpmath_values():
    x = Dual(mpmath.mpf("0.5"), mpmath.mpf(1))
    y = eval(fn.atan(x) * 2)
    assert isinstance(y.val, mpmath.mpf)
    assert mpmath.almosteq(y.val, 2 * mpmath.atan("0.5"))
    assert mpmath.almosteq(y.grad, 2 / (1 + mpmath.mpf("0.25")))
