import math

import pytest

from vector import Vector3


def test_arithmetic():
    a = Vector3(1, 2, 3)
    b = Vector3(0.5, -1, 2)
    assert a + b == Vector3(1.5, 1, 5)
    assert a - b == Vector3(0.5, 3, 1)
    assert a * 2 == Vector3(2, 4, 6)
    assert 2 * a == Vector3(2, 4, 6)
    assert a / 2 == Vector3(0.5, 1, 1.5)
    assert -a == Vector3(-1, -2, -3)
    assert a.dot(b) == pytest.approx(0.5 - 2 + 6)


def test_division_by_zero_gives_zero_vector():
    assert Vector3(1, 2, 3) / 0 == Vector3.zero()


@pytest.mark.parametrize("v", [Vector3(3, 4, 0), Vector3(-0.001, 0.002, 5), Vector3(1e6, -1e6, 1)])
def test_normalize_gives_unit_vector_in_same_direction(v):
    n = v.normalize()
    assert n.length() == pytest.approx(1.0)
    assert n.dot(v) == pytest.approx(v.length())


def test_normalize_zero_vector_is_zero_not_nan():
    n = Vector3.zero().normalize()
    assert n == Vector3.zero()
    assert not any(math.isnan(c) for c in n)


def test_direction_to_self_is_zero():
    p = Vector3(1, 1, 0)
    assert p.direction_to(p) == Vector3.zero()


def test_distance_and_length():
    assert Vector3(0, 0, 0).distance_to(Vector3(3, 4, 0)) == pytest.approx(5.0)
    assert Vector3(1, 2, 2).length() == pytest.approx(3.0)


def test_clamp_is_componentwise():
    assert Vector3(2, -3, 0.5).clamp(-1, 1) == Vector3(1, -1, 0.5)


def test_rotation():
    assert Vector3(0, 1, 0).rotation == pytest.approx(math.pi / 2)
    assert Vector3(-1, 0, 0).rotation == pytest.approx(math.pi)


def test_vectors_are_immutable_values():
    v = Vector3(1, 2, 3)
    with pytest.raises(AttributeError):
        v.x = 5
    with pytest.raises(AttributeError):
        v._x = 5
    assert hash(v) == hash(Vector3(1, 2, 3))
    assert {v, Vector3(1, 2, 3)} == {v}


def test_from_iterable_accepts_2d():
    assert Vector3.from_iterable([1, 2]) == Vector3(1, 2, 0)
    with pytest.raises(ValueError):
        Vector3.from_iterable([1])
