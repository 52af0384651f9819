import random

import pytest

from sumcheck.extrapolate import (
    ExtrapolationTable,
    extrapolate_from_table,
    extrapolate_uni_poly,
    get_extrapolation_table,
    warm_up,
)
from sumcheck.util import BN254_FQ_MODULUS, BN254_FR_MODULUS, PrimeField

FQ = PrimeField(BN254_FQ_MODULUS)
FR = PrimeField(BN254_FR_MODULUS)
SMALL = PrimeField(97)


def _horner(field, coeffs, x):
    result = 0
    for c in reversed(coeffs):
        result = (result * x + c) % field.modulus
    return result


def test_extrapolate_from_table_linear():
    def f(x):
        return (2 * x + 3) % FQ.modulus

    degree = 1
    target_len = 5
    values = [f(x) for x in range(degree + 1)] + [0] * (target_len - degree - 1)
    extrapolate_from_table(FQ, values, degree + 1)
    assert values == [f(x) for x in range(target_len)]


def test_extrapolate_from_table_quadratic_small_field():
    values = [0, 1, 4, 0, 0]
    extrapolate_from_table(SMALL, values, 3)
    assert values == [0, 1, 4, 9, 16]


@pytest.mark.parametrize("degree", [1, 2, 3, 4])
@pytest.mark.parametrize("target_len", [6, 7])
def test_extrapolate_from_table_random(degree, target_len):
    rng = random.Random(degree * 31 + target_len)
    coeffs = [FR.random(rng) for _ in range(degree + 1)]
    expected = [_horner(FR, coeffs, x) for x in range(target_len)]
    values = expected[: degree + 1] + [0] * (target_len - degree - 1)
    extrapolate_from_table(FR, values, degree + 1)
    assert values == expected


def test_extrapolate_from_table_rejects_bad_start():
    with pytest.raises(ValueError):
        extrapolate_from_table(FQ, [1, 2, 3], 0)
    with pytest.raises(ValueError):
        extrapolate_from_table(FQ, [1, 2, 3], 3)


@pytest.mark.parametrize("degree", [1, 2, 3, 4, 5, 6])
def test_extrapolation(degree):
    rng = random.Random(1000 + degree)
    coeffs = [FQ.random(rng) for _ in range(degree + 1)]
    evals = [_horner(FQ, coeffs, i) for i in range(degree + 1)]
    query = FQ.random(rng)
    assert extrapolate_uni_poly(FQ, evals, query) == _horner(FQ, coeffs, query)


def test_extrapolate_uni_poly_small_field_value():
    # x^2 + 1 over GF(97) at x = 10 gives 101 mod 97 = 4.
    assert extrapolate_uni_poly(SMALL, [1, 2, 5], 10) == 4


def test_extrapolate_uni_poly_unsupported_degree():
    with pytest.raises(ValueError):
        extrapolate_uni_poly(FQ, [1], 5)
    with pytest.raises(ValueError):
        extrapolate_uni_poly(FQ, list(range(8)), 5)


def test_extrapolate_uni_poly_at_node_raises():
    with pytest.raises(ZeroDivisionError):
        extrapolate_uni_poly(FQ, [3, 5, 7], 1)


def test_table_shape_and_partition_of_unity():
    table = ExtrapolationTable(FQ, 1, 4)
    assert len(table.weights) == 4
    assert [len(rows) for rows in table.weights] == [3, 2, 1, 0]
    for offset, rows in enumerate(table.weights):
        degree = 1 + offset
        for row in rows:
            assert len(row) == degree + 1
            assert sum(row) % FQ.modulus == 1


def test_table_linear_weights_small_field():
    table = ExtrapolationTable(SMALL, 1, 3)
    # f(2) = -f(0) + 2 f(1), f(3) = -2 f(0) + 3 f(1)
    assert table.weights[0] == [[96, 2], [95, 3]]


def test_cache_returns_same_table():
    first = get_extrapolation_table(FR, 2, 5)
    second = get_extrapolation_table(FR, 2, 5)
    assert first is second
    assert get_extrapolation_table(FQ, 2, 5) is not first


def test_warm_up_fills_cache():
    field = PrimeField(101)
    warm_up(field, 4)
    table = get_extrapolation_table(field, 1, 4)
    assert table.min_degree == 1 and table.max_degree == 4
    assert table is get_extrapolation_table(field, 1, 4)


def test_warm_up_rejects_small_degree():
    with pytest.raises(ValueError):
        warm_up(FQ, 1)