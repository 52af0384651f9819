import random

import pytest

from sumcheck.util import (
    BN254_FQ_MODULUS,
    BN254_FR_MODULUS,
    AdditiveVec,
    PolyMeta,
    PrimeField,
    bit_decompose,
    ceil_log2,
    get_challenge_pows,
    largest_even_below,
    log2_strict,
    max_usable_threads,
    optimal_sumcheck_threads,
    transpose,
)

FIELD = PrimeField(BN254_FR_MODULUS)


class _FixedTranscript:
    def __init__(self, value):
        self.value = value
        self.labels = []

    def append_and_sample(self, field, label):
        self.labels.append(label)
        return field.element(self.value)


@pytest.mark.parametrize("value", [0, 1, 5, 6, 13, 255])
def test_bit_decompose_round_trip(value):
    bits = bit_decompose(value, 8)
    assert len(bits) == 8
    assert sum(int(bit) << i for i, bit in enumerate(bits)) == value


def test_bit_decompose_truncates_high_bits():
    bits = bit_decompose(0b10110, 3)
    assert sum(int(bit) << i for i, bit in enumerate(bits)) == 0b110


@pytest.mark.parametrize("x", range(1, 70))
def test_ceil_log2_bounds(x):
    k = ceil_log2(x)
    assert 2**k >= x
    assert k == 0 or 2 ** (k - 1) < x


def test_ceil_log2_rejects_zero():
    with pytest.raises(ValueError):
        ceil_log2(0)


@pytest.mark.parametrize("k", range(0, 20))
def test_log2_strict_round_trip(k):
    assert log2_strict(2**k) == k


@pytest.mark.parametrize("x", [0, 3, 6, 12])
def test_log2_strict_rejects_non_powers(x):
    with pytest.raises(ValueError):
        log2_strict(x)


@pytest.mark.parametrize("n", range(0, 20))
def test_largest_even_below(n):
    result = largest_even_below(n)
    assert result % 2 == 0
    assert 0 <= n - result <= 1


def test_max_usable_threads_is_power_of_two():
    threads = max_usable_threads()
    assert threads >= 1
    assert threads & (threads - 1) == 0


@pytest.mark.parametrize("num_vars", [0, 1, 4])
def test_optimal_threads_small(num_vars):
    assert optimal_sumcheck_threads(num_vars) == 1


@pytest.mark.parametrize("num_vars", [5, 8, 20])
def test_optimal_threads_bounded(num_vars):
    threads = optimal_sumcheck_threads(num_vars)
    assert 1 <= threads <= max_usable_threads()
    assert threads & (threads - 1) == 0


def test_transpose_errors():
    with pytest.raises(ValueError):
        transpose([])
    with pytest.raises(ValueError):
        transpose([[1, 2], [3]])


def test_field_element_reduction_and_inverse():
    assert FIELD.element(-1) == BN254_FR_MODULUS - 1
    rng = random.Random(7)
    for _ in range(10):
        a = FIELD.random(rng)
        if a:
            assert a * FIELD.inverse(a) % FIELD.modulus == 1
    with pytest.raises(ZeroDivisionError):
        FIELD.inverse(BN254_FR_MODULUS)


def test_field_random_is_seeded_and_in_range():
    first = [FIELD.random(random.Random(3)) for _ in range(2)]
    assert first[0] == first[1]
    assert 0 <= first[0] < BN254_FR_MODULUS


def test_field_rejects_tiny_modulus():
    with pytest.raises(ValueError):
        PrimeField(1)


def test_distinct_bn254_fields():
    assert PrimeField(BN254_FQ_MODULUS).element(BN254_FR_MODULUS) == BN254_FR_MODULUS
    assert FIELD.element(BN254_FQ_MODULUS) == BN254_FQ_MODULUS - BN254_FR_MODULUS


def test_additive_vec_operations():
    zeros = AdditiveVec.zeros(FIELD, 3)
    assert zeros.values == [0, 0, 0]
    a = AdditiveVec(FIELD, [BN254_FR_MODULUS - 1, 2, 7])
    b = AdditiveVec(FIELD, [1, 3, 4])
    assert (a + b).values == [0, 5, 11]
    assert (a + zeros).values == a.values
    assert (b * 2).values == [2, 6, 8]
    assert (a * 0).values == [0, 0, 0]


def test_poly_meta_members_are_distinct():
    assert PolyMeta.NORMAL is not PolyMeta.PHASE2_ONLY
    assert PolyMeta("normal") is PolyMeta.NORMAL


def test_get_challenge_pows():
    transcript = _FixedTranscript(5)
    pows = get_challenge_pows(FIELD, 6, transcript)
    assert transcript.labels == [b"combine subset evals"]
    assert pows[0] == 1
    assert all(pows[i + 1] == pows[i] * 5 % FIELD.modulus for i in range(5))
    assert len(pows) == 6