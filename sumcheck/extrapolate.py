"""Extrapolation of univariate polynomials given by values at 0, 1, ..., d."""

from __future__ import annotations

import threading
from typing import Dict, List, MutableSequence, Sequence, Tuple

from .util import PrimeField

_MAX_DIRECT_DEGREE = 6


def _barycentric_weights(field: PrimeField, degree: int) -> List[int]:
    """w_j = 1 / prod_{i != j} (j - i) for the nodes 0..degree."""
    p = field.modulus
    weights: List[int] = []
    for j in range(degree + 1):
        denominator = 1
        for i in range(degree + 1):
            if i != j:
                denominator = denominator * (j - i) % p
        weights.append(field.inverse(denominator))
    return weights


class ExtrapolationTable:
    """Normalised barycentric coefficients for extrapolating without runtime inverses.

    ``weights[d - min_degree][z - d - 1][j]`` is the coefficient of ``f(j)`` when a
    polynomial of degree ``d`` known at ``0..d`` is extrapolated to ``z``, for
    ``d + 1 <= z <= max_degree``.
    """

    def __init__(self, field: PrimeField, min_degree: int, max_degree: int) -> None:
        self.field = field
        self.min_degree = min_degree
        self.max_degree = max_degree
        p = field.modulus
        self.weights: List[List[List[int]]] = []
        for degree in range(min_degree, max_degree + 1):
            bary = _barycentric_weights(field, degree)
            degree_weights: List[List[int]] = []
            for z in range(degree + 1, max_degree + 1):
                terms = [w * field.inverse(z - j) % p for j, w in enumerate(bary)]
                inv_den = field.inverse(sum(terms) % p)
                degree_weights.append([t * inv_den % p for t in terms])
            self.weights.append(degree_weights)


_CACHE: Dict[Tuple[PrimeField, int, int], ExtrapolationTable] = {}
_CACHE_LOCK = threading.Lock()


def get_extrapolation_table(
    field: PrimeField, min_degree: int, max_degree: int
) -> ExtrapolationTable:
    """Return the cached table for ``(field, min_degree, max_degree)``, building it once."""
    key = (field, min_degree, max_degree)
    with _CACHE_LOCK:
        table = _CACHE.get(key)
        if table is None:
            table = ExtrapolationTable(field, min_degree, max_degree)
            _CACHE[key] = table
        return table


def warm_up(field: PrimeField, max_degree: int) -> None:
    """Build every table with ``1 <= min < max <= max_degree``."""
    if max_degree < 2:
        raise ValueError("max_degree must be at least 2")
    for high in range(2, max_degree + 1):
        for low in range(1, high):
            get_extrapolation_table(field, low, high)


def extrapolate_from_table(
    field: PrimeField, values: MutableSequence[int], start: int
) -> None:
    """Fill ``values[start:]`` in place from the known values ``values[:start]``.

    The known values are evaluations at ``0 .. start - 1`` of a polynomial of
    degree ``start - 1``; the rest are written at ``start .. len(values) - 1``.
    """
    if start <= 0:
        raise ValueError("start must be > 0 to define a degree")
    target_len = len(values)
    if target_len <= start:
        raise ValueError("no extrapolation needed if target_len <= start")
    table = get_extrapolation_table(field, start - 1, target_len - 1)
    known = list(values[:start])
    p = field.modulus
    for offset, weights in enumerate(table.weights[0]):
        values[start + offset] = sum(w * x for w, x in zip(weights, known)) % p


def extrapolate_uni_poly(field: PrimeField, evals: Sequence[int], eval_at: int) -> int:
    """Evaluate at ``eval_at`` the polynomial whose values at ``0..len(evals)-1`` are given.

    Supports degrees 1 to 6. ``eval_at`` must not be one of the nodes.
    """
    degree = len(evals) - 1
    if not 1 <= degree <= _MAX_DIRECT_DEGREE:
        raise ValueError(f"extrapolation for degree {degree} is not supported")
    p = field.modulus
    eval_at = field.element(eval_at)
    diffs = [(eval_at - j) % p for j in range(degree + 1)]
    scale = 1
    for d in diffs:
        scale = scale * d % p
    weights = _barycentric_weights(field, degree)
    total = 0
    for w, value, d in zip(weights, evals, diffs):
        total += w * value % p * field.inverse(d)
    return scale * total % p