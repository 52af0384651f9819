"""Per-round univariate evaluations of a single product of multilinear extensions."""

from __future__ import annotations

from typing import List, Optional, Sequence

from .mle import DensePolynomial
from .util import PolyMeta, PrimeField, _iter_product, ceil_log2, largest_even_below


def _saturating_sub(a: int, b: int) -> int:
    return max(a - b, 0)


def _hypercube_sum(columns: Sequence[Sequence[int]], modulus: int) -> int:
    limit = largest_even_below(len(columns[0]))
    return sum(
        _iter_product((column[b] for column in columns), modulus) for b in range(limit)
    ) % modulus


def product_round_evaluations(
    field: PrimeField,
    mles: Sequence[DensePolynomial],
    poly_meta: PolyMeta,
    expected_numvars_at_round: int,
    is_main_worker: bool,
    phase2_numvar: Optional[int],
) -> List[int]:
    """Evaluate the round polynomial of ``prod(mles)`` at ``0, 1, ..., len(mles)``.

    The lowest variable is the round variable and the remaining ones are summed
    over the boolean hypercube. Polynomials with fewer variables than the round
    expects are suffix-aligned: their full sum is scaled by the hypercube size
    they do not cover and repeated for every evaluation point.
    """
    if not mles:
        raise ValueError("a product needs at least one multilinear extension")
    columns = [mle.evals for mle in mles]
    length = len(columns[0])
    if any(len(column) != length for column in columns):
        raise ValueError("all multiplicands of a product must have the same size")

    p = field.modulus
    width = len(mles) + 1
    num_var = ceil_log2(length)

    if poly_meta is PolyMeta.PHASE2_ONLY:
        # Only the main worker accounts for phase-2 polynomials, to avoid double counting.
        if not is_main_worker:
            return [0] * width
        total = _hypercube_sum(columns, p)
        multiplicity = _saturating_sub(
            _saturating_sub(expected_numvars_at_round + (phase2_numvar or 0), 1),
            num_var,
        )
        return [total * (1 << multiplicity) % p] * width

    if num_var < expected_numvars_at_round:
        total = _hypercube_sum(columns, p)
        multiplicity = _saturating_sub(
            _saturating_sub(expected_numvars_at_round, 1), num_var
        )
        return [total * (1 << multiplicity) % p] * width

    if length == 1:
        return [_iter_product((column[0] for column in columns), p)] * width

    sums = [0] * width
    for b in range(0, largest_even_below(length), 2):
        lines = [(column[b], column[b + 1] - column[b]) for column in columns]
        for x in range(width):
            sums[x] += _iter_product((lo + x * slope for lo, slope in lines), p)
    return [value % p for value in sums]