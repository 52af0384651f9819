"""Dense multilinear extensions stored by their evaluations on the boolean hypercube."""

from __future__ import annotations

import random
from typing import Iterable, List, Sequence, Tuple

from .util import PrimeField, log2_strict


def _fold_low(evals: Sequence[int], r: int, modulus: int) -> List[int]:
    return [
        (lo + r * (hi - lo)) % modulus
        for lo, hi in zip(evals[0::2], evals[1::2])
    ]


class DensePolynomial:
    """A multilinear polynomial; bit i of an index is the value of variable i."""

    __slots__ = ("field", "evals")

    def __init__(self, field: PrimeField, evals: Iterable[int]) -> None:
        values = [field.element(v) for v in evals]
        if not values or len(values) & (len(values) - 1):
            raise ValueError(
                f"number of evaluations must be a power of two, got {len(values)}"
            )
        self.field = field
        self.evals = values

    def __len__(self) -> int:
        return len(self.evals)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DensePolynomial):
            return NotImplemented
        return self.field == other.field and self.evals == other.evals

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"DensePolynomial(num_vars={self.num_vars()}, evals={self.evals!r})"

    def num_vars(self) -> int:
        return log2_strict(len(self.evals))

    def evaluate(self, point: Sequence[int]) -> int:
        """Evaluate at ``point``, whose first coordinate is the lowest variable."""
        point = list(point)
        if len(point) != self.num_vars():
            raise ValueError(
                f"wrong number of variables {len(point)} vs {self.num_vars()}"
            )
        evals: Sequence[int] = self.evals
        for r in point:
            evals = _fold_low(evals, r, self.field.modulus)
        return evals[0]

    def fix_low(self, r: int) -> "DensePolynomial":
        """Return a new polynomial with the lowest variable bound to ``r``."""
        if self.num_vars() == 0:
            raise ValueError("cannot fix a variable of a constant polynomial")
        return DensePolynomial(self.field, _fold_low(self.evals, r, self.field.modulus))

    def fix_low_mut(self, r: int) -> None:
        """Bind the lowest variable to ``r`` in place."""
        if self.num_vars() == 0:
            raise ValueError("cannot fix a variable of a constant polynomial")
        self.evals = _fold_low(self.evals, r, self.field.modulus)

    def chunks(self, count: int) -> List["DensePolynomial"]:
        """Split into ``count`` consecutive polynomials over the low variables."""
        log2_strict(count)
        if count > len(self.evals):
            raise ValueError(f"cannot split {len(self.evals)} evaluations into {count} chunks")
        size = len(self.evals) // count
        return [
            DensePolynomial(self.field, self.evals[start:start + size])
            for start in range(0, len(self.evals), size)
        ]

    @classmethod
    def random(
        cls, field: PrimeField, num_vars: int, rng: random.Random
    ) -> "DensePolynomial":
        return cls(field, [field.random(rng) for _ in range(1 << num_vars)])


def into_mle(field: PrimeField, values: Sequence[int]) -> DensePolynomial:
    """Wrap a power-of-two length list of evaluations as a polynomial."""
    if not values or len(values) & (len(values) - 1):
        raise ValueError(f"{len(values)}")
    return DensePolynomial(field, values)


def into_mles(field: PrimeField, rows: Iterable[Sequence[int]]) -> List[DensePolynomial]:
    return [into_mle(field, row) for row in rows]


def random_mle_list(
    field: PrimeField, nv: int, degree: int, rng: random.Random
) -> Tuple[List[DensePolynomial], int]:
    """Sample ``degree`` random polynomials and the hypercube sum of their product."""
    p = field.modulus
    multiplicands: List[List[int]] = [[] for _ in range(degree)]
    total = 0
    for _ in range(1 << nv):
        product = 1
        for column in multiplicands:
            value = field.random(rng)
            column.append(value)
            product = product * value % p
        total = (total + product) % p
    return [DensePolynomial(field, column) for column in multiplicands], total