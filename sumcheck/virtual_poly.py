"""Virtual polynomials: sums of scaled products of multilinear extensions."""

from __future__ import annotations

import random
from dataclasses import dataclass, field as dataclass_field
from typing import Dict, Generic, Iterable, List, Sequence, Tuple, TypeVar

from .mle import DensePolynomial, random_mle_list
from .util import PrimeField, _iter_product, bit_decompose, max_usable_threads

P = TypeVar("P")


@dataclass
class Term(Generic[P]):
    """A scalar times the product of the listed multiplicands."""

    scalar: int
    product: List[P]


@dataclass
class MonomialTerms:
    """A group of terms whose products hold indices into the MLE storage."""

    terms: List[Term[int]] = dataclass_field(default_factory=list)


@dataclass
class VPAuxInfo:
    """Degree and variable count of a virtual polynomial."""

    max_degree: int = 0
    max_num_variables: int = 0


class VirtualPolynomial:
    """A sum of products of multilinear extensions.

    ``f = c0 * f0 * f1 * f2 + c1 * f3 * f4`` stores ``f0 .. f4`` in
    ``flattened_ml_extensions`` and the products as index lists
    ``[(c0, [0, 1, 2]), (c1, [3, 4])]``.
    """

    def __init__(self, field: PrimeField, max_num_variables: int) -> None:
        self.field = field
        self.aux_info = VPAuxInfo(max_degree=0, max_num_variables=max_num_variables)
        self.products: List[MonomialTerms] = []
        self.flattened_ml_extensions: List[DensePolynomial] = []
        self._lookup: Dict[int, int] = {}

    @classmethod
    def new_from_mle(cls, mle: DensePolynomial, scalar: int) -> "VirtualPolynomial":
        return cls.new_from_product([mle], scalar)

    @classmethod
    def new_from_product(
        cls, mles: Sequence[DensePolynomial], scalar: int
    ) -> "VirtualPolynomial":
        mles = list(mles)
        if not mles:
            raise ValueError("a product needs at least one multilinear extension")
        if len({mle.num_vars() for mle in mles}) != 1:
            raise ValueError("all product must got same num_vars")
        poly = cls(mles[0].field, mles[0].num_vars())
        indexes = [poly.register_mle(mle) for mle in mles]
        poly.add_monomial_terms([Term(scalar, indexes)])
        return poly

    def register_mle(self, mle: DensePolynomial) -> int:
        """Store ``mle`` and return its index; the same object may be stored once only."""
        key = id(mle)
        if key in self._lookup:
            raise ValueError(f"duplicate mle registration: {key}")
        index = len(self.flattened_ml_extensions)
        self.flattened_ml_extensions.append(mle)
        self._lookup[key] = index
        return index

    def add_mle_list(self, product: Iterable[DensePolynomial], scalar: int) -> None:
        """Add ``scalar * prod(product)``, registering every multiplicand."""
        indexes = [self.register_mle(mle) for mle in product]
        self.add_monomial_terms([Term(scalar, indexes)])

    def mul_by_mle(self, mle: DensePolynomial, coefficient: int) -> None:
        """Multiply every term by ``coefficient * mle``."""
        if mle.num_vars() != self.aux_info.max_num_variables:
            raise ValueError(
                "product has a multiplicand with wrong number of variables "
                f"{mle.num_vars()} vs {self.aux_info.max_num_variables}"
            )
        owned = DensePolynomial(mle.field, mle.evals)
        index = self.register_mle(owned)
        p = self.field.modulus
        for group in self.products:
            for term in group.terms:
                term.scalar = term.scalar * coefficient % p
                term.product.append(index)
        self.aux_info.max_degree += 1

    def add_monomial_terms(self, terms: Iterable[Term[int]]) -> None:
        """Add a group of terms whose products are indices of registered MLEs."""
        indexed: List[Term[int]] = []
        for term in terms:
            product = list(term.product)
            if not product:
                raise ValueError(f"some term product is empty scalar {term.scalar}")
            for witness in product:
                if isinstance(witness, bool) or not isinstance(witness, int):
                    raise TypeError(f"unsupported multiplicand {witness!r}")
            num_vars = {self.flattened_ml_extensions[i].num_vars() for i in product}
            if len(num_vars) != 1:
                raise ValueError("all multiplicands of a term must have the same num_vars")
            self.aux_info.max_degree = max(self.aux_info.max_degree, len(product))
            indexed.append(Term(self.field.element(term.scalar), product))
        self.products.append(MonomialTerms(indexed))

    def evaluate(self, point: Sequence[int]) -> int:
        """Evaluate at ``point``; smaller MLEs use its leading coordinates."""
        point = list(point)
        if len(point) != self.aux_info.max_num_variables:
            raise ValueError(
                f"wrong number of variables {self.aux_info.max_num_variables} "
                f"vs {len(point)}"
            )
        p = self.field.modulus
        evals = [mle.evaluate(point[: mle.num_vars()]) for mle in self.flattened_ml_extensions]
        total = 0
        for group in self.products:
            for term in group.terms:
                total += _iter_product((evals[i] for i in term.product), p) * term.scalar
        return total % p

    def as_view(self) -> "VirtualPolynomial":
        """A structurally identical polynomial whose MLEs can be folded independently."""
        view = VirtualPolynomial(self.field, self.aux_info.max_num_variables)
        view.aux_info = VPAuxInfo(
            self.aux_info.max_degree, self.aux_info.max_num_variables
        )
        view.products = [
            MonomialTerms([Term(t.scalar, list(t.product)) for t in group.terms])
            for group in self.products
        ]
        for mle in self.flattened_ml_extensions:
            view.register_mle(DensePolynomial(mle.field, mle.evals))
        return view

    def print_evals(self) -> None:
        """Print the value at every hypercube point; limited to 5 variables."""
        num_vars = self.aux_info.max_num_variables
        if num_vars > 5:
            raise ValueError("cannot print evaluations of more than 5 variables")
        for i in range(1 << num_vars):
            point = [int(bit) for bit in bit_decompose(i, num_vars)]
            print(i, self.evaluate(point))
        print()

    @classmethod
    def random(
        cls,
        field: PrimeField,
        nv: Sequence[int],
        num_multiplicands_range: Tuple[int, int],
        num_products: int,
        rng: random.Random,
    ) -> Tuple["VirtualPolynomial", int]:
        """Sample a random virtual polynomial and its sum over the hypercube."""
        p = field.modulus
        total = 0
        poly = cls(field, max(nv))
        low, high = num_multiplicands_range
        for num_vars in nv:
            for _ in range(num_products):
                num_multiplicands = rng.randrange(low, high)
                product, product_sum = random_mle_list(field, num_vars, num_multiplicands, rng)
                indexes = [poly.register_mle(mle) for mle in product]
                scalar = field.random(rng)
                poly.add_monomial_terms([Term(scalar, indexes)])
                total = (total + product_sum * scalar) % p
        return poly, total


def eq_eval(field: PrimeField, x: Sequence[int], y: Sequence[int]) -> int:
    """Evaluate eq(x, y) = prod_i (x_i y_i + (1 - x_i)(1 - y_i))."""
    if len(x) != len(y):
        raise ValueError("x and y have different length")
    p = field.modulus
    result = 1
    for xi, yi in zip(x, y):
        xy = xi * yi
        result = result * (2 * xy - xi - yi + 1) % p
    return result


def build_eq_x_r_vec_sequential_with_scalar(
    field: PrimeField, r: Sequence[int], scalar: int
) -> List[int]:
    """Evaluations of ``scalar * eq(x, r)`` over x in {0,1}^len(r); bit i of x pairs with r_i."""
    p = field.modulus
    evals = [field.element(scalar)]
    for ri in reversed(r):
        grown: List[int] = []
        for value in evals:
            high = ri * value % p
            grown.append((value - high) % p)
            grown.append(high)
        evals = grown
    return evals


def build_eq_x_r_vec_sequential(field: PrimeField, r: Sequence[int]) -> List[int]:
    return build_eq_x_r_vec_sequential_with_scalar(field, r, 1)


def build_eq_x_r_sequential(field: PrimeField, r: Sequence[int]) -> DensePolynomial:
    return DensePolynomial(field, build_eq_x_r_vec_sequential(field, r))


def build_eq_x_r_vec_with_scalar(
    field: PrimeField, r: Sequence[int], scalar: int
) -> List[int]:
    """Same as the sequential builder, computed as one block per worker.

    eq(x, r) = eq(x_lo, r_lo) * eq(x_hi, r_hi): every block of the result is
    the low-part table scaled by one entry of the high-part table.
    """
    r = list(r)
    if not r:
        return [field.element(scalar)]
    nbits = max_usable_threads().bit_length() - 1
    if len(r) < nbits:
        return build_eq_x_r_vec_sequential_with_scalar(field, r, scalar)
    split = len(r) - nbits
    high_table = build_eq_x_r_vec_sequential_with_scalar(field, r[split:], scalar)
    result: List[int] = []
    for block_scalar in high_table:
        result.extend(build_eq_x_r_vec_sequential_with_scalar(field, r[:split], block_scalar))
    return result


def build_eq_x_r_vec(field: PrimeField, r: Sequence[int]) -> List[int]:
    return build_eq_x_r_vec_with_scalar(field, r, 1)


def build_eq_x_r(field: PrimeField, r: Sequence[int]) -> DensePolynomial:
    return DensePolynomial(field, build_eq_x_r_vec(field, r))