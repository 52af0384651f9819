"""Virtual polynomials split across sum-check workers, and merging them back."""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .mle import DensePolynomial, random_mle_list
from .util import PolyMeta, PrimeField, _iter_product, ceil_log2, log2_strict
from .virtual_poly import MonomialTerms, Term, VirtualPolynomial


class VirtualPolynomialsBuilder:
    """Assigns witness ids to multilinear extensions and builds ``VirtualPolynomials``.

    The same polynomial object lifted twice keeps the same witness id.
    """

    def __init__(self, field: PrimeField, num_threads: int, max_num_variables: int) -> None:
        self.field = field
        self.num_threads = num_threads
        self.max_num_variables = max_num_variables
        self._registry: Dict[int, Tuple[int, DensePolynomial]] = {}

    @classmethod
    def new_with_mles(
        cls,
        field: PrimeField,
        num_threads: int,
        max_num_variables: int,
        mles: Iterable[DensePolynomial],
    ) -> "VirtualPolynomialsBuilder":
        builder = cls(field, num_threads, max_num_variables)
        for mle in mles:
            builder.lift(mle)
        return builder

    def lift(self, mle: DensePolynomial) -> int:
        """Return the witness id of ``mle``, assigning the next free one on first use."""
        key = id(mle)
        entry = self._registry.get(key)
        if entry is None:
            entry = (len(self._registry), mle)
            self._registry[key] = entry
        return entry[0]

    def to_virtual_polys(self, terms: Iterable[Term[int]]) -> "VirtualPolynomials":
        """Build the polynomial from terms whose products are lifted witness ids."""
        mles = [mle for _, mle in sorted(self._registry.values(), key=lambda e: e[0])]
        virtual_polys = VirtualPolynomials(self.field, self.num_threads, self.max_num_variables)
        virtual_polys.register_mles(mles)
        virtual_polys.add_monomial_terms(terms)
        return virtual_polys


class VirtualPolynomials:
    """One virtual polynomial per worker.

    Large MLEs are split into consecutive chunks, one per worker (``NORMAL``);
    MLEs with at most ``log2(num_threads)`` variables are copied to every
    worker and handled in phase 2 (``PHASE2_ONLY``).
    """

    def __init__(self, field: PrimeField, num_threads: int, max_num_variables: int) -> None:
        if num_threads <= 0:
            raise ValueError("num_threads must be positive")
        self.field = field
        self.num_threads = num_threads
        per_thread_vars = max_num_variables - ceil_log2(num_threads)
        self.polys: List[VirtualPolynomial] = [
            VirtualPolynomial(field, per_thread_vars) for _ in range(num_threads)
        ]
        self.poly_meta: Dict[int, PolyMeta] = {}

    @classmethod
    def new_from_monomials(
        cls,
        field: PrimeField,
        num_threads: int,
        max_num_variables: int,
        monomials: Sequence[Term[DensePolynomial]],
    ) -> "VirtualPolynomials":
        """Build from terms whose products are the multilinear extensions themselves."""
        monomials = list(monomials)
        if not monomials:
            raise ValueError("monomials must not be empty")
        poly = cls(field, num_threads, max_num_variables)
        for term in monomials:
            product = list(term.product)
            if len({mle.num_vars() for mle in product}) > 1:
                raise ValueError("all product must got same num_vars")
            indexes = [poly.register_mles([mle])[0] for mle in product]
            poly.add_monomial_terms([Term(term.scalar, indexes)])
        return poly

    def register_mles(self, mles: Iterable[DensePolynomial]) -> List[int]:
        """Distribute each MLE to the workers and return its index (equal on every worker)."""
        log2_num_threads = log2_strict(self.num_threads)
        indexes: List[int] = []
        for mle in mles:
            if mle.num_vars() > log2_num_threads:
                meta = PolyMeta.NORMAL
                parts = mle.chunks(self.num_threads)
            else:
                meta = PolyMeta.PHASE2_ONLY
                parts = [DensePolynomial(mle.field, mle.evals) for _ in range(self.num_threads)]
            registered = [poly.register_mle(part) for poly, part in zip(self.polys, parts)]
            index = registered[0]
            self.poly_meta[index] = meta
            indexes.append(index)
        return indexes

    def add_monomial_terms(self, terms: Iterable[Term[int]]) -> None:
        """Add one group of index-based terms to every worker's polynomial."""
        terms = list(terms)
        for poly in self.polys:
            poly.add_monomial_terms(Term(t.scalar, list(t.product)) for t in terms)

    def as_view(self) -> "VirtualPolynomials":
        """A copy whose MLEs can be folded without touching this one."""
        view = object.__new__(type(self))
        view.field = self.field
        view.num_threads = self.num_threads
        view.polys = [poly.as_view() for poly in self.polys]
        view.poly_meta = dict(self.poly_meta)
        return view

    def get_batched_polys(self) -> Tuple[List[VirtualPolynomial], List[PolyMeta]]:
        """The per-worker polynomials and the meta of every MLE index."""
        metas = [PolyMeta.NORMAL] * len(self.polys[0].flattened_ml_extensions)
        for index, meta in self.poly_meta.items():
            metas[index] = meta
        return list(self.polys), metas

    def degree(self) -> int:
        degrees = {poly.aux_info.max_degree for poly in self.polys}
        if len(degrees) > 1:
            raise ValueError("workers disagree on the degree")
        return self.polys[0].aux_info.max_degree if self.polys else 0

    def evaluate_slow(self, point: Sequence[int]) -> int:
        """Evaluate the undistributed polynomial; smaller MLEs use the trailing coordinates."""
        point = list(point)
        p = self.field.modulus
        first = self.polys[0]
        evals: List[int] = []
        for index in range(len(first.flattened_ml_extensions)):
            meta = self.poly_meta[index]
            if meta is PolyMeta.NORMAL:
                values: List[int] = []
                for poly in self.polys:
                    values.extend(poly.flattened_ml_extensions[index].evals)
                mle = DensePolynomial(self.field, values)
            else:
                mle = first.flattened_ml_extensions[index]
            num_vars = mle.num_vars()
            if num_vars > len(point):
                raise ValueError(f"point has {len(point)} coordinates, need {num_vars}")
            evals.append(mle.evaluate(point[len(point) - num_vars:]))
        total = 0
        for group in first.products:
            for term in group.terms:
                total += _iter_product((evals[i] for i in term.product), p) * term.scalar
        return total % p

    @staticmethod
    def random_monomials(
        field: PrimeField,
        nv: Sequence[int],
        num_multiplicands_range: Tuple[int, int],
        num_products: int,
        rng: random.Random,
    ) -> Tuple[List[Term[DensePolynomial]], int]:
        """Sample random terms and their sum over the largest hypercube."""
        p = field.modulus
        max_num_variables = max(nv)
        low, high = num_multiplicands_range
        terms: List[Term[DensePolynomial]] = []
        total = 0
        for num_vars in nv:
            for _ in range(num_products):
                num_multiplicands = rng.randrange(low, high)
                product, product_sum = random_mle_list(field, num_vars, num_multiplicands, rng)
                scalar = field.random(rng)
                terms.append(Term(scalar, product))
                # Smaller polynomials repeat over the variables they do not cover.
                total = (total + (1 << (max_num_variables - num_vars)) * product_sum * scalar) % p
        return terms, total


def merge_sumcheck_polys(
    virtual_polys: Sequence[VirtualPolynomial],
    poly_meta: Optional[Sequence[PolyMeta]] = None,
) -> VirtualPolynomial:
    """Merge the per-worker polynomials into one whose MLEs cover all workers."""
    virtual_polys = list(virtual_polys)
    if not virtual_polys:
        raise ValueError("nothing to merge")
    log2_poly_len = log2_strict(len(virtual_polys))
    first = virtual_polys[0]
    mles = first.flattened_ml_extensions
    metas = list(poly_meta) if poly_meta is not None else [PolyMeta.NORMAL] * len(mles)
    if len(metas) != len(mles):
        raise ValueError("poly_meta must have one entry per multilinear extension")
    if not mles:
        raise ValueError("no multilinear extensions to merge")

    normal_vars = {mle.num_vars() for mle, meta in zip(mles, metas) if meta is PolyMeta.NORMAL}
    if len(normal_vars) > 1:
        raise ValueError("all NORMAL polynomials must have the same number of variables")
    if normal_vars:
        merged_num_vars = normal_vars.pop() + log2_poly_len
    else:
        merged_num_vars = max(mle.num_vars() for mle in mles)

    field = first.field
    merged = VirtualPolynomial(field, max(0, merged_num_vars))
    for index, (mle, meta) in enumerate(zip(mles, metas)):
        if meta is PolyMeta.NORMAL:
            values: List[int] = []
            for poly in virtual_polys:
                values.extend(poly.flattened_ml_extensions[index].evals)
        else:
            if mle.num_vars() > log2_poly_len:
                raise ValueError("a phase-2 polynomial has too many variables")
            blowup = 1 << (merged_num_vars - mle.num_vars())
            values = [value for value in mle.evals for _ in range(blowup)]
        merged.register_mle(DensePolynomial(field, values))
    for group in first.products:
        merged.add_monomial_terms(Term(t.scalar, list(t.product)) for t in group.terms)
    merged.aux_info.max_degree = first.aux_info.max_degree
    return merged


__all__ = [
    "MonomialTerms",
    "VirtualPolynomials",
    "VirtualPolynomialsBuilder",
    "merge_sumcheck_polys",
]