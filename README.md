# sumcheck

Building blocks for the sumcheck protocol over a prime field. The package
covers multilinear extensions and virtual polynomials (sums of scaled
products of multilinear extensions). It computes the univariate round
polynomials and extrapolates them. It can also split a polynomial across
several workers and merge it back.

## Install

    pip install .

To run the tests:

    pip install .[test]
    pytest

## Modules

- `sumcheck.util`
  - `PrimeField(modulus)` has `element`, `inverse` and `random`. Field
    elements are plain ints reduced modulo the modulus.
  - `BN254_FQ_MODULUS` and `BN254_FR_MODULUS` are ready-made moduli.
  - `PolyMeta` has two members, `NORMAL` and `PHASE2_ONLY`.
  - `AdditiveVec` is a vector with element-wise `+` and scalar `*`.
  - Small helpers: `bit_decompose`, `ceil_log2`, `log2_strict`,
    `largest_even_below`, `transpose`, `max_usable_threads` (always 1) and
    `optimal_sumcheck_threads`.
  - `get_challenge_pows(field, size, transcript)` returns the first `size`
    powers of a challenge. The challenge comes from
    `transcript.append_and_sample(field, b"combine subset evals")`, so any
    object with that method can be passed as the transcript.
- `sumcheck.mle`
  - `DensePolynomial(field, evals)` is a multilinear extension given by its
    evaluations. The length must be a power of two, and bit `i` of an index
    is the value of variable `i`.
  - Its methods are `evaluate(point)` (the first coordinate is the lowest
    variable), `fix_low(r)`, `fix_low_mut(r)`, `chunks(count)` and
    `DensePolynomial.random(field, num_vars, rng)`.
  - `into_mle`, `into_mles` and `random_mle_list(field, nv, degree, rng)` are
    also here. `random_mle_list` returns the polynomials and the hypercube sum
    of their product.
- `sumcheck.kernel`
  - `product_round_evaluations(field, mles, poly_meta, expected_numvars_at_round, is_main_worker, phase2_numvar)`
    returns the values of one product's round polynomial at
    `0, 1, ..., len(mles)`.
  - The lowest variable is the round variable.
  - Products with fewer variables than the round expects are suffix-aligned.
    They are summed, and the sum is scaled by the size of the hypercube they
    do not cover.
- `sumcheck.extrapolate`
  - `extrapolate_uni_poly(field, evals, eval_at)` evaluates a polynomial of
    degree 1 to 6, given its values at `0..d`.
  - `extrapolate_from_table(field, values, start)` fills `values[start:]` in
    place. It uses cached barycentric weights: `ExtrapolationTable`,
    `get_extrapolation_table` and `warm_up`.
- `sumcheck.virtual_poly`
  - `Term`, `MonomialTerms`, `VPAuxInfo` and `VirtualPolynomial` are the
    polynomial types. `VirtualPolynomial` has `new_from_mle`,
    `new_from_product`, `add_mle_list`, `mul_by_mle`, `add_monomial_terms`,
    `evaluate`, `as_view`, `print_evals` and `random`.
  - The `eq(x, r)` table builders are `build_eq_x_r_vec`,
    `build_eq_x_r_vec_sequential`, their `_with_scalar` variants,
    `build_eq_x_r` and `build_eq_x_r_sequential`. `eq_eval` evaluates
    `eq(x, y)`.
- `sumcheck.virtual_polys`
  - `VirtualPolynomials` holds one virtual polynomial per worker. MLEs with
    more than `log2(num_threads)` variables are split into chunks (`NORMAL`).
    Smaller ones are copied to every worker (`PHASE2_ONLY`).
  - `VirtualPolynomialsBuilder` assigns witness ids to MLEs.
  - `merge_sumcheck_polys` joins per-worker polynomials into one.

## Example: running sumcheck rounds by hand

```python
import random

from sumcheck.util import BN254_FR_MODULUS, PolyMeta, PrimeField
from sumcheck.mle import random_mle_list
from sumcheck.kernel import product_round_evaluations
from sumcheck.extrapolate import extrapolate_uni_poly

field = PrimeField(BN254_FR_MODULUS)
rng = random.Random(0)
p = field.modulus

mles, total = random_mle_list(field, 4, 3, rng)
evals = product_round_evaluations(field, mles, PolyMeta.NORMAL, 4, True, None)
assert (evals[0] + evals[1]) % p == total

r = field.random(rng)
claim = extrapolate_uni_poly(field, evals, r)
folded = [mle.fix_low(r) for mle in mles]
next_evals = product_round_evaluations(field, folded, PolyMeta.NORMAL, 3, True, None)
assert (next_evals[0] + next_evals[1]) % p == claim
```

## Example: splitting across workers

```python
from sumcheck.virtual_polys import VirtualPolynomials, merge_sumcheck_polys

terms, asserted_sum = VirtualPolynomials.random_monomials(field, [1, 2, 3, 4], (2, 3), 1, rng)
polys = VirtualPolynomials.new_from_monomials(field, 2, 4, terms)
point = [field.random(rng) for _ in range(4)]
value = polys.evaluate_slow(point)

workers, metas = polys.get_batched_polys()
merged = merge_sumcheck_polys(workers, metas)
```

## What the package does not do

There is no complete protocol driver. The package has no Fiat–Shamir
transcript, no prover state that runs all rounds, no proof or sub-claim
types and no verifier. To run a sumcheck, the caller drives the rounds
itself with `product_round_evaluations`, `fix_low` / `fix_low_mut` and
`extrapolate_uni_poly`, as in the first example. There is no command-line
tool.