"""Prime-field arithmetic and small helpers shared by the sum-check modules."""

from __future__ import annotations

import enum
import random
from dataclasses import dataclass
from typing import Iterable, List, Protocol, Sequence, TypeVar

T = TypeVar("T")

BN254_FQ_MODULUS = (
    21888242871839275222246405745257275088696311157297823662689037894645226208583
)
BN254_FR_MODULUS = (
    21888242871839275222246405745257275088548364400416034343698204186575808495617
)


@dataclass(frozen=True)
class PrimeField:
    """A prime field whose elements are plain ints reduced modulo ``modulus``."""

    modulus: int

    def __post_init__(self) -> None:
        if self.modulus < 2:
            raise ValueError(f"modulus must be at least 2, got {self.modulus}")

    def element(self, value: int) -> int:
        """Reduce an integer into the canonical range of the field."""
        return value % self.modulus

    def inverse(self, value: int) -> int:
        """Multiplicative inverse; raises ZeroDivisionError for zero."""
        value %= self.modulus
        if value == 0:
            raise ZeroDivisionError("zero has no multiplicative inverse")
        return pow(value, -1, self.modulus)

    def random(self, rng: random.Random) -> int:
        """Sample a uniformly random field element."""
        return rng.randrange(self.modulus)


class PolyMeta(enum.Enum):
    """How a multilinear extension is distributed across sum-check workers."""

    NORMAL = "normal"
    PHASE2_ONLY = "phase2_only"


@dataclass
class AdditiveVec:
    """A vector of field elements supporting element-wise addition and scaling."""

    field: PrimeField
    values: List[int]

    @classmethod
    def zeros(cls, field: PrimeField, length: int) -> "AdditiveVec":
        return cls(field, [0] * length)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self):
        return iter(self.values)

    def __getitem__(self, index):
        return self.values[index]

    def __add__(self, other: "AdditiveVec") -> "AdditiveVec":
        p = self.field.modulus
        summed = [(a + b) % p for a, b in zip(self.values, other.values)]
        # Entries beyond the shorter operand keep their own value.
        summed.extend(self.values[len(summed):])
        return AdditiveVec(self.field, summed)

    def __mul__(self, scalar: int) -> "AdditiveVec":
        p = self.field.modulus
        return AdditiveVec(self.field, [v * scalar % p for v in self.values])


class _ChallengeSource(Protocol):
    def append_and_sample(self, field: PrimeField, label: bytes) -> int: ...


def bit_decompose(value: int, num_var: int) -> List[bool]:
    """Little-endian binary decomposition of ``value`` into ``num_var`` bits."""
    return [bool((value >> i) & 1) for i in range(num_var)]


def ceil_log2(x: int) -> int:
    """Ceiling of log2(x) for positive x."""
    if x <= 0:
        raise ValueError("ceil_log2: x must be positive")
    return (x - 1).bit_length()


def log2_strict(x: int) -> int:
    """log2 of x; raises ValueError unless x is a power of two."""
    if x <= 0 or x & (x - 1):
        raise ValueError("log2_strict: x must be a power of two")
    return x.bit_length() - 1


def largest_even_below(n: int) -> int:
    """n itself if even, otherwise n - 1 (never below zero)."""
    return n if n % 2 == 0 else max(n - 1, 0)


def max_usable_threads() -> int:
    """Largest power of two of usable workers; work here runs on one thread."""
    return 1


def transpose(rows: Sequence[Sequence[T]]) -> List[List[T]]:
    """Transpose a non-empty 2D sequence; every row must be at least as long as the first."""
    if not rows:
        raise ValueError("transpose: input must not be empty")
    width = len(rows[0])
    if any(len(row) < width for row in rows):
        raise ValueError("transpose: a row is shorter than the first row")
    return [list(column) for column in zip(*(row[:width] for row in rows))]


def optimal_sumcheck_threads(num_vars: int) -> int:
    """Thread count for a sum-check so that each thread keeps at least 4 variables."""
    min_numvar_per_thread = 4
    if num_vars <= min_numvar_per_thread:
        return 1
    return min(1 << (num_vars - min_numvar_per_thread), max_usable_threads())


def get_challenge_pows(
    field: PrimeField, size: int, transcript: _ChallengeSource
) -> List[int]:
    """Sample a challenge from the transcript and return its first ``size`` powers."""
    alpha = transcript.append_and_sample(field, b"combine subset evals")
    powers: List[int] = []
    current = 1 % field.modulus
    for _ in range(size):
        powers.append(current)
        current = current * alpha % field.modulus
    return powers


def _iter_product(values: Iterable[int], modulus: int) -> int:
    result = 1
    for value in values:
        result = result * value % modulus
    return result