"""
Smallest divisor count among waterfall numbers at or above n.

Used by the v step-size logic: any future v record-setter using exactly the
first k primes has tau at least min_tau(n, k), which bounds its v from above.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .primes import PrimeTable, get_prime_table
from .zaremba_math import primes_to_tau

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MinTauCandidate:
    """
    A possible candidate for min_tau. Both product and usable can be derived
    from exponents but are carried along, as the pruning logic computes them
    anyway.
    """
    # Exponents of the first k primes
    exponents: Tuple[int, ...]
    # Product of the first k primes raised to exponents
    product: int
    # Whether product is at least n. Unusable candidates are only surfaced
    # when fast=False, for testing.
    usable: bool


def min_tau_candidates(n: int, primes_k: int, fast: bool = True,
                       primes: Optional[PrimeTable] = None) -> Iterator[MinTauCandidate]:
    """
    Explore waterfall exponent vectors over the first primes_k primes,
    starting from all ones.

    From a vector reached by incrementing index i, only indices at or to the
    right of i may be incremented next (and only while the waterfall
    constraint holds), so every vector is generated exactly once. Exploration
    stops below any vector whose product is already at least n: anything
    above it is also at least n, but has more divisors.

    Args:
        n: The current record-setting input
        primes_k: Number of leading primes, each with exponent >= 1
        fast: Only yield usable candidates (product >= n)
    """
    if primes_k < 1:
        raise ValueError(f"primes_k must be at least 1, got {primes_k}")
    primes = primes or get_prime_table()
    k_primes = primes.first(primes_k)

    stack = [((1,) * primes_k, primes.primorial(primes_k), 0)]
    while stack:
        exponents, product, index = stack.pop()
        usable = product >= n
        if usable or not fast:
            yield MinTauCandidate(exponents, product, usable)
        if usable:
            continue

        # Reversed so that lower indices are explored first.
        for j in reversed(range(index, primes_k)):
            if j == 0 or exponents[j] < exponents[j - 1]:
                next_exponents = exponents[:j] + (exponents[j] + 1,) + exponents[j + 1:]
                stack.append((next_exponents, product * k_primes[j], j))


def min_tau(n: int, primes_k: int, primes: Optional[PrimeTable] = None) -> int:
    """
    Finds the smallest tau value of numbers meeting these criteria:

    - Waterfall number using exactly the first primes_k primes
    - Greater than or equal to n
    """
    usable = {c.exponents for c in min_tau_candidates(n, primes_k, fast=True, primes=primes)
              if c.usable}
    return min(primes_to_tau(exps) for exps in usable)
