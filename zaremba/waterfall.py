"""
Waterfall numbers (OEIS A025487): representation, enumeration and factoring.

Where p_i are the consecutive primes starting with p_1 = 2, and n has prime
factorization p_1^a_1 * p_2^a_2 * ... * p_k^a_k, n is a waterfall number if
a_1 >= a_2 >= ... >= a_k. Simply put, there are no gaps in the prime
factorization and the exponents are non-ascending. For example,
10080 = (2^5)(3^2)(5^1)(7^1).

Every waterfall number is also a product of primorials, and any list of
non-negative primorial exponents describes a waterfall number. The
enumerator therefore searches in primorial-exponent space, where no ordering
constraint has to be checked.
"""

import itertools
import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from .errors import InvalidWaterfallShape
from .primes import PrimeTable, get_prime_table

logger = logging.getLogger(__name__)


class PrimeExponents(tuple):
    """
    Exponents of the first k primes, validated to be a waterfall shape.

    A tuple, so it compares equal to a plain tuple with the same items and can
    be used as a dict/set key.
    """

    def __new__(cls, exponents: Iterable[int] = ()):
        exps = tuple(int(e) for e in exponents)
        if any(e < 0 for e in exps):
            raise InvalidWaterfallShape(exps, "negative exponent")
        if not is_waterfall(exps):
            raise InvalidWaterfallShape(exps)
        return super().__new__(cls, exps)

    def __repr__(self) -> str:
        return f"PrimeExponents({list(self)})"


class PrimorialExponents(tuple):
    """
    Exponents of the first k primorials. For example, (0, 1, 3) = 2^0 * 6^1 * 30^3.

    Any non-negative vector is valid.
    """

    def __new__(cls, exponents: Iterable[int] = ()):
        exps = tuple(int(e) for e in exponents)
        if any(e < 0 for e in exps):
            raise InvalidWaterfallShape(exps, "negative primorial exponent")
        return super().__new__(cls, exps)

    def __repr__(self) -> str:
        return f"PrimorialExponents({list(self)})"


# ==================== Codec ====================

def is_waterfall(exponents: Sequence[int]) -> bool:
    """True if the exponents are non-ascending."""
    return all(a >= b for a, b in zip(exponents, exponents[1:]))


def assert_waterfall(exponents: Sequence[int]) -> None:
    """Raise InvalidWaterfallShape if exponents do not represent a waterfall number."""
    if not is_waterfall(exponents):
        raise InvalidWaterfallShape(exponents)


def prime_to_primorial_exponents(prime_exponents: Sequence[int]) -> PrimorialExponents:
    """
    Convert a list of prime factor exponents into primorial exponents.

    Example:
        >>> prime_to_primorial_exponents([9, 5, 3, 2, 2, 1, 1])
        PrimorialExponents([4, 2, 1, 0, 1, 0, 1])
    """
    exps = PrimeExponents(prime_exponents)
    padded = list(exps) + [0]
    return PrimorialExponents(a - b for a, b in zip(padded, padded[1:]))


def primorial_to_prime_exponents(primorial_exponents: Sequence[int]) -> PrimeExponents:
    """Convert a list of primorial exponents into prime exponents (reverse running sum)."""
    running = 0
    reversed_sums = []
    for exp in reversed(PrimorialExponents(primorial_exponents)):
        running += exp
        reversed_sums.append(running)
    return PrimeExponents(reversed(reversed_sums))


def unfactor(primorial_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> int:
    """Recompose a waterfall number from its primorial exponents."""
    primes = primes or get_prime_table()
    value = 1
    for i, exp in enumerate(primorial_exponents):
        if exp:
            value *= primes.primorial(i + 1) ** exp
    return value


def unfactor_primes(prime_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> int:
    """Recompose a number from the exponents of its first k primes."""
    primes = primes or get_prime_table()
    value = 1
    for i, exp in enumerate(prime_exponents):
        if exp:
            value *= primes.nth(i + 1) ** exp
    return value


# ==================== Factoring ====================

def factor(n: int, primes: Optional[PrimeTable] = None,
           known_primorial_k: int = 0) -> Optional[PrimeExponents]:
    """
    Produce the prime factorization of a waterfall number.

    Fails fast with None as soon as the prime factors are seen to not be
    non-ascending, contiguous prime factors starting with 2.

    Args:
        n: Positive integer to factor
        primes: Prime table (default table if None)
        known_primorial_k: Number of leading primes already known to divide n.
            n must be a multiple of primorial(known_primorial_k); those primes
            are seeded with one repeat each instead of being trial-divided
            from scratch.

    Returns:
        Prime exponents, or None if n is not a waterfall number

    Raises:
        PrimeTableExhausted: if the table runs out before n is factored

    Example:
        >>> factor(360)
        PrimeExponents([3, 2, 1])
        >>> factor(42) is None
        True
    """
    if n < 1:
        raise ValueError(f"Can only factor positive integers, got {n}")
    primes = primes or get_prime_table()

    remainder = n
    if known_primorial_k:
        known = primes.primorial(known_primorial_k)
        if remainder % known != 0:
            raise ValueError(f"{n} is not a multiple of primorial({known_primorial_k}) = {known}")
        remainder //= known

    factors: List[int] = []
    previous_repeats = None  # used for waterfall checks

    for index, prime in enumerate(primes):
        repeats = 1 if index < known_primorial_k else 0
        # Keep dividing n by prime until we can't
        while remainder % prime == 0:
            remainder //= prime
            repeats += 1

        # Check if this fails the "non-ascending" constraint
        if previous_repeats is not None and repeats > previous_repeats:
            return None

        if repeats == 0:
            if remainder == 1:
                break
            # Violates the "contiguous" constraint.
            return None

        factors.append(repeats)
        previous_repeats = repeats

    return PrimeExponents(factors)


# ==================== Enumeration ====================

@dataclass(frozen=True)
class WaterfallNumber:
    """A waterfall number together with its primorial decomposition."""
    value: int
    primorial_exponents: PrimorialExponents

    @property
    def prime_exponents(self) -> PrimeExponents:
        return primorial_to_prime_exponents(self.primorial_exponents)


@dataclass(frozen=True)
class WaterfallRestart:
    """
    A point at which a bounded search stopped and can later be resumed.

    With resume_exponent None, exploration resumes at primorial index
    len(base_exponents), using product as the base. Otherwise product is
    base * primorial^resume_exponent, which reached the old limit, and upward
    exploration of that primorial continues from there.
    """
    product: int
    base_exponents: tuple
    resume_exponent: Optional[int] = None


# Root of the whole search: 1, with no primorials chosen yet.
SEARCH_BASE_START = WaterfallRestart(1, (), None)

WaterfallItem = Union[WaterfallNumber, WaterfallRestart]


def find_until(limit: int, start: WaterfallRestart = SEARCH_BASE_START,
               primes: Optional[PrimeTable] = None) -> Iterator[WaterfallItem]:
    """
    Yield the waterfall numbers below limit that descend from start, plus the
    restarts needed to continue past limit later.

    Explores in two directions: first to the right (the next primorial, with
    an exponent of 0 for this one), then upward (higher powers of this
    primorial, each followed by exploration to the right of it). The frames
    on the work stack are restarts themselves, so what is left when a branch
    hits the limit is exactly what gets yielded for later.

    The bound is exclusive. The output is not sorted, and 1 is never yielded
    since it is the search root.

    Raises:
        PrimeTableExhausted: if the prime table ends before the limit does
    """
    primes = primes or get_prime_table()
    stack = [start]

    while stack:
        frame = stack.pop()
        index = len(frame.base_exponents)
        primorial = primes.primorial(index + 1)

        if frame.resume_exponent is None:
            if primorial >= limit:
                yield frame
                continue
            # Pushed in reverse: rightward is explored before upward.
            stack.append(WaterfallRestart(frame.product * primorial, frame.base_exponents, 1))
            stack.append(WaterfallRestart(frame.product, frame.base_exponents + (0,), None))
            continue

        if frame.product >= limit:
            yield frame
            continue

        exponents = frame.base_exponents + (frame.resume_exponent,)
        yield WaterfallNumber(frame.product, PrimorialExponents(exponents))
        stack.append(WaterfallRestart(frame.product * primorial, frame.base_exponents,
                                      frame.resume_exponent + 1))
        stack.append(WaterfallRestart(frame.product, exponents, None))


def find_from_restarts_until(limit: int, restarts: Iterable[WaterfallRestart],
                             primes: Optional[PrimeTable] = None) -> Iterator[WaterfallItem]:
    """Resume every restart up to limit, in order."""
    for restart in restarts:
        yield from find_until(limit, restart, primes=primes)


def find_all(limits: Optional[Iterable[int]] = None, step_size: Optional[int] = None,
             primes: Optional[PrimeTable] = None) -> Iterator[WaterfallNumber]:
    """
    Yield waterfall numbers in ascending order, starting with 1.

    Works in batches: each limit re-expands the restarts left by the previous
    batch, so peak memory stays proportional to one batch. Limits are either
    given explicitly (ascending), or generated as step_size, 2*step_size, ...
    in which case the sequence never ends.

    Args:
        limits: Explicit ascending batch limits (exclusive)
        step_size: Batch width for automatic limits

    Example:
        >>> [w.value for w in find_all([5, 35])]
        [1, 2, 4, 6, 8, 12, 16, 24, 30, 32]
    """
    if limits is None:
        if step_size is None or step_size < 1:
            raise ValueError(f"Need explicit limits or a positive step_size, got {step_size}")
        limits = (step_size * i for i in itertools.count(1))

    yield WaterfallNumber(1, PrimorialExponents())

    restarts: List[WaterfallRestart] = [SEARCH_BASE_START]
    for limit in limits:
        found: List[WaterfallNumber] = []
        next_restarts: List[WaterfallRestart] = []
        for item in find_from_restarts_until(limit, restarts, primes=primes):
            if isinstance(item, WaterfallNumber):
                found.append(item)
            else:
                next_restarts.append(item)
        restarts = next_restarts
        logger.debug("Batch to %d: %d numbers, %d restarts", limit, len(found), len(restarts))

        found.sort(key=lambda w: w.value)
        yield from found


def find_up_to(bound: int, primes: Optional[PrimeTable] = None) -> List[WaterfallNumber]:
    """
    All the waterfall numbers below bound, sorted, starting with 1, along with
    their factorization as primorial exponents.
    """
    found = [item for item in find_until(bound, SEARCH_BASE_START, primes=primes)
             if isinstance(item, WaterfallNumber)]
    if bound > 1:
        found.append(WaterfallNumber(1, PrimorialExponents()))
    found.sort(key=lambda w: w.value)
    return found


def for_k_primes_and_max_tau(k: int, max_tau: int,
                             primes: Optional[PrimeTable] = None) -> Iterator[WaterfallNumber]:
    """
    Yield every waterfall number made of exactly the first k primes (all with
    positive exponents) that has at most max_tau divisors.

    Starts from the squarefree primorial and explores by incrementing one
    exponent at a time, only at or to the right of the last incremented index
    so each exponent vector is reached once. Incrementing any exponent raises
    tau, so a branch is cut as soon as tau passes max_tau. Output is unordered.
    """
    if k < 1:
        raise ValueError(f"k must be at least 1, got {k}")
    primes = primes or get_prime_table()
    k_primes = primes.first(k)

    root = (1,) * k
    root_tau = 2 ** k
    if root_tau > max_tau:
        return

    # Frames: (exponents, product, tau, lowest index still allowed to grow)
    stack = [(root, primes.primorial(k), root_tau, 0)]
    while stack:
        exps, product, tau, index = stack.pop()
        yield WaterfallNumber(product, prime_to_primorial_exponents(exps))

        for j in reversed(range(index, k)):
            if j > 0 and exps[j] >= exps[j - 1]:
                continue
            e = exps[j]
            next_tau = tau // (e + 1) * (e + 2)
            if next_tau > max_tau:
                continue
            next_exps = exps[:j] + (e + 1,) + exps[j + 1:]
            stack.append((next_exps, product * k_primes[j], next_tau, j))
