"""
Search for record-setters of z(n) and v(n).

Definitions:

- `pk` is a count of leading primes, usually when the first k primes are to
  be multiplied together: `z_step_pk` is the number of primes that must be
  multiplied to form the step size for z.
- A step size is always a primorial. Walking n in multiples of the step is
  safe when every possible future record-setter is divisible by it.

Assumes that all record-setters are waterfall numbers, so z and v are not
even computed when waterfall factorization fails.
"""

import logging
import math
from dataclasses import dataclass, replace
from typing import Iterator, Optional, Tuple

from .errors import StepSizeIncompatibility
from .min_tau import min_tau
from .primes import PrimeTable, get_prime_table
from .waterfall import (
    PrimeExponents, factor, find_up_to, prime_to_primorial_exponents
)
from .zaremba_math import evaluate, primes_to_tau, v_from, z

logger = logging.getLogger(__name__)

# Walk distance between v step recalculations, in multiples of the current
# step size. v records get rare much faster than z records.
DEFAULT_V_RECALC_STEPS = 1000


def mertens_erdos_bound(k: int, primes: Optional[PrimeTable] = None) -> float:
    """
    Upper bound on z(n) for any n whose distinct prime factors are among the
    first k primes:

        prod(p/(p-1)) * sum(ln(p)/(p-1))

    (the Mertens product times the Erdos sum, from Weber's lemma).
    """
    primes = primes or get_prime_table()
    mertens = 1.0
    erdos = 0.0
    for p in primes.first(k):
        mertens *= p / (p - 1.0)
        erdos += math.log(p) / (p - 1)
    return mertens * erdos


def z_step_pk(record_z: float, primes: Optional[PrimeTable] = None) -> int:
    """
    Given a record-setting z(n), find how many leading primes every future
    z record-setter must be divisible by.

    A waterfall number with k distinct primes has z no larger than
    mertens_erdos_bound(k), so only numbers with at least m primes can beat
    record_z, where m is the first count whose bound exceeds it.
    """
    primes = primes or get_prime_table()
    mertens = 1.0
    erdos = 0.0
    for index, p in enumerate(primes):
        mertens *= p / (p - 1.0)
        erdos += math.log(p) / (p - 1)
        # If this prime pushes us past the z bound, it's the last in the prime
        # product that we'll use for step sizes.
        if mertens * erdos > record_z:
            return index + 1
    raise AssertionError("unreachable: prime iteration ended")


def v_step_pk(n: int, record_v: float, v_step_pk_last: int,
              primes: Optional[PrimeTable] = None) -> int:
    """
    Find the new number of leading primes for the v step size.

    Any future candidate m > n using exactly k primes has z(m) at most
    mertens_erdos_bound(k) and tau(m) at least min_tau(n, k). If even that
    combination can't beat record_v, every future v record-setter needs more
    than k primes. This is checked for k = v_step_pk_last and upward until it
    fails.

    Args:
        n: The most recent position (usually a record-setter)
        record_v: The current v record
        v_step_pk_last: The previous result (0 if there was none)
    """
    if v_step_pk_last < 1:
        # Every waterfall number above 1 is even.
        return 0 if n < 4 else 1

    primes = primes or get_prime_table()
    pk = v_step_pk_last
    while True:
        tau_floor = min_tau(n, pk, primes=primes)
        if mertens_erdos_bound(pk, primes=primes) / math.log(tau_floor) > record_v:
            return pk
        pk += 1
        logger.debug("v step basis raised to %d at n=%d", pk, n)


def min_step(step_a: int, step_b: int) -> int:
    """
    Given two step values, produce a step size that satisfies both.

    Raises:
        StepSizeIncompatibility: if neither step divides the other. Both are
            primorials in practice; this would need a GCD-based merge otherwise.
    """
    if step_a % step_b != 0 and step_b % step_a != 0:
        raise StepSizeIncompatibility(step_a, step_b)
    return min(step_a, step_b)


@dataclass(frozen=True)
class RecordSetter:
    """A record-setting n for z(n), v(n), or both."""
    n: int
    z: float
    tau: int
    v: float
    is_z_record: bool
    is_v_record: bool
    # Step size in effect after this record, and the part of it due to v
    step: int = 1
    step_from_v: int = 1
    step_basis: int = 0
    primes: Tuple[int, ...] = ()
    primorials: Tuple[int, ...] = ()

    @property
    def record_type(self) -> str:
        if self.is_z_record and self.is_v_record:
            return "both"
        if self.is_z_record:
            return "z"
        if self.is_v_record:
            return "v"
        raise AssertionError(f"Non-record-setter entry: {self}")


@dataclass
class WalkState:
    """
    Resumable state of the record walk.

    record_z and record_v are the highest values seen so far; v_step_pk is the
    number of leading primes in the v step size. A record_v of None means
    it is unknown (older checkpoints did not store it) and gets rebuilt on
    resume.
    """
    n: int = 1
    v_step_pk: int = 0
    record_z: float = 0.0
    record_v: Optional[float] = 0.0


def max_v_up_to(n: int, primes: Optional[PrimeTable] = None) -> float:
    """Highest v over the waterfall numbers up to and including n (0.0 below 2)."""
    primes = primes or get_prime_table()
    best = 0.0
    for number in find_up_to(n + 1, primes=primes)[1:]:
        _, _, v_value = evaluate(number.value, number.prime_exponents, primes=primes)
        best = max(v_value, best)
    return best


class RecordWalker:
    """
    Unbounded walk over candidate n, yielding each record-setter for z or v.

    The walk moves in multiples of a step size that is recomputed from
    analytic bounds each time a record is set (and, for v, periodically).
    Positions are always multiples of the step, which is a primorial, so the
    known leading primes seed the factorization of each position.

    Usage:
        walker = RecordWalker()
        for record in walker:
            print(record.n, record.record_type)
            save(walker.checkpoint())
    """

    def __init__(self, state: Optional[WalkState] = None, primes: Optional[PrimeTable] = None,
                 v_recalc_steps: int = DEFAULT_V_RECALC_STEPS):
        """
        Args:
            state: State to continue from (e.g. from a checkpoint taken
                right after a record); a fresh walk starts at n=1
            primes: Prime table
            v_recalc_steps: Distance between periodic v step recalculations,
                in multiples of the step size
        """
        if v_recalc_steps < 1:
            raise ValueError(f"v_recalc_steps must be positive, got {v_recalc_steps}")
        self.primes = primes or get_prime_table()
        self.v_recalc_steps = v_recalc_steps
        self.state = replace(state) if state is not None else WalkState()

        self._z_step_pk = 0
        if self.state.record_z > 0:
            self._z_step_pk = z_step_pk(self.state.record_z, primes=self.primes)
        if self.state.record_v is None:
            self.state.record_v = max_v_up_to(self.state.n, primes=self.primes)
            logger.info("Rebuilt v record %s up to n=%d", self.state.record_v, self.state.n)
        self._last_v_recalc = self.state.n
        self._resumed = self.state.n > 1

    @property
    def step_pk(self) -> int:
        """Number of leading primes in the step size in effect."""
        return min(self._z_step_pk, self.state.v_step_pk)

    @property
    def step(self) -> int:
        z_step = self.primes.primorial(self._z_step_pk)
        v_step = self.primes.primorial(self.state.v_step_pk)
        return min_step(z_step, v_step)

    def checkpoint(self) -> WalkState:
        """Copy of the current state, suitable for resuming later."""
        s = self.state
        return WalkState(n=s.n, v_step_pk=s.v_step_pk, record_z=s.record_z, record_v=s.record_v)

    def _advance(self) -> None:
        """Move to the next multiple of the step size."""
        step = self.step
        self.state.n = (self.state.n // step + 1) * step

    def _recalculate_steps(self, n: int) -> None:
        previous = self.step
        self._z_step_pk = z_step_pk(self.state.record_z, primes=self.primes)
        self.state.v_step_pk = v_step_pk(n, self.state.record_v, self.state.v_step_pk,
                                         primes=self.primes)
        self._last_v_recalc = n
        if self.step != previous:
            logger.info("Step size changed at n=%d: %d -> %d (z pk=%d, v pk=%d)",
                        n, previous, self.step, self._z_step_pk, self.state.v_step_pk)

    def _maybe_recalculate_v(self, n: int) -> None:
        if n - self._last_v_recalc < self.step * self.v_recalc_steps:
            return
        previous_pk = self.state.v_step_pk
        if previous_pk < 1:
            return
        self.state.v_step_pk = v_step_pk(n, self.state.record_v, previous_pk, primes=self.primes)
        self._last_v_recalc = n
        if self.state.v_step_pk != previous_pk:
            logger.info("v step basis raised at n=%d: %d -> %d", n, previous_pk, self.state.v_step_pk)

    def __iter__(self) -> Iterator[RecordSetter]:
        return self.walk()

    def walk(self, max_n: Optional[int] = None) -> Iterator[RecordSetter]:
        """
        Yield record-setters in ascending order of n.

        Args:
            max_n: Stop once the position reaches this value (exclusive);
                None walks forever
        """
        state = self.state
        if self._resumed:
            # The checkpointed position was already evaluated.
            self._resumed = False
            self._advance()

        while max_n is None or state.n < max_n:
            n = state.n
            prime_exps = factor(n, primes=self.primes, known_primorial_k=self.step_pk)
            if prime_exps is not None:
                record = self._evaluate(n, prime_exps)
                if record is not None:
                    yield record
                else:
                    self._maybe_recalculate_v(n)
            self._advance()

    def _evaluate(self, n: int, prime_exps: PrimeExponents) -> Optional[RecordSetter]:
        state = self.state
        z_value, tau, v_value = evaluate(n, prime_exps, primes=self.primes)

        is_z_record = state.record_z > 0 and z_value > state.record_z
        is_v_record = state.record_v > 0 and v_value > state.record_v

        state.record_z = max(z_value, state.record_z)
        if not math.isnan(v_value):  # NaN for n = 1
            state.record_v = max(v_value, state.record_v)

        if not (is_z_record or is_v_record):
            return None

        # Calculate new step size for both z and v even if only one changed.
        self._recalculate_steps(n)
        return RecordSetter(
            n=n, z=z_value, tau=tau, v=v_value,
            is_z_record=is_z_record, is_v_record=is_v_record,
            step=self.step, step_from_v=self.primes.primorial(state.v_step_pk),
            step_basis=state.v_step_pk,
            primes=tuple(prime_exps), primorials=tuple(prime_to_primorial_exponents(prime_exps)),
        )


def walk_records(state: Optional[WalkState] = None, max_n: Optional[int] = None,
                 primes: Optional[PrimeTable] = None,
                 v_recalc_steps: int = DEFAULT_V_RECALC_STEPS) -> Iterator[RecordSetter]:
    """Yield record-setters below max_n (or forever), starting from state."""
    walker = RecordWalker(state, primes=primes, v_recalc_steps=v_recalc_steps)
    yield from walker.walk(max_n)


def find_records(max_n: int, primes: Optional[PrimeTable] = None) -> Iterator[RecordSetter]:
    """
    Yield all n below max_n that produce record-setting values for z(n) or
    v(n), by evaluating every waterfall number below max_n.

    Much slower than the walk for large max_n, but relies on nothing but the
    enumeration, so it doubles as a check on the walker's step sizes.
    """
    primes = primes or get_prime_table()
    record_z = 0.0
    record_v = 0.0
    for number in find_up_to(max_n, primes=primes)[1:]:
        prime_exps = number.prime_exponents
        tau = primes_to_tau(prime_exps)
        z_value = z(number.value, prime_exps, primes=primes)
        v_value = v_from(z_value, tau)

        is_z_record = record_z > 0 and z_value > record_z
        is_v_record = record_v > 0 and v_value > record_v
        if is_z_record or is_v_record:
            yield RecordSetter(
                n=number.value, z=z_value, tau=tau, v=v_value,
                is_z_record=is_z_record, is_v_record=is_v_record,
                primes=tuple(prime_exps), primorials=tuple(number.primorial_exponents),
            )
        record_z = max(z_value, record_z)
        record_v = max(v_value, record_v)
