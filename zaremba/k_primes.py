"""
Exhaustive search for v(n) records by number of distinct primes.

Given a v record V_a, a larger record V_b = z(n)/ln(tau(n)) with exactly k
distinct primes has z(n) no larger than the Mertens/Erdos bound for k primes.
Solving V_a = z_max/ln(tau) for tau gives the largest tau a new record could
have, which leaves a finite set of waterfall numbers to check.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

from .primes import PrimeTable, get_prime_table
from .records import mertens_erdos_bound
from .waterfall import PrimeExponents, PrimorialExponents, for_k_primes_and_max_tau
from .zaremba_math import primes_to_tau, z

logger = logging.getLogger(__name__)

# v(4), the first v record
V_BOOTSTRAP_START = 0.6309297535714574


@dataclass(frozen=True)
class KPrimesIntermediate:
    """Bounds computed for one k, kept for reporting."""
    z_max: float
    log_tau_max: float
    tau_max: int
    tau_min: int


@dataclass(frozen=True)
class KPrimesResult:
    primorials: PrimorialExponents
    primes: PrimeExponents
    tau: int
    n: int
    z: float
    v: float


def search_v_record_k_primes(k: int, v_record: float, primes: Optional[PrimeTable] = None
                             ) -> Tuple[KPrimesIntermediate, Iterator[KPrimesResult]]:
    """
    Compute v(n) for every candidate waterfall number with exactly k primes
    that could beat v_record.

    The candidates still need filtering for actual new records; all of them
    are returned so callers can report how many were checked.

    Returns:
        (intermediate bounds, lazy iterator of candidates)
    """
    primes = primes or get_prime_table()
    z_max = mertens_erdos_bound(k, primes=primes)
    # Breakeven point: v_record = z_max/ln(tau)
    log_tau_max = z_max / v_record
    tau_max = int(math.floor(math.exp(log_tau_max) + 0.5))
    # All ones
    tau_min = 2 ** k

    intermediate = KPrimesIntermediate(z_max, log_tau_max, tau_max, tau_min)

    def candidates() -> Iterator[KPrimesResult]:
        for number in for_k_primes_and_max_tau(k, tau_max, primes=primes):
            prime_exps = number.prime_exponents
            tau = primes_to_tau(prime_exps)
            z_value = z(number.value, prime_exps, primes=primes)
            yield KPrimesResult(
                primorials=number.primorial_exponents, primes=prime_exps,
                tau=tau, n=number.value, z=z_value, v=z_value / math.log(tau),
            )

    return intermediate, candidates()


def max_v_by_bootstrapping(start: float = V_BOOTSTRAP_START,
                           primes: Optional[PrimeTable] = None) -> Iterator[KPrimesResult]:
    """
    Yield successively higher v records, starting from a known one.

    For the current record, tries k = 1, 2, ... until some k produces a new
    record (the best candidate for that k is taken), then starts over from
    k = 1 with the new record. Stops once a k is reached whose largest
    possible v, z_max/ln(tau_min), is below the record.

    The halting condition is not proven, only checked by hand up to k=29; in
    practice it stops at k=35.
    """
    primes = primes or get_prime_table()
    v_record = start
    logger.info("Starting bootstrap with v(4) = %s", v_record)

    while True:
        k = 1
        while True:
            logger.info("Searching for next record with %d primes", k)
            intermediate, results = search_v_record_k_primes(k, v_record, primes=primes)
            candidates: List[KPrimesResult] = list(results)
            logger.info("Checked %d candidates, with max tau = %d", len(candidates), intermediate.tau_max)

            better = [c for c in candidates if c.v > v_record]
            if better:
                best = max(better, key=lambda c: c.v)
                logger.info("Found new record! v=%s n=%d z=%s tau=%d", best.v, best.n, best.z, best.tau)
                v_record = best.v
                yield best
                break

            # No result on this k. If none is even possible, a higher k
            # won't help either.
            log_tau_min = math.log(intermediate.tau_min)
            v_max = intermediate.z_max / log_tau_min
            if v_max < v_record:
                logger.info("Stopping: z-max/log(min-tau) = %s/%s < %s = record-v",
                            intermediate.z_max, log_tau_min, v_record)
                return
            k += 1
