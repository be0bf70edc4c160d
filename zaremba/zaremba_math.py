"""
Evaluation of z(n) = sum over divisors d of ln(d)/d, tau(n) and v(n).

Everything here works from the prime exponents of n rather than from its
divisors, since record-setting n have thousands of divisors.

Floating point results depend on summation order. All sums are plain
left-to-right accumulations in a fixed order (increasing prime index, then
increasing power); the builtin sum() is avoided on purpose because it uses
compensated summation for floats and would change the last digits.
"""

import itertools
import logging
import math
from typing import List, Optional, Sequence, Tuple

from .primes import PrimeTable, get_prime_table
from .waterfall import primorial_to_prime_exponents

logger = logging.getLogger(__name__)


def sigma_approx(prime_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> float:
    """
    Approximate sigma_1(n), the sum of the divisors, without computing them
    directly.

    Example:
        >>> sigma_approx([3, 1])
        60.0
    """
    primes = primes or get_prime_table()
    product = 1.0
    for index, exp in enumerate(prime_exponents):
        p = float(primes.nth(index + 1))
        product *= (p ** (exp + 1) - 1) / (p - 1)
    return product


def h_approx(n: float, prime_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> float:
    """Approximate h(n) = sigma(n)/n = sum(1/divisor), without computing divisors."""
    return sigma_approx(prime_exponents, primes=primes) / n


def z(n: int, prime_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> float:
    """
    Compute z(n) using the decomposition from Weber 2020
    (https://arxiv.org/pdf/1810.10876.pdf):

        z(n) = sum_k h(n / p_k^a_k) * sum_{j=1..a_k} j * ln(p_k) / p_k^j

    where h is evaluated on n with p_k removed entirely.

    Args:
        n: The number itself (only used as a float, for h)
        prime_exponents: Exponents of the first primes in n

    Example:
        >>> z(6, [1, 1])
        1.0114042647073518
    """
    primes = primes or get_prime_table()
    n_approx = float(n)
    exps = list(prime_exponents)

    total = 0.0
    for index, exp in enumerate(exps):
        p = float(primes.nth(index + 1))
        ln_p = math.log(p)

        without_p = exps[:index] + [0] + exps[index + 1:]
        h = h_approx(n_approx / p ** exp, without_p, primes=primes)

        powers = 0.0
        for j in range(1, exp + 1):
            powers += j * ln_p / p ** j
        total += powers * h
    return total


def primes_to_tau(prime_exponents: Sequence[int]) -> int:
    """
    Given a set of prime exponents, give the number of divisors if they were
    recomposed.
    """
    tau = 1
    for exp in prime_exponents:
        tau *= exp + 1
    return tau


def primorials_to_tau(primorial_exponents: Sequence[int]) -> int:
    """Number of divisors of the waterfall number with these primorial exponents."""
    return primes_to_tau(primorial_to_prime_exponents(primorial_exponents))


def v_from(z_value: float, tau: int) -> float:
    """v(n) = z(n)/ln(tau(n)). NaN for n = 1, where tau is 1."""
    if tau == 1:
        return math.nan
    return z_value / math.log(tau)


def evaluate(n: int, prime_exponents: Sequence[int],
             primes: Optional[PrimeTable] = None) -> Tuple[float, int, float]:
    """Compute (z, tau, v) for n in one go."""
    z_value = z(n, prime_exponents, primes=primes)
    tau = primes_to_tau(prime_exponents)
    return z_value, tau, v_from(z_value, tau)


# ==================== Direct computation ====================
# Sums over the actual divisors. Much slower, but independent of the Weber
# decomposition, so it is kept for cross-checking and for small n.

def divisors(prime_exponents: Sequence[int], primes: Optional[PrimeTable] = None) -> List[int]:
    """
    All divisors of the number with these prime exponents, unsorted.

    For exponents (2, 1) the powers lists are [1, 2, 4] and [1, 3], and the
    divisors are the products over their Cartesian product.
    """
    primes = primes or get_prime_table()
    powers = []
    for index, exp in enumerate(prime_exponents):
        p = primes.nth(index + 1)
        powers.append([p ** j for j in range(exp + 1)])

    result = []
    for combination in itertools.product(*powers):
        d = 1
        for part in combination:
            d *= part
        result.append(d)
    return result


def z_and_tau_from_divisors(prime_exponents: Sequence[int],
                            primes: Optional[PrimeTable] = None) -> Tuple[float, int]:
    """Compute z(n) and tau(n) by summing ln(d)/d over every divisor d."""
    divs = divisors(prime_exponents, primes=primes)
    total = 0.0
    for d in divs:
        total += math.log(d) / d
    return total, len(divs)
