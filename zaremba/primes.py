"""
Prime and primorial lookups for the waterfall search.

The table grows lazily and monotonically: existing primes are never
renumbered, so callers can hold on to indices across growth. Growth is the
only mutation and runs under a single lock, so a table can be shared between
several enumeration contexts.

Primorial numbers are the product of the first k primes: 2, 6, 30, 210...
(https://oeis.org/A002110)
"""

import logging
import threading
from typing import Iterator, List, Optional

from .errors import PrimeTableExhausted

logger = logging.getLogger(__name__)

# Default cap on table size. Waterfall numbers with this many distinct primes
# are far beyond anything the record walk reaches.
DEFAULT_MAX_PRIMES = 10000


class PrimeTable:
    """
    Growable table of the first primes and their primorials.

    Usage:
        primes = PrimeTable()
        primes.nth(1)         # 2
        primes.primorial(3)   # 30
        for p in primes: ...  # 2, 3, 5, 7, ... (extends as needed)
    """

    def __init__(self, max_primes: Optional[int] = DEFAULT_MAX_PRIMES):
        """
        Args:
            max_primes: Largest number of primes the table may hold
                (None = unlimited)
        """
        if max_primes is not None and max_primes < 1:
            raise ValueError(f"max_primes must be positive, got {max_primes}")
        self.max_primes = max_primes
        self._primes: List[int] = [2]
        # _primorials[k] == product of the first k primes
        self._primorials: List[int] = [1, 2]
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._primes)

    def ensure(self, count: int) -> None:
        """
        Make sure at least the first `count` primes are known.

        Find-or-extend is atomic: concurrent callers asking for overlapping
        growth wait on the lock and then find the work already done.
        """
        if count <= len(self._primes):
            return
        if self.max_primes is not None and count > self.max_primes:
            raise PrimeTableExhausted(count, self.max_primes)

        with self._lock:
            primes = self._primes
            candidate = primes[-1] + 1
            while len(primes) < count:
                if self._is_new_prime(candidate):
                    primes.append(candidate)
                    self._primorials.append(self._primorials[-1] * candidate)
                candidate += 1
        logger.debug("Prime table extended to %d primes (largest %d)", len(self._primes), self._primes[-1])

    def _is_new_prime(self, candidate: int) -> bool:
        """Trial division by the known primes, which cover sqrt(candidate)."""
        for p in self._primes:
            if p * p > candidate:
                return True
            if candidate % p == 0:
                return False
        return True

    def nth(self, k: int) -> int:
        """Get the k-th prime (1-based indexing)."""
        if k < 1:
            raise ValueError(f"Prime index is 1-based, got {k}")
        self.ensure(k)
        return self._primes[k - 1]

    def first(self, k: int) -> List[int]:
        """Get the first k primes as a list."""
        if k < 0:
            raise ValueError(f"Prime count must be non-negative, got {k}")
        self.ensure(k)
        return self._primes[:k]

    def primorial(self, k: int) -> int:
        """Get the k-th primorial, the product of the first k primes (primorial(0) == 1)."""
        if k < 0:
            raise ValueError(f"Primorial index must be non-negative, got {k}")
        self.ensure(k)
        return self._primorials[k]

    def __iter__(self) -> Iterator[int]:
        """Yield primes forever, extending the table as needed."""
        index = 0
        while True:
            index += 1
            yield self.nth(index)


_default_table: Optional[PrimeTable] = None
_default_lock = threading.Lock()


def get_prime_table() -> PrimeTable:
    """
    Get the default PrimeTable instance.

    Core functions take an explicit `primes=` table; this is only the
    fallback when none is passed.
    """
    global _default_table
    with _default_lock:
        if _default_table is None:
            _default_table = PrimeTable()
        return _default_table


def set_prime_table(table: PrimeTable) -> None:
    """Set the default PrimeTable instance (e.g. with a configured size cap)."""
    global _default_table
    with _default_lock:
        _default_table = table
