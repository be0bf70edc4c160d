"""
Record-setters of z(n) = sum of ln(d)/d over the divisors d of n, and of
v(n) = z(n)/ln(tau(n)), searched over waterfall numbers.
"""

from .errors import InvalidWaterfallShape, PrimeTableExhausted, StepSizeIncompatibility, ZarembaError
from .primes import PrimeTable, get_prime_table, set_prime_table
from .records import RecordSetter, RecordWalker, WalkState, find_records, walk_records
from .waterfall import (
    PrimeExponents, PrimorialExponents, WaterfallNumber, WaterfallRestart, factor, find_all, find_up_to
)
from .zaremba_math import evaluate, z

__version__ = "0.1.0"
