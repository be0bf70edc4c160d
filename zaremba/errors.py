"""
Error kinds for the waterfall record search.

Errors local to a single candidate (a number that is not a waterfall number)
are not raised from the search itself: factor() returns None and the caller
skips the candidate. Everything here is either a caller mistake or fatal to
the run.
"""


class ZarembaError(Exception):
    """Base class for all errors raised by the zaremba package."""


class InvalidWaterfallShape(ZarembaError, ValueError):
    """Exponent vector is not non-ascending, or holds negative exponents."""

    def __init__(self, exponents, reason: str = "not non-ascending"):
        self.exponents = tuple(exponents)
        self.reason = reason
        super().__init__(f"Prime exponents failed waterfall test ({reason}): {list(self.exponents)}")


class PrimeTableExhausted(ZarembaError):
    """
    A prime beyond the configured table size was needed.

    This is a sizing misconfiguration (see primes.max_primes in the config),
    not something a running search can recover from.
    """

    def __init__(self, requested: int, max_primes: int):
        self.requested = requested
        self.max_primes = max_primes
        super().__init__(
            f"Ran out of primes: needed prime #{requested} but table is limited to {max_primes}"
        )


class StepSizeIncompatibility(ZarembaError, AssertionError):
    """The z step and v step do not divide one another."""

    def __init__(self, step_a: int, step_b: int):
        self.step_a = step_a
        self.step_b = step_b
        super().__init__(
            f"Assuming step sizes divide one another, got {step_a} and {step_b}"
        )
