"""
User Output Abstraction

Separates user-facing output (results, status, errors) from debug logging.
Results go to stdout so they can be piped; logs go through the logger.
"""

import json
import logging
import sys
from typing import Any, Iterable, Optional, Sequence, TextIO

from .primes import PrimeTable, get_prime_table
from .schemas import RecordSetterLine

# Sparkline glyphs for primorial exponents 0-7
SPARK_LEVELS = [' ', '▁', '▂', '▃', '▄', '▅', '▆', '▇']

LATEX_TYPE_NAMES = {"z": "Z", "v": "V", "both": "both"}


def sparkline(exponents: Sequence[int]) -> Optional[str]:
    """
    One glyph per exponent, or None if an exponent is too large to draw.

    Example:
        >>> sparkline([2, 0, 1])
        '▂ ▁'
    """
    if any(e >= len(SPARK_LEVELS) for e in exponents):
        return None
    return "".join(SPARK_LEVELS[e] for e in exponents)


class UserOutput:
    """
    Unified handler for user-facing output.

    Usage:
        output = UserOutput()
        output.info("Walking records...")
        output.record(line)
        output.error("Not a waterfall number")
    """

    def __init__(
        self,
        stdout: Optional[TextIO] = None,
        stderr: Optional[TextIO] = None,
        quiet: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        """
        Args:
            stdout: Output stream for results (default: sys.stdout)
            stderr: Output stream for errors (default: sys.stderr)
            quiet: If True, suppress informational output (results are still printed)
            logger: Optional logger for messages that are also logged
        """
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr
        self.quiet = quiet
        self.logger = logger or logging.getLogger(__name__)

    def info(self, message: str, log: bool = False) -> None:
        if not self.quiet:
            print(message, file=self.stdout)
        if log:
            self.logger.info(message)

    def result(self, message: str) -> None:
        """Print a result line (never suppressed)."""
        print(message, file=self.stdout)

    def error(self, message: str, log: bool = True) -> None:
        """Print error message to user (always shown, even in quiet mode)."""
        print(f"Error: {message}", file=self.stderr)
        if log:
            self.logger.error(message)

    def item(self, label: str, value: Any) -> None:
        self.result(f"{label}: {value}")

    def record(self, line: RecordSetterLine) -> None:
        """One JSON object per line."""
        self.result(json.dumps(line.to_json_dict()))

    def waterfall_number(self, value: int, primorial_exponents: Sequence[int]) -> None:
        self.result(f"{value}: {list(primorial_exponents)}")

    def evaluation(self, z: float, tau: int, v: float) -> None:
        self.result(f"z(n) = {z}\ttau(n) = {tau}\tv(n) = {v}")

    def factor_report(self, prime_exponents: Sequence[int], primorial_exponents: Sequence[int],
                      primes: Optional[PrimeTable] = None) -> None:
        """
        Show a waterfall factorization both ways.

        For 5400 this prints prime exponents [3, 3, 2], the factors
        2^3 * 3^3 * 5^2, primorial exponents [0, 1, 2] and the factors
        6^1 * 30^2, followed by a sparkline of the primorial exponents.
        """
        primes = primes or get_prime_table()
        prime_factors = " * ".join(
            f"{primes.nth(i + 1)}^{a}" for i, a in enumerate(prime_exponents))
        primorial_factors = " * ".join(
            f"{primes.primorial(i + 1)}^{e}" for i, e in enumerate(primorial_exponents) if e)

        self.item("Prime exponents", list(prime_exponents))
        self.item("Repeated prime factors", prime_factors)
        self.item("Primorial exponents", list(primorial_exponents))
        self.item("Primorial factors", primorial_factors)

        spark = sparkline(primorial_exponents)
        if spark is None:
            self.result("Could not make primorial sparkline")
        else:
            self.result(f"Primorial sparkline: [{spark}]")

    def latex_table(self, lines: Iterable[RecordSetterLine]) -> None:
        """Rows of an `&`-separated table for pasting into a LaTeX tabular."""
        self.result("n & z(n) & tau(n) & v(n) & type of record & z step & v step")
        for line in lines:
            cells = [line.n, line.z, line.tau, line.v, LATEX_TYPE_NAMES[line.record_type],
                     line.step, line.step_from_v]
            self.result(" & ".join(str(c) for c in cells))

