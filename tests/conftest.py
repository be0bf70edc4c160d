"""
Pytest configuration for zaremba tests.

Adds the repository root to the Python path so tests can import 'zaremba'
without installing it, and provides a fresh prime table per test.
"""
import sys
from pathlib import Path

import pytest

repo_root = Path(__file__).parent.parent
sys.path.insert(0, str(repo_root))

from zaremba.primes import PrimeTable  # noqa: E402


@pytest.fixture
def primes():
    """A private prime table, so tests don't share growth state."""
    return PrimeTable()
