"""Tests for the smallest-tau search used by the v step size."""
import pytest

from zaremba.min_tau import MinTauCandidate, min_tau, min_tau_candidates
from zaremba.waterfall import find_up_to, is_waterfall
from zaremba.zaremba_math import primes_to_tau


def brute_force_min_tau(n, k):
    """Smallest tau over waterfall numbers >= n with exactly k primes, by enumeration."""
    best = None
    for w in find_up_to(n * 2 ** (k + 2)):
        exps = w.prime_exponents
        if w.value >= n and len(exps) == k and min(exps) >= 1:
            tau = primes_to_tau(exps)
            if best is None or tau < best:
                best = tau
    return best


class TestMinTauCandidates:
    def test_full_exploration_72_2(self):
        candidates = list(min_tau_candidates(72, 2, fast=False))
        assert [c.exponents for c in candidates] == [
            (1, 1), (2, 1), (3, 1), (4, 1), (5, 1), (4, 2), (3, 2), (2, 2),
        ]
        assert [c.usable for c in candidates] == [False] * 4 + [True] * 3 + [False]

    def test_fast_only_usable(self):
        candidates = list(min_tau_candidates(72, 2, fast=True))
        assert candidates == [
            MinTauCandidate((5, 1), 96, True),
            MinTauCandidate((4, 2), 144, True),
            MinTauCandidate((3, 2), 72, True),
        ]

    @pytest.mark.parametrize("n,k", [(72, 2), (10 ** 6, 3), (10 ** 9, 5), (30, 3)])
    def test_no_duplicates(self, n, k):
        exps = [c.exponents for c in min_tau_candidates(n, k, fast=False)]
        assert len(exps) == len(set(exps))
        assert all(is_waterfall(e) for e in exps)

    def test_root_already_usable(self):
        assert list(min_tau_candidates(30, 3)) == [MinTauCandidate((1, 1, 1), 30, True)]

    def test_rejects_zero_primes(self):
        with pytest.raises(ValueError):
            list(min_tau_candidates(10, 0))


class TestMinTau:
    def test_72_2(self):
        assert min_tau(72, 2) == 12

    def test_small(self):
        assert min_tau(1, 1) == 2
        assert min_tau(12, 1) == 5

    @pytest.mark.parametrize("n,k", [(100, 2), (1000, 2), (5000, 3), (40000, 4)])
    def test_matches_brute_force(self, n, k):
        assert min_tau(n, k) == brute_force_min_tau(n, k)
