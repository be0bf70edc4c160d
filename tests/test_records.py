"""
Tests for record-setter search.

Tests cover:
- Step size bounds for z and v
- The stepped walk, its checkpoints and resumption
- Agreement between the stepped walk and full enumeration
"""
import itertools
from dataclasses import replace

import pytest

from zaremba.errors import StepSizeIncompatibility
from zaremba.records import (
    RecordSetter,
    RecordWalker,
    WalkState,
    find_records,
    max_v_up_to,
    mertens_erdos_bound,
    min_step,
    v_step_pk,
    walk_records,
    z_step_pk,
)


def exact(value):
    return pytest.approx(value, rel=1e-13)


class TestStepSizes:
    def test_mertens_erdos_bound(self):
        assert mertens_erdos_bound(0) == 0.0
        assert mertens_erdos_bound(1) == pytest.approx(2 * 0.6931471805599453)

    def test_z_step_pk(self):
        assert z_step_pk(0.6931471805599453) == 1
        assert z_step_pk(1.0114042647073518) == 1
        assert z_step_pk(1.5650534091363244) == 2

    def test_z_step_pk_grows_with_record(self):
        pks = [z_step_pk(r) for r in (1.0, 3.0, 6.0, 10.0, 15.0)]
        assert pks == sorted(pks)
        assert pks[-1] > pks[0]

    def test_v_step_pk_first_call(self):
        assert v_step_pk(2, 0.5, 0) == 0
        assert v_step_pk(4, 0.63, 0) == 1

    def test_v_step_pk_raises_basis(self):
        assert v_step_pk(6, 0.7295739585136225, 1) == 1
        assert v_step_pk(12, 0.8734729387592397, 1) == 2

    def test_v_step_pk_never_decreases(self):
        assert v_step_pk(12, 0.5, 3) == 3

    def test_min_step(self):
        assert min_step(6, 30) == 6
        assert min_step(30, 6) == 6
        assert min_step(2, 2) == 2
        with pytest.raises(StepSizeIncompatibility):
            min_step(4, 6)

    def test_incompatibility_is_assertion(self):
        with pytest.raises(AssertionError):
            min_step(10, 15)


class TestRecordSetter:
    def test_record_type(self):
        base = dict(n=4, z=0.7, tau=3, v=0.6)
        assert RecordSetter(is_z_record=True, is_v_record=True, **base).record_type == "both"
        assert RecordSetter(is_z_record=True, is_v_record=False, **base).record_type == "z"
        assert RecordSetter(is_z_record=False, is_v_record=True, **base).record_type == "v"
        with pytest.raises(AssertionError):
            RecordSetter(is_z_record=False, is_v_record=False, **base).record_type


class TestRecordWalker:
    def test_first_records(self):
        records = list(itertools.islice(RecordWalker(), 3))

        assert [r.n for r in records] == [4, 6, 12]
        assert [r.record_type for r in records] == ["both", "both", "both"]
        assert records[0].z == exact(0.6931471805599453)
        assert records[0].v == exact(0.6309297535714574)
        assert records[1].z == exact(1.0114042647073518)
        assert records[1].v == exact(0.7295739585136225)
        assert records[2].z == exact(1.5650534091363246)
        assert records[2].v == exact(0.8734729387592397)
        assert records[0].primes == (2,)
        assert records[0].primorials == (2,)
        assert records[1].primorials == (0, 1)

    def test_step_sizes_after_records(self):
        records = list(itertools.islice(RecordWalker(), 3))
        assert [(r.step, r.step_from_v, r.step_basis) for r in records] == [
            (2, 2, 1), (2, 2, 1), (6, 6, 2),
        ]

    def test_positions_are_multiples_of_step(self):
        walker = RecordWalker()
        for record in walker.walk(10 ** 5):
            assert walker.state.n % walker.step == 0
            assert record.n % record.step == 0

    def test_walk_bound_is_exclusive(self):
        assert [r.n for r in walk_records(max_n=12)] == [4, 6]
        assert [r.n for r in walk_records(max_n=13)] == [4, 6, 12]

    def test_records_strictly_increase(self):
        record_z = 0.0
        record_v = 0.0
        for r in walk_records(max_n=10 ** 6):
            assert r.z > record_z or r.v > record_v
            record_z = max(record_z, r.z)
            record_v = max(record_v, r.v)

    def test_caller_state_not_mutated(self):
        state = WalkState(n=12, v_step_pk=2, record_z=1.5650534091363246, record_v=0.8734729387592397)
        list(walk_records(state, max_n=1000))
        assert state.n == 12

    def test_rejects_bad_recalc_interval(self):
        with pytest.raises(ValueError):
            RecordWalker(v_recalc_steps=0)


class TestCheckpointResume:
    @pytest.mark.parametrize("stop_after", [1, 3, 8, 15])
    def test_resume_matches_uninterrupted(self, stop_after):
        max_n = 10 ** 7
        uninterrupted = [r.n for r in walk_records(max_n=max_n, v_recalc_steps=50)]

        walker = RecordWalker(v_recalc_steps=50)
        first = []
        for record in walker.walk(max_n):
            first.append(record.n)
            if len(first) == stop_after:
                break
        checkpoint = walker.checkpoint()
        assert checkpoint.n == first[-1]

        resumed = [r.n for r in walk_records(checkpoint, max_n=max_n, v_recalc_steps=50)]
        assert first + resumed == uninterrupted

    def test_resume_without_v_record(self):
        max_n = 10 ** 6
        walker = RecordWalker()
        uninterrupted = []
        checkpoints = []
        for record in walker.walk(max_n):
            uninterrupted.append((record.n, record.record_type))
            checkpoints.append(walker.checkpoint())

        for i, checkpoint in enumerate(checkpoints):
            resumed = RecordWalker(replace(checkpoint, record_v=None))
            assert resumed.state.record_v == exact(checkpoint.record_v)
            rest = [(r.n, r.record_type) for r in resumed.walk(max_n)]
            assert rest == uninterrupted[i + 1:], f"resumed after n={checkpoint.n}"

    def test_fresh_state_starts_at_one(self):
        assert [r.n for r in walk_records(WalkState(), max_n=13)] == [4, 6, 12]


class TestMaxVUpTo:
    def test_small(self):
        assert max_v_up_to(1) == 0.0
        assert max_v_up_to(3) == exact(0.5)
        assert max_v_up_to(6) == exact(0.7295739585136225)

    def test_matches_last_v_record(self):
        last_v = [r.v for r in find_records(10 ** 5) if r.is_v_record][-1]
        assert max_v_up_to(10 ** 5) == exact(last_v)


class TestWalkAgreesWithEnumeration:
    def test_up_to_ten_million(self):
        bound = 10 ** 7
        walked = [(r.n, r.record_type) for r in walk_records(max_n=bound)]
        enumerated = [(r.n, r.record_type) for r in find_records(bound)]
        assert walked == enumerated

    def test_frequent_v_recalculation(self):
        bound = 10 ** 7
        walked = [r.n for r in walk_records(max_n=bound, v_recalc_steps=1)]
        assert walked == [r.n for r in find_records(bound)]


class TestFindRecords:
    def test_below_ten(self):
        records = list(find_records(10))
        assert [(r.n, r.tau, r.record_type) for r in records] == [(4, 3, "both"), (6, 4, "both")]
        assert records[0].z == exact(0.6931471805599453)
        assert records[1].v == exact(0.7295739585136225)
        assert records[1].primes == (1, 1)
        assert records[1].primorials == (0, 1)

    def test_last_record_below_10_12(self):
        last = list(find_records(10 ** 12))[-1]
        assert last.n == 963761198400
        assert last.tau == 6720
        assert last.z == exact(14.960783769593887)
        assert last.v == exact(1.6976114329564411)
        assert last.record_type == "z"
        assert last.primes == (6, 4, 2, 1, 1, 1, 1, 1, 1)
        assert last.primorials == (2, 2, 1, 0, 0, 0, 0, 0, 1)
