"""Tests for the per-performance Jam Intensity Score."""

import pytest

from phangraphs.config import JIS_APPROVAL_WEIGHT, JIS_CURATION_WEIGHT, JIS_DURATION_WEIGHT
from phangraphs.jis import SongBaseline, combine, score_records
from tests.conftest import make_record, scenario_records


class TestWeights:

    def test_weights_sum_to_one(self):
        total = JIS_DURATION_WEIGHT + JIS_CURATION_WEIGHT + JIS_APPROVAL_WEIGHT
        assert total == pytest.approx(1.0)

    def test_curation_dominates(self):
        assert JIS_CURATION_WEIGHT > JIS_DURATION_WEIGHT + JIS_APPROVAL_WEIGHT

    def test_combine_bounds(self):
        assert combine(0, 0, 0) == 0
        assert combine(100, 100, 100) == pytest.approx(100)


class TestDurationSignal:

    def test_robust_z_rescaled(self):
        base = SongBaseline([make_record(duration_ms=d) for d in (600000, 1200000)])
        assert base.median_ms == 900000
        assert base.mad_ms == 300000
        assert base.duration_signal(1200000) == pytest.approx(100 * 4 / 6)
        assert base.duration_signal(600000) == pytest.approx(100 * 2 / 6)
        assert base.duration_signal(900000) == pytest.approx(50)

    def test_clamped_at_three_mads(self):
        base = SongBaseline([make_record(duration_ms=d) for d in (500000, 600000, 700000)])
        assert base.duration_signal(10_000_000) == pytest.approx(100)
        assert base.duration_signal(1) == pytest.approx(0)

    def test_unknown_duration_is_neutral(self):
        base = SongBaseline([make_record(duration_ms=d) for d in (600000, 1200000)])
        assert base.duration_signal(0) == 50

    def test_too_few_known_durations_is_neutral(self):
        base = SongBaseline([make_record(duration_ms=600000), make_record(duration_ms=0)])
        assert base.known_durations == 1
        assert base.duration_signal(600000) == 50

    def test_zero_mad(self):
        base = SongBaseline([make_record(duration_ms=600000)] * 3)
        assert base.duration_signal(600000) == pytest.approx(50)
        assert base.duration_signal(700000) == pytest.approx(100)
        assert base.duration_signal(500000) == pytest.approx(0)


class TestApprovalSignal:

    def test_mid_rank(self):
        base = SongBaseline([make_record(likes=n) for n in (10, 50)])
        assert base.approval_signal(50) == pytest.approx(75)
        assert base.approval_signal(10) == pytest.approx(25)

    def test_single_performance_is_neutral(self):
        base = SongBaseline([make_record(likes=3)])
        assert base.approval_signal(3) == pytest.approx(50)

    def test_ties_share_rank(self):
        base = SongBaseline([make_record(likes=n) for n in (5, 5, 5, 5)])
        assert base.approval_signal(5) == pytest.approx(50)


class TestScoreRecords:

    def test_scenario_ordering(self):
        first, second, fluffhead = score_records(scenario_records())
        assert first.jis > second.jis
        assert first.curation_signal == 100
        assert second.curation_signal == 0
        # 0.25 * 66.67 + 0.55 * 100 + 0.20 * 75
        assert first.jis == pytest.approx(86.6667, abs=1e-3)
        # lone performance: neutral duration and approval
        assert fluffhead.jis == pytest.approx(0.25 * 50 + 0.20 * 50)

    def test_local_baseline_per_song(self):
        """The same duration scores differently against different songs."""
        records = [
            make_record(song_name="Short", duration_ms=120000, position=1),
            make_record(song_name="Short", duration_ms=150000, position=2),
            make_record(song_name="Short", duration_ms=600000, position=3),
            make_record(song_name="Long", duration_ms=900000, position=4),
            make_record(song_name="Long", duration_ms=1000000, position=5),
            make_record(song_name="Long", duration_ms=600000, position=6),
        ]
        scored = score_records(records)
        assert scored[2].duration_signal > scored[5].duration_signal

    def test_bounds(self):
        records = [make_record(duration_ms=d, likes=l, is_jamchart=j, position=i)
                   for i, (d, l, j) in enumerate([(0, 0, False), (3_000_000, 900, True),
                                                  (60000, 0, False), (600000, 40, True)], 1)]
        for p in score_records(records):
            assert 0 <= p.jis <= 100

    def test_preserves_order(self):
        records = scenario_records()
        assert [p.record for p in score_records(records)] == records

    def test_empty(self):
        assert score_records([]) == []
