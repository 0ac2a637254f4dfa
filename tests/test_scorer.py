"""Tests for post-session resonance scoring."""
import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from breathcoach.breath_stream import BreathEvent
from breathcoach.config import ScoringConfig
from breathcoach.scorer import (
    Score,
    SessionData,
    breath_intervals,
    feedback_for,
    round_half_up,
    score_session,
    score_session_data,
)


def breaths_from_intervals(intervals_s, start_ms=1000):
    t = start_ms
    events = [BreathEvent(t)]
    for interval in intervals_s:
        t += interval * 1000
        events.append(BreathEvent(t))
    return events


class TestScoreSession:

    def test_perfect_resonance(self):
        score = score_session(breaths_from_intervals([10, 10, 10]), 60)
        assert score == Score(resonance=100, rhythm=100, avg_bpm=6.0)

    def test_ten_bpm_scores_rhythm_only(self):
        score = score_session(breaths_from_intervals([6, 6, 6]), 60)
        assert score.avg_bpm == pytest.approx(10.0)
        assert score.rhythm == 100
        assert score.resonance == 40

    @pytest.mark.parametrize('count', [0, 1, 2])
    def test_too_few_breaths(self, count):
        breaths = [BreathEvent(i * 10000) for i in range(count)]
        assert score_session(breaths, 60) == Score(resonance=0, rhythm=0, avg_bpm=0.0)

    def test_uneven_intervals_penalised(self):
        # mean 10s, population std 2s -> penalty 80
        score = score_session(breaths_from_intervals([8, 12, 8, 12]), 60)
        assert score.avg_bpm == pytest.approx(6.0)
        assert score.rhythm == 20
        assert score.resonance == 68

    def test_partial_frequency_credit(self):
        # 7.5s intervals -> 8 BPM, halfway to the zero point
        score = score_session(breaths_from_intervals([7.5, 7.5, 7.5]), 60)
        assert score.avg_bpm == pytest.approx(8.0)
        assert score.resonance == 70

    def test_avg_bpm_is_unrounded(self):
        score = score_session(breaths_from_intervals([9, 9, 9]), 60)
        assert score.avg_bpm == pytest.approx(60.0 / 9.0)
        assert isinstance(score.resonance, int)
        assert isinstance(score.rhythm, int)

    def test_rhythm_floored_at_zero(self):
        score = score_session(breaths_from_intervals([2, 20, 2, 20]), 60)
        assert score.rhythm == 0
        assert 0 <= score.resonance <= 100

    def test_simultaneous_breaths_clamp_to_zero(self):
        breaths = [BreathEvent(5000), BreathEvent(5000), BreathEvent(5000)]
        assert score_session(breaths, 60) == Score.zero()

    def test_accepts_raw_timestamps(self):
        score = score_session([0, 10000, 20000, 30000], 60)
        assert score.resonance == 100

    def test_score_session_data(self):
        data = SessionData.from_breaths(breaths_from_intervals([10, 10, 10]), 60)
        assert score_session_data(data).resonance == 100

    def test_custom_target(self):
        config = ScoringConfig(target_bpm=10.0)
        score = score_session(breaths_from_intervals([6, 6, 6]), 60, config)
        assert score.resonance == 100

    def test_deterministic(self):
        breaths = breaths_from_intervals([9.5, 10.5, 10.1, 9.7])
        assert score_session(breaths, 60) == score_session(breaths, 60)


class TestHelpers:

    def test_breath_intervals(self):
        assert list(breath_intervals([0, 4000, 10000])) == [4.0, 6.0]

    @pytest.mark.parametrize('value,expected', [
        (0.5, 1), (2.5, 3), (84.5, 85), (84.49, 84), (99.999, 100), (0.0, 0),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected

    @pytest.mark.parametrize('resonance,prefix', [
        (100, 'Excellent'), (85, 'Excellent'), (84, 'Great job'),
        (70, 'Great job'), (50, 'Good effort'), (49, 'Keep practicing'), (0, 'Keep practicing'),
    ])
    def test_feedback_levels(self, resonance, prefix):
        assert feedback_for(resonance).startswith(prefix)

    def test_score_to_dict(self):
        d = Score(resonance=68, rhythm=20, avg_bpm=6.0).to_dict()
        assert d == {
            'resonance': 68,
            'rhythm': 20,
            'avgBPM': 6.0,
            'feedback': 'Good effort. Try to maintain a more steady rhythm.',
        }

    def test_session_data_to_dict(self):
        data = SessionData.from_breaths([BreathEvent(1000.0)], 60)
        assert data.to_dict() == {'breaths': [{'timestamp': 1000.0}], 'duration': 60}
