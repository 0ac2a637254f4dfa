"""
Post-session resonance scoring.

Resonance breathing sits near 6 breaths per minute with evenly spaced
breaths. The score blends two components computed from the inter-breath
intervals:

- frequency: how close the average rate is to the target (linear falloff,
  zero once the rate is FREQ_TOLERANCE_BPM away)
- rhythm: how even the intervals are (penalises the coefficient of
  variation of the intervals)

(c) 2026 Anywave Creations
MIT License
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

import numpy as np

from .breath_stream import BreathEvent
from .config import ScoringConfig

# Below this the average interval is treated as zero
MIN_INTERVAL_S = 1e-9

FEEDBACK_LEVELS: Tuple[Tuple[int, str], ...] = (
    (85, "Excellent! You've achieved a state of high resonance."),
    (70, "Great job! Your breathing is calm and consistent."),
    (50, "Good effort. Try to maintain a more steady rhythm."),
)
FEEDBACK_DEFAULT = "Keep practicing. Focus on slow, regular belly breaths."


@dataclass(frozen=True)
class SessionData:
    """Finalized input to the scorer.

    Attributes:
        breaths: Every breath recorded during the session, in order.
        duration: Nominal session length in seconds.
    """
    breaths: Tuple[BreathEvent, ...]
    duration: float

    @classmethod
    def from_breaths(cls, breaths: Iterable[BreathEvent], duration: float) -> 'SessionData':
        return cls(breaths=tuple(breaths), duration=duration)

    def to_dict(self) -> dict:
        return {
            'breaths': [b.to_dict() for b in self.breaths],
            'duration': self.duration,
        }


@dataclass(frozen=True)
class Score:
    """Session score.

    Attributes:
        resonance: Weighted blend of frequency and rhythm, 0-100.
        rhythm: Interval evenness, 0-100.
        avg_bpm: Average breathing rate, unrounded.
    """
    resonance: int
    rhythm: int
    avg_bpm: float

    @classmethod
    def zero(cls) -> 'Score':
        return cls(resonance=0, rhythm=0, avg_bpm=0.0)

    @property
    def feedback(self) -> str:
        return feedback_for(self.resonance)

    def to_dict(self) -> dict:
        return {
            'resonance': self.resonance,
            'rhythm': self.rhythm,
            'avgBPM': self.avg_bpm,
            'feedback': self.feedback,
        }


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up."""
    return int(math.floor(value + 0.5))


def breath_intervals(timestamps_ms: Sequence[float]) -> np.ndarray:
    """Seconds between consecutive breath timestamps."""
    return np.diff(np.asarray(timestamps_ms, dtype=float)) / 1000.0


def frequency_score(avg_bpm: float, config: ScoringConfig) -> float:
    deviation = abs(avg_bpm - config.target_bpm)
    return max(0.0, 100.0 - (deviation / config.freq_tolerance_bpm) * 100.0)


def rhythm_score(intervals: np.ndarray, avg_interval: float, config: ScoringConfig) -> float:
    # np.std defaults to the population standard deviation (ddof=0)
    std_dev = float(np.std(intervals))
    penalty = (std_dev / avg_interval) * config.rhythm_penalty_gain
    return max(0.0, 100.0 - penalty)


def score_session(breaths: Sequence[Union[BreathEvent, float]],
                  duration: float,
                  config: Optional[ScoringConfig] = None) -> Score:
    """Score a finished session.

    Args:
        breaths: BreathEvents or raw millisecond timestamps, in order.
        duration: Nominal session length in seconds. Not used by the
            formulas, kept so callers can pass SessionData fields as-is.
        config: Scoring weights and targets.

    Returns:
        Score. Fewer than config.min_breaths breaths, or intervals that
        average to zero, give Score.zero().
    """
    config = config or ScoringConfig()
    if len(breaths) < config.min_breaths:
        return Score.zero()

    timestamps = [b.timestamp_ms if isinstance(b, BreathEvent) else float(b) for b in breaths]
    intervals = breath_intervals(timestamps)

    avg_interval = float(np.mean(intervals))
    if not math.isfinite(avg_interval) or avg_interval <= MIN_INTERVAL_S:
        return Score.zero()

    avg_bpm = 60.0 / avg_interval
    freq = frequency_score(avg_bpm, config)
    rhythm = rhythm_score(intervals, avg_interval, config)
    if not (math.isfinite(freq) and math.isfinite(rhythm)):
        return Score.zero()

    resonance = config.freq_weight * freq + config.rhythm_weight * rhythm
    return Score(
        resonance=round_half_up(resonance),
        rhythm=round_half_up(rhythm),
        avg_bpm=avg_bpm,
    )


def score_session_data(data: SessionData, config: Optional[ScoringConfig] = None) -> Score:
    return score_session(data.breaths, data.duration, config)


def feedback_for(resonance: float) -> str:
    """One-line coaching message for a resonance score."""
    for threshold, message in FEEDBACK_LEVELS:
        if resonance >= threshold:
            return message
    return FEEDBACK_DEFAULT
