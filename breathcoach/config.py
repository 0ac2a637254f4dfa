"""
Tunable constants for the breath pipeline, scorer and session flow.

Constants are grouped into frozen dataclasses so a processor or session can
be built with overrides in tests while the defaults stay in one place.

(c) 2026 Anywave Creations
MIT License
"""

import os
from dataclasses import dataclass

# --- Processor ---
LOW_PASS_ALPHA = 0.1            # EMA smoothing factor
SIGNAL_MAX_POINTS = 200         # Retained filtered points
NOISE_THRESHOLD = 0.03          # Minimum |delta| at a peak (degrees)
REFRACTORY_MS = 2000            # Minimum spacing between breaths
RATE_WINDOW_MS = 15000          # Trailing window for live BPM
HAPTIC_PULSE_MS = 50            # Vibration length per detected breath

# --- Scorer ---
TARGET_BPM = 6.0                # Resonance breathing target
FREQ_TOLERANCE_BPM = 4.0        # Deviation at which frequency score hits 0
RHYTHM_PENALTY_GAIN = 400.0     # Multiplier on interval coefficient of variation
FREQ_WEIGHT = 0.6
RHYTHM_WEIGHT = 0.4
MIN_BREATHS = 3

# --- Session ---
SESSION_SECONDS = 60
TICK_HZ = 60.0                  # Display-refresh aligned step cadence
FLAT_TOLERANCE_DEG = 5.0        # |beta| and |gamma| below this count as level
HOLD_STEADY_S = 2.0
COUNTDOWN_FROM = 3


@dataclass(frozen=True)
class ProcessorConfig:
    """Parameters of the live breath detector."""
    alpha: float = LOW_PASS_ALPHA
    max_points: int = SIGNAL_MAX_POINTS
    noise_threshold: float = NOISE_THRESHOLD
    refractory_ms: float = REFRACTORY_MS
    rate_window_ms: float = RATE_WINDOW_MS
    haptic_ms: int = HAPTIC_PULSE_MS

    def __post_init__(self):
        if not 0.0 < self.alpha <= 1.0:
            raise ValueError(f'alpha must be in (0, 1], got {self.alpha}')
        if self.max_points < 2:
            raise ValueError(f'max_points must be >= 2, got {self.max_points}')
        if self.refractory_ms < 0 or self.rate_window_ms <= 0:
            raise ValueError('refractory_ms must be >= 0 and rate_window_ms > 0')


@dataclass(frozen=True)
class ScoringConfig:
    """Weights and targets for post-session scoring."""
    target_bpm: float = TARGET_BPM
    freq_tolerance_bpm: float = FREQ_TOLERANCE_BPM
    rhythm_penalty_gain: float = RHYTHM_PENALTY_GAIN
    freq_weight: float = FREQ_WEIGHT
    rhythm_weight: float = RHYTHM_WEIGHT
    min_breaths: int = MIN_BREATHS

    def __post_init__(self):
        if self.freq_tolerance_bpm <= 0:
            raise ValueError('freq_tolerance_bpm must be positive')
        if self.min_breaths < 2:
            raise ValueError('min_breaths must be >= 2 to form an interval')


@dataclass(frozen=True)
class SessionConfig:
    """Session length and pre-session placement settings."""
    duration_s: int = SESSION_SECONDS
    tick_hz: float = TICK_HZ
    flat_tolerance_deg: float = FLAT_TOLERANCE_DEG
    hold_steady_s: float = HOLD_STEADY_S
    countdown_from: int = COUNTDOWN_FROM

    def __post_init__(self):
        if self.duration_s <= 0:
            raise ValueError(f'duration_s must be positive, got {self.duration_s}')
        if self.tick_hz <= 0:
            raise ValueError(f'tick_hz must be positive, got {self.tick_hz}')

    @classmethod
    def from_env(cls) -> 'SessionConfig':
        """Build a config honouring BREATHCOACH_* environment overrides."""
        return cls(
            duration_s=int(os.environ.get('BREATHCOACH_SESSION_SECONDS', SESSION_SECONDS)),
            tick_hz=float(os.environ.get('BREATHCOACH_TICK_HZ', TICK_HZ)),
        )
