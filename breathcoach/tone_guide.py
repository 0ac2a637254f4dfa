"""
Paced-breathing audio guide.

Two sine tones mark a 10 second cycle (6 breaths per minute): a G4 swell
for the inhale, a C4 swell for the exhale. Gains follow piecewise-linear
envelopes that restart every cycle. Each tone swells in over a short ramp at
the start of its phase and fades to silence by the end of it, so only one
tone sounds at a time.

(c) 2026 Anywave Creations
MIT License
"""

from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

INHALE_HZ = 392.00              # G4
EXHALE_HZ = 261.63              # C4
CYCLE_S = 10.0
INHALE_S = 4.0
PEAK_GAIN = 0.3

RAMP_S = 0.5                    # Swell-in time at the start of each phase


class GuidePhase(Enum):
    INHALE = "inhale"
    EXHALE = "exhale"


@dataclass(frozen=True)
class ToneGuide:
    """Inhale/exhale tone schedule.

    Attributes:
        cycle_s: Length of one breath cycle in seconds.
        inhale_s: Portion of the cycle spent inhaling.
    """
    cycle_s: float = CYCLE_S
    inhale_s: float = INHALE_S
    inhale_hz: float = INHALE_HZ
    exhale_hz: float = EXHALE_HZ

    def __post_init__(self):
        if self.cycle_s <= 0 or not 0 < self.inhale_s < self.cycle_s:
            raise ValueError('inhale_s must lie strictly inside a positive cycle_s')

    @property
    def breaths_per_minute(self) -> float:
        return 60.0 / self.cycle_s

    def envelopes(self) -> Tuple[Tuple[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]:
        """(times, gains) breakpoints of the inhale and exhale tones within one cycle."""
        ramp = min(RAMP_S, self.inhale_s / 2, (self.cycle_s - self.inhale_s) / 2)
        inhale = (np.array([0.0, ramp, self.inhale_s, self.cycle_s]),
                  np.array([0.0, PEAK_GAIN, 0.0, 0.0]))
        exhale = (np.array([0.0, self.inhale_s, self.inhale_s + ramp, self.cycle_s]),
                  np.array([0.0, 0.0, PEAK_GAIN, 0.0]))
        return inhale, exhale

    def phase_at(self, t: float) -> GuidePhase:
        """Which half of the cycle the guide is in at t seconds."""
        return GuidePhase.INHALE if (t % self.cycle_s) < self.inhale_s else GuidePhase.EXHALE

    def gains_at(self, t):
        """Inhale and exhale tone gains at time(s) t in seconds."""
        c = np.mod(t, self.cycle_s)
        (ti, gi), (te, ge) = self.envelopes()
        return np.interp(c, ti, gi), np.interp(c, te, ge)

    def render(self, seconds: float, sample_rate: int = 22050) -> np.ndarray:
        """Synthesize the guide as a mono float32 waveform."""
        n = int(round(seconds * sample_rate))
        t = np.arange(n) / sample_rate
        inhale_gain, exhale_gain = self.gains_at(t)
        wave = (inhale_gain * np.sin(2 * np.pi * self.inhale_hz * t)
                + exhale_gain * np.sin(2 * np.pi * self.exhale_hz * t))
        return wave.astype(np.float32)
