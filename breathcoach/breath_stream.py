"""
Live breath detection from a single device tilt axis.

A phone resting on the belly tilts forward and back as the abdomen rises and
falls. Each processing step takes the latest tilt sample, removes the
session baseline, smooths it with an exponential moving average and looks
for a rising-to-falling turn in the smoothed trace. A turn that is large
enough and far enough from the previous one is recorded as a breath.

The step logic is a plain function over an explicit ProcessorState so it
can be driven by any tick source. BreathStreamProcessor wraps one state,
accepts samples from a sensor thread and serialises them with ticks.

(c) 2026 Anywave Creations
MIT License
"""

import logging
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from .config import ProcessorConfig
from .notifier import Notifier, NullNotifier, safe_notify

log = logging.getLogger(__name__)


def now_ms() -> float:
    """Monotonic clock in milliseconds."""
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class BreathEvent:
    """One detected breath (the moment the exhale turn was confirmed)."""
    timestamp_ms: float

    def to_dict(self) -> dict:
        return {'timestamp': self.timestamp_ms}


@dataclass
class ProcessorState:
    """Everything the detector remembers between steps.

    Attributes:
        baseline: First raw tilt of the session; fixed once set.
        filtered_value: Last EMA output, None before the first step.
        last_direction: Sign of the previous step's slope (-1, 0, +1).
        last_peak_ms: Time of the last recorded breath.
        signal: Most recent filtered values, oldest first.
        breaths: Every breath recorded this session, in order.
        bpm: Live breaths-per-minute readout.
        steps: Number of steps that produced output.
    """
    signal: Deque[float]
    baseline: Optional[float] = None
    filtered_value: Optional[float] = None
    last_direction: int = 0
    last_peak_ms: Optional[float] = None
    breaths: List[BreathEvent] = field(default_factory=list)
    bpm: float = 0.0
    steps: int = 0

    @classmethod
    def create(cls, max_points: int) -> 'ProcessorState':
        return cls(signal=deque(maxlen=max_points))

    def to_dict(self) -> dict:
        return {
            'baseline': self.baseline,
            'filtered_value': self.filtered_value,
            'last_direction': self.last_direction,
            'last_peak_ms': self.last_peak_ms,
            'signal_length': len(self.signal),
            'breath_count': len(self.breaths),
            'bpm': self.bpm,
            'steps': self.steps,
        }


def _sign(x: float) -> int:
    if x > 0:
        return 1
    if x < 0:
        return -1
    return 0


def update_rate(state: ProcessorState, now: float, window_ms: float) -> float:
    """Recompute the live rate from breaths inside the trailing window.

    With fewer than two breaths in the window (or two at the same instant)
    the previous readout is kept.
    """
    recent = [b.timestamp_ms for b in state.breaths if now - b.timestamp_ms < window_ms]
    if len(recent) > 1:
        seconds = (recent[-1] - recent[0]) / 1000.0
        if seconds > 0:
            state.bpm = (len(recent) - 1) / seconds * 60.0
    return state.bpm


def advance(state: ProcessorState,
            raw: Optional[float],
            now: float,
            config: ProcessorConfig) -> Optional[BreathEvent]:
    """Run one processing step on the latest raw tilt.

    Args:
        state: Detector state, mutated in place.
        raw: Latest tilt in degrees, or None if no sample has arrived yet.
        now: Step time in milliseconds.
        config: Detector parameters.

    Returns:
        The BreathEvent recorded on this step, or None.
    """
    if raw is None:
        return None

    if state.baseline is None:
        state.baseline = raw
    centered = raw - state.baseline

    if state.filtered_value is None:
        filtered = centered
    else:
        filtered = config.alpha * centered + (1.0 - config.alpha) * state.filtered_value
    state.filtered_value = filtered

    # Slope is taken against the second-to-last stored point, one tick behind
    # the value just computed. Detection timing depends on this lag.
    prev = state.signal[-2] if len(state.signal) > 1 else 0.0
    state.signal.append(filtered)
    state.steps += 1

    delta = filtered - prev
    direction = _sign(delta)

    breath = None
    if (direction == -1 and state.last_direction == 1
            and abs(delta) > config.noise_threshold):
        if state.last_peak_ms is None or now - state.last_peak_ms > config.refractory_ms:
            breath = BreathEvent(timestamp_ms=now)
            state.breaths.append(breath)
            state.last_peak_ms = now
    state.last_direction = direction

    update_rate(state, now, config.rate_window_ms)
    return breath


class BreathStreamProcessor:
    """Stateful breath detector fed by a sensor stream and a tick driver.

    Samples and ticks may arrive on different threads; both take the same
    lock so every step sees an ordered, unskipped state.

    Args:
        config: Detector parameters.
        notifier: Receives a haptic pulse per detected breath.
        clock: Millisecond clock used when step() is called without a time.
    """

    def __init__(self,
                 config: Optional[ProcessorConfig] = None,
                 notifier: Optional[Notifier] = None,
                 clock=now_ms):
        self.config = config or ProcessorConfig()
        self.notifier = notifier or NullNotifier()
        self.clock = clock
        self._lock = threading.Lock()
        self._listening = False
        self._raw: Optional[float] = None
        self._state = ProcessorState.create(self.config.max_points)

    @property
    def is_listening(self) -> bool:
        return self._listening

    def start(self) -> None:
        """Reset all detector state and begin accepting samples."""
        with self._lock:
            self._raw = None
            self._state = ProcessorState.create(self.config.max_points)
            self._listening = True
        log.debug('Breath stream started')

    def stop(self) -> None:
        """Stop accepting samples and ticks. Recorded breaths are kept."""
        with self._lock:
            self._listening = False
            count = len(self._state.breaths)
        log.debug(f'Breath stream stopped with {count} breaths')

    def on_sample(self, beta: Optional[float]) -> None:
        """Accept one raw tilt sample (degrees). None samples are ignored."""
        if beta is None:
            return
        with self._lock:
            if not self._listening:
                return
            self._raw = float(beta)
            if self._state.baseline is None:
                self._state.baseline = self._raw

    def step(self, now: Optional[float] = None) -> Optional[BreathEvent]:
        """Run one processing step using the most recent sample."""
        with self._lock:
            if not self._listening:
                return None
            t = self.clock() if now is None else now
            breath = advance(self._state, self._raw, t, self.config)
            bpm = self._state.bpm

        if breath is not None:
            log.debug(f'Breath at {breath.timestamp_ms:.0f}ms, rate={bpm:.1f}BPM')
            safe_notify(self.notifier.haptic, self.config.haptic_ms)
        return breath

    @property
    def baseline(self) -> Optional[float]:
        with self._lock:
            return self._state.baseline

    @property
    def filtered_signal(self) -> List[float]:
        with self._lock:
            return list(self._state.signal)

    @property
    def breaths(self) -> List[BreathEvent]:
        with self._lock:
            return list(self._state.breaths)

    @property
    def breaths_per_minute(self) -> float:
        with self._lock:
            return self._state.bpm

    def snapshot(self) -> dict:
        """Serializable view of the current detector state."""
        with self._lock:
            status = self._state.to_dict()
        status['listening'] = self._listening
        return status
