"""
Fixed-length breathing session around a BreathStreamProcessor.

A session starts the detector and the audio guide, advances the detector on
every tick, and when the configured duration has elapsed stops the detector
and hands the recorded breaths to the completion callback exactly once.

TickDriver supplies ticks from a background thread for live use; tests and
replays call tick() directly with explicit times.

(c) 2026 Anywave Creations
MIT License
"""

import logging
import threading
from typing import Callable, Optional

from .breath_stream import BreathEvent, BreathStreamProcessor, now_ms
from .config import SessionConfig
from .notifier import Notifier, NullNotifier, TONE_SAMPLE_RATE, safe_notify
from .scorer import SessionData
from .tone_guide import ToneGuide

log = logging.getLogger(__name__)

START_PROMPT = "Begin breathing. Follow the tones."


class BreathingSession:
    """One timed breathing exercise.

    Args:
        config: Duration and tick cadence.
        processor: Breath detector; one is built if omitted.
        notifier: Speech and tone output.
        guide: Tone schedule rendered and played at start; None (the default)
            runs the session without an audio guide.
        on_session_complete: Receives SessionData when the duration elapses.
        clock: Millisecond clock used when tick()/start() get no time.
    """

    def __init__(self,
                 config: Optional[SessionConfig] = None,
                 processor: Optional[BreathStreamProcessor] = None,
                 notifier: Optional[Notifier] = None,
                 guide: Optional[ToneGuide] = None,
                 on_session_complete: Optional[Callable[[SessionData], None]] = None,
                 clock=now_ms):
        self.config = config or SessionConfig()
        self.notifier = notifier or NullNotifier()
        self.processor = processor or BreathStreamProcessor(notifier=self.notifier, clock=clock)
        self.guide = guide
        self.on_session_complete = on_session_complete
        self.clock = clock

        self.started_at: Optional[float] = None
        self.data: Optional[SessionData] = None
        self._elapsed_ms = 0.0
        self._active = False
        self._completed = False

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def is_complete(self) -> bool:
        return self._completed

    def start(self, now: Optional[float] = None) -> None:
        """Reset the detector and begin a new session."""
        self.started_at = self.clock() if now is None else now
        self.data = None
        self._elapsed_ms = 0.0
        self._completed = False
        self.processor.start()
        self._active = True

        if self.guide is not None:
            waveform = self.guide.render(self.config.duration_s, TONE_SAMPLE_RATE)
            safe_notify(self.notifier.tone, waveform, TONE_SAMPLE_RATE)
        safe_notify(self.notifier.speak, START_PROMPT)
        log.info(f'Session started ({self.config.duration_s}s)')

    def on_sample(self, beta: Optional[float]) -> None:
        self.processor.on_sample(beta)

    def tick(self, now: Optional[float] = None) -> Optional[BreathEvent]:
        """Advance the session by one step.

        Returns:
            The breath detected on this tick, if any. Once the duration has
            elapsed the session completes and no further step is run.
        """
        if not self._active:
            return None
        t = self.clock() if now is None else now
        self._elapsed_ms = t - self.started_at
        if self._elapsed_ms >= self.config.duration_s * 1000.0:
            self._complete()
            return None
        return self.processor.step(t)

    def stop(self) -> None:
        """Abandon the session without firing the completion callback."""
        if self._active:
            self._active = False
            self.processor.stop()
            log.info('Session stopped before completion')

    def _complete(self) -> None:
        self._active = False
        self.processor.stop()
        if self._completed:
            return
        self._completed = True
        self.data = SessionData.from_breaths(self.processor.breaths, self.config.duration_s)
        log.info(f'Session complete: {len(self.data.breaths)} breaths')
        if self.on_session_complete is not None:
            self.on_session_complete(self.data)

    @property
    def time_left(self) -> int:
        """Whole seconds remaining, as shown on the countdown clock."""
        return max(0, self.config.duration_s - int(self._elapsed_ms // 1000))

    @property
    def formatted_time(self) -> str:
        minutes, seconds = divmod(self.time_left, 60)
        return f'{minutes:02d}:{seconds:02d}'


class TickDriver:
    """Background thread ticking a session at a steady cadence.

    Stops on its own once the session is no longer active.
    """

    def __init__(self, session: BreathingSession, tick_hz: Optional[float] = None):
        self.session = session
        self.interval = 1.0 / (tick_hz or session.config.tick_hz)
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='breath-tick', daemon=True)
        self._thread.start()

    def _run(self) -> None:
        while not self._stop.is_set() and self.session.is_active:
            self.session.tick()
            self._stop.wait(self.interval)

    def stop(self, timeout: Optional[float] = 2.0) -> None:
        self._stop.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            self._thread.join(timeout)

    def join(self, timeout: Optional[float] = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
