"""
Side-effect channel for speech prompts, haptic pulses and guide tones.

The breath pipeline never talks to an output device directly. It calls an
injected Notifier, and every call goes through safe_notify so a failing
speaker or vibration motor can never abort session processing.

(c) 2026 Anywave Creations
MIT License
"""

import logging
import queue
import threading
from typing import Any, Callable, List, Optional, Tuple

import numpy as np

log = logging.getLogger(__name__)

SPEECH_RATE = 165               # pyttsx3 words per minute (~1.1x default)
TONE_SAMPLE_RATE = 22050

_STOP = object()             # Sentinel that ends the speech worker


class Notifier:
    """Fire-and-forget output capability. The base implementation does nothing."""

    def speak(self, text: str) -> None:
        pass

    def haptic(self, duration_ms: int) -> None:
        pass

    def tone(self, waveform: np.ndarray, sample_rate: int) -> None:
        pass

    def close(self) -> None:
        pass


class NullNotifier(Notifier):
    """No-op notifier for headless runs and tests."""


class RecordingNotifier(Notifier):
    """Keeps every call in order so tests can assert on side effects."""

    def __init__(self):
        self.calls: List[Tuple[str, Any]] = []

    def speak(self, text: str) -> None:
        self.calls.append(('speak', text))

    def haptic(self, duration_ms: int) -> None:
        self.calls.append(('haptic', duration_ms))

    def tone(self, waveform: np.ndarray, sample_rate: int) -> None:
        self.calls.append(('tone', len(waveform)))

    def of_kind(self, kind: str) -> List[Any]:
        return [arg for name, arg in self.calls if name == kind]


class LoggingNotifier(Notifier):
    """Writes each notification to the log instead of a device."""

    def speak(self, text: str) -> None:
        log.info(f'speak: {text}')

    def haptic(self, duration_ms: int) -> None:
        log.info(f'haptic: {duration_ms}ms')

    def tone(self, waveform: np.ndarray, sample_rate: int) -> None:
        log.debug(f'tone: {len(waveform) / sample_rate:.1f}s')


class SpeechNotifier(LoggingNotifier):
    """Speaks prompts through pyttsx3 and plays guide tones with sounddevice.

    Speech runs on a single worker thread that owns the pyttsx3 engine;
    speak() only queues the text and returns. Both libraries are imported on
    first use. If either is missing or the device cannot be opened the
    notifier falls back to logging.
    """

    def __init__(self, rate: int = SPEECH_RATE, volume: float = 1.0):
        self.rate = rate
        self.volume = volume
        self._engine = None
        self._speech_failed = False
        self._audio_failed = False
        self._queue: 'queue.Queue' = queue.Queue()
        self._worker: Optional[threading.Thread] = None
        self._worker_lock = threading.Lock()

    def _get_engine(self):
        if self._engine is None and not self._speech_failed:
            try:
                import pyttsx3
                self._engine = pyttsx3.init()
                self._engine.setProperty('rate', self.rate)
                self._engine.setProperty('volume', self.volume)
            except Exception as e:
                log.warning(f'Speech unavailable, logging prompts instead: {e}')
                self._speech_failed = True
        return self._engine

    def _ensure_worker(self) -> None:
        with self._worker_lock:
            if self._worker is None:
                self._worker = threading.Thread(target=self._run, name='speech', daemon=True)
                self._worker.start()

    def _run(self) -> None:
        engine = self._get_engine()
        while True:
            text = self._queue.get()
            if text is _STOP:
                break
            if engine is None:
                LoggingNotifier.speak(self, text)
                continue
            try:
                engine.say(text)
                engine.runAndWait()
            except Exception as e:
                log.warning(f'Speech failed for {text!r}: {e}')

    def speak(self, text: str) -> None:
        self._ensure_worker()
        self._queue.put(text)

    def tone(self, waveform: np.ndarray, sample_rate: int) -> None:
        if self._audio_failed:
            super().tone(waveform, sample_rate)
            return
        try:
            import sounddevice as sd
        except ImportError as e:
            log.warning(f'sounddevice not installed, guide tones disabled: {e}')
            self._audio_failed = True
            return
        # sd.play returns immediately and plays in the background
        sd.play(waveform.astype(np.float32), samplerate=sample_rate)

    def close(self, timeout: Optional[float] = 5.0) -> None:
        """Finish queued prompts, stop the worker and release devices."""
        with self._worker_lock:
            worker, self._worker = self._worker, None
        if worker is not None:
            self._queue.put(_STOP)
            worker.join(timeout)
        if self._engine is not None:
            try:
                self._engine.stop()
            except Exception as e:
                log.debug(f'Speech engine stop failed: {e}')
            self._engine = None
        if not self._audio_failed:
            try:
                import sounddevice as sd
                sd.stop()
            except Exception as e:
                log.debug(f'Audio stop failed: {e}')


def safe_notify(action: Callable[..., None], *args) -> bool:
    """Run a notifier call, logging and swallowing any failure.

    Returns:
        True if the call completed, False if it raised.
    """
    try:
        action(*args)
        return True
    except Exception as e:
        name = getattr(action, '__name__', repr(action))
        log.warning(f'Notifier {name} failed: {e}')
        return False


def make_notifier(kind: Optional[str]) -> Notifier:
    """Build a notifier by name: 'speech', 'log' or None for silent."""
    if kind == 'speech':
        return SpeechNotifier()
    if kind == 'log':
        return LoggingNotifier()
    return NullNotifier()
