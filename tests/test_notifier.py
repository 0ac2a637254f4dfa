"""Tests for notifier implementations and failure isolation."""
import sys
import os
import logging
import time
import types
import pytest
import numpy as np

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from breathcoach.notifier import (
    LoggingNotifier,
    NullNotifier,
    RecordingNotifier,
    SpeechNotifier,
    make_notifier,
    safe_notify,
)


def test_null_notifier_accepts_everything():
    n = NullNotifier()
    n.speak('hello')
    n.haptic(50)
    n.tone(np.zeros(10), 8000)
    n.close()


def test_recording_notifier_order():
    n = RecordingNotifier()
    n.speak('a')
    n.haptic(50)
    n.tone(np.zeros(4), 8000)
    assert n.calls == [('speak', 'a'), ('haptic', 50), ('tone', 4)]
    assert n.of_kind('speak') == ['a']


def test_safe_notify_swallows_and_logs(caplog):
    def speak(text):
        raise RuntimeError('speaker on fire')

    with caplog.at_level(logging.WARNING, logger='breathcoach.notifier'):
        assert safe_notify(speak, 'hi') is False
    assert 'speaker on fire' in caplog.text


def test_safe_notify_success():
    n = RecordingNotifier()
    assert safe_notify(n.haptic, 50) is True
    assert n.of_kind('haptic') == [50]


def test_logging_notifier(caplog):
    with caplog.at_level(logging.INFO, logger='breathcoach.notifier'):
        LoggingNotifier().speak('Begin breathing.')
        LoggingNotifier().haptic(50)
    assert 'speak: Begin breathing.' in caplog.text
    assert 'haptic: 50ms' in caplog.text


@pytest.mark.parametrize('kind,cls', [
    ('speech', SpeechNotifier),
    ('log', LoggingNotifier),
    (None, NullNotifier),
])
def test_make_notifier(kind, cls):
    assert type(make_notifier(kind)) is cls


def test_speech_falls_back_to_logging_without_engine(monkeypatch, caplog):
    # A None entry makes `import pyttsx3` raise ImportError
    monkeypatch.setitem(sys.modules, 'pyttsx3', None)
    n = SpeechNotifier()
    with caplog.at_level(logging.INFO, logger='breathcoach.notifier'):
        n.speak('Session complete.')
        n.speak('Again.')
        n.close()
    assert 'speak: Session complete.' in caplog.text
    assert 'speak: Again.' in caplog.text
    assert caplog.text.count('Speech unavailable') == 1


def test_speech_tone_without_sounddevice(monkeypatch):
    monkeypatch.setitem(sys.modules, 'sounddevice', None)
    n = SpeechNotifier()
    n.tone(np.zeros(100), 8000)
    n.tone(np.zeros(100), 8000)
    n.close()


class SlowEngine:
    """Stands in for a pyttsx3 engine whose runAndWait takes a while."""

    def __init__(self, delay=0.5):
        self.delay = delay
        self.spoken = []

    def setProperty(self, name, value):
        pass

    def say(self, text):
        self.spoken.append(text)

    def runAndWait(self):
        time.sleep(self.delay)

    def stop(self):
        pass


def test_speak_returns_before_engine_finishes(monkeypatch):
    engine = SlowEngine()
    monkeypatch.setitem(sys.modules, 'pyttsx3', types.SimpleNamespace(init=lambda: engine))
    n = SpeechNotifier()
    t0 = time.monotonic()
    n.speak('Begin breathing.')
    n.speak('Again.')
    assert time.monotonic() - t0 < 0.1
    n.close()
    assert engine.spoken == ['Begin breathing.', 'Again.']


def test_speech_engine_failure_is_logged(monkeypatch, caplog):
    engine = SlowEngine(delay=0.0)

    def broken(text):
        raise RuntimeError('no audio device')

    engine.say = broken
    monkeypatch.setitem(sys.modules, 'pyttsx3', types.SimpleNamespace(init=lambda: engine))
    n = SpeechNotifier()
    with caplog.at_level(logging.WARNING, logger='breathcoach.notifier'):
        n.speak('Hello')
        n.close()
    assert 'no audio device' in caplog.text
