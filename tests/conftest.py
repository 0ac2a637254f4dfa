"""Shared fixtures for breath coach tests."""
import sys
import os
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from breathcoach.breath_stream import BreathStreamProcessor
from breathcoach.config import ProcessorConfig
from breathcoach.notifier import RecordingNotifier


def make_square_wave(period_ms=10000, tick_ms=50, seconds=60, amplitude=10.0, offset=20.0):
    """(t_ms, tilt) pairs of an idealised breath: low half first, then high half."""
    samples = []
    for k in range(int(seconds * 1000 / tick_ms)):
        t = k * tick_ms
        low = (t % period_ms) < period_ms / 2
        samples.append((t, offset - amplitude if low else offset + amplitude))
    return samples


@pytest.fixture
def square_wave():
    return make_square_wave


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def processor(recorder):
    proc = BreathStreamProcessor(notifier=recorder)
    proc.start()
    return proc


@pytest.fixture
def unfiltered_processor(recorder):
    """Processor with alpha=1 so the filtered trace equals the centered input."""
    proc = BreathStreamProcessor(config=ProcessorConfig(alpha=1.0), notifier=recorder)
    proc.start()
    return proc


def feed(proc, samples):
    """Deliver each (t_ms, tilt) sample followed by one step at the same time."""
    detected = []
    for t, raw in samples:
        proc.on_sample(raw)
        breath = proc.step(t)
        if breath is not None:
            detected.append(breath)
    return detected


@pytest.fixture
def feed_samples():
    return feed
