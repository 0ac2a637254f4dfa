"""
BreathCoach: tilt-based breath detection and resonance scoring.

A phone resting on the belly reports its forward tilt. This package turns
that single angle into breath events in real time and scores a finished
session on how close it came to slow, even resonance breathing.

Key Components:
    BreathStreamProcessor: Live detector (baseline, EMA filter, peak picking)
    score_session: Post-session resonance/rhythm scoring
    BreathingSession: 60 second session with completion callback
    BreathCoach: Placement -> session -> score flow
    Notifier: Injected speech/haptic/tone output

Example:
    >>> from breathcoach import BreathStreamProcessor, score_session
    >>> proc = BreathStreamProcessor()
    >>> proc.start()
    >>> proc.on_sample(12.5)
    >>> proc.step(now=0.0)
    >>> score = score_session(proc.breaths, duration=60)

(c) 2026 Anywave Creations
MIT License
"""

from .config import (
    ProcessorConfig,
    ScoringConfig,
    SessionConfig,
)

from .breath_stream import (
    BreathEvent,
    ProcessorState,
    BreathStreamProcessor,
    advance,
    update_rate,
)

from .scorer import (
    Score,
    SessionData,
    score_session,
    score_session_data,
    feedback_for,
)

from .notifier import (
    Notifier,
    NullNotifier,
    RecordingNotifier,
    LoggingNotifier,
    SpeechNotifier,
    safe_notify,
    make_notifier,
)

from .tone_guide import (
    GuidePhase,
    ToneGuide,
)

from .placement import (
    PlacementGate,
    PlacementStatus,
    is_flat,
)

from .session import (
    BreathingSession,
    TickDriver,
)

from .coach import (
    AppState,
    BreathCoach,
)

__all__ = [
    # Config
    'ProcessorConfig',
    'ScoringConfig',
    'SessionConfig',
    # Detection
    'BreathEvent',
    'ProcessorState',
    'BreathStreamProcessor',
    'advance',
    'update_rate',
    # Scoring
    'Score',
    'SessionData',
    'score_session',
    'score_session_data',
    'feedback_for',
    # Output
    'Notifier',
    'NullNotifier',
    'RecordingNotifier',
    'LoggingNotifier',
    'SpeechNotifier',
    'safe_notify',
    'make_notifier',
    'GuidePhase',
    'ToneGuide',
    # Flow
    'PlacementGate',
    'PlacementStatus',
    'is_flat',
    'BreathingSession',
    'TickDriver',
    'AppState',
    'BreathCoach',
]

__version__ = '0.1.0'
