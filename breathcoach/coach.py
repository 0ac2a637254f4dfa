"""
Screen-level flow: placement, session, score, restart.

BreathCoach routes orientation readings to whichever stage is current and
moves START -> SESSION -> SCORE. Rendering is left to the caller, which
reads `state`, the placement status, the live session readouts and the
final score.

(c) 2026 Anywave Creations
MIT License
"""

import logging
from enum import Enum
from typing import Optional

from .breath_stream import now_ms
from .config import ScoringConfig, SessionConfig
from .notifier import Notifier, NullNotifier, safe_notify
from .placement import PlacementGate
from .scorer import Score, SessionData, score_session_data
from .session import BreathingSession
from .tone_guide import ToneGuide

log = logging.getLogger(__name__)

SCORE_PROMPT = "Session complete. Here is your resonance score."


class AppState(Enum):
    START = "START"
    SESSION = "SESSION"
    SCORE = "SCORE"


class BreathCoach:
    """Drives one user through placement, a timed session and scoring.

    Pass a ToneGuide as `guide` to play the paced-breathing tones during the
    session. Placement advances on orientation readings and on tick(), so a
    countdown still completes while the phone lies still and the sensor
    stops reporting.
    """

    def __init__(self,
                 config: Optional[SessionConfig] = None,
                 scoring: Optional[ScoringConfig] = None,
                 notifier: Optional[Notifier] = None,
                 guide: Optional[ToneGuide] = None,
                 clock=now_ms):
        self.config = config or SessionConfig()
        self.scoring = scoring or ScoringConfig()
        self.notifier = notifier or NullNotifier()
        self.clock = clock

        self.state = AppState.START
        self.session_data: Optional[SessionData] = None
        self.score: Optional[Score] = None
        self._pending_start = False

        self.placement = PlacementGate(self.config, self.notifier, on_ready=self._request_start)
        self.session = BreathingSession(
            config=self.config,
            notifier=self.notifier,
            guide=guide,
            on_session_complete=self._on_session_complete,
            clock=clock,
        )

    def _request_start(self) -> None:
        self._pending_start = True

    def on_orientation(self, beta: Optional[float], gamma: Optional[float] = None,
                       now: Optional[float] = None) -> None:
        """Route one orientation reading to the current stage."""
        t = self.clock() if now is None else now
        if self.state == AppState.START:
            self.placement.update(beta, gamma, t)
            if self._pending_start:
                self.begin_session(t)
        elif self.state == AppState.SESSION:
            self.session.on_sample(beta)

    def begin_session(self, now: Optional[float] = None) -> None:
        """Skip or finish placement and start the timed session."""
        self._pending_start = False
        self.state = AppState.SESSION
        self.session.start(now)

    def tick(self, now: Optional[float] = None) -> None:
        """Advance placement timers or the running session."""
        if self.state == AppState.START:
            t = self.clock() if now is None else now
            self.placement.tick(t)
            if self._pending_start:
                self.begin_session(t)
        elif self.state == AppState.SESSION:
            self.session.tick(now)

    def _on_session_complete(self, data: SessionData) -> None:
        self.session_data = data
        self.score = score_session_data(data, self.scoring)
        self.state = AppState.SCORE
        log.info(f'Score: resonance={self.score.resonance} rhythm={self.score.rhythm} '
                 f'avg={self.score.avg_bpm:.1f}BPM')
        safe_notify(self.notifier.speak, SCORE_PROMPT)

    def restart(self) -> None:
        """Discard the last result and return to placement."""
        self.session.stop()
        self.session_data = None
        self.score = None
        self._pending_start = False
        self.placement.reset()
        self.state = AppState.START

    def status(self) -> dict:
        status = {'state': self.state.value}
        if self.state == AppState.START:
            status['placement'] = self.placement.status.value
            status['message'] = self.placement.status_text
        elif self.state == AppState.SESSION:
            status['time_left'] = self.session.formatted_time
            status['bpm'] = round(self.session.processor.breaths_per_minute, 1)
        elif self.score is not None:
            status.update(self.score.to_dict())
        return status
