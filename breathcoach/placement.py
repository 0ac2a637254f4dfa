"""
Pre-session placement check.

Before a session the phone must lie level on the belly. Once both tilt axes
stay within tolerance for the hold period, a spoken 3-2-1 countdown runs
and the session starts when it reaches zero. Tilting away at any point
cancels the hold and the countdown.

(c) 2026 Anywave Creations
MIT License
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .config import SessionConfig
from .notifier import Notifier, NullNotifier, safe_notify

log = logging.getLogger(__name__)


class PlacementStatus(Enum):
    NO_SENSOR = "no_sensor"
    NOT_LEVEL = "not_level"
    HOLDING = "holding"
    COUNTDOWN = "countdown"
    READY = "ready"


STATUS_TEXT = {
    PlacementStatus.NO_SENSOR: "Place phone on your belly...",
    PlacementStatus.NOT_LEVEL: "Level the phone until the ring is green.",
    PlacementStatus.HOLDING: "Hold steady...",
}


def is_flat(beta: Optional[float], gamma: Optional[float], tolerance: float) -> bool:
    if beta is None or gamma is None:
        return False
    return abs(beta) < tolerance and abs(gamma) < tolerance


class PlacementGate:
    """Tracks levelling, the hold period and the start countdown.

    Args:
        config: Tolerance, hold time and countdown length.
        notifier: Speaks each countdown number.
        on_ready: Called once when the countdown reaches zero.
    """

    def __init__(self,
                 config: Optional[SessionConfig] = None,
                 notifier: Optional[Notifier] = None,
                 on_ready: Optional[Callable[[], None]] = None):
        self.config = config or SessionConfig()
        self.notifier = notifier or NullNotifier()
        self.on_ready = on_ready
        self.reset()

    def reset(self) -> None:
        self.beta: Optional[float] = None
        self.gamma: Optional[float] = None
        self.countdown: Optional[int] = None
        self._holding_since: Optional[float] = None
        self._last_count_ms: Optional[float] = None
        self._fired = False

    @property
    def status(self) -> PlacementStatus:
        if self._fired:
            return PlacementStatus.READY
        if self.countdown is not None:
            return PlacementStatus.COUNTDOWN
        if self._holding_since is not None:
            return PlacementStatus.HOLDING
        if self.beta is None:
            return PlacementStatus.NO_SENSOR
        return PlacementStatus.NOT_LEVEL

    @property
    def status_text(self) -> str:
        if self.status in (PlacementStatus.COUNTDOWN, PlacementStatus.READY):
            return str(self.countdown)
        return STATUS_TEXT[self.status]

    def update(self, beta: Optional[float], gamma: Optional[float], now: float) -> PlacementStatus:
        """Feed one orientation reading taken at `now` milliseconds."""
        if self._fired:
            return PlacementStatus.READY
        self.beta, self.gamma = beta, gamma
        return self._advance(now)

    def tick(self, now: float) -> PlacementStatus:
        """Advance the hold and countdown timers against the last reading.

        A phone lying perfectly still may stop producing orientation events;
        ticking keeps the countdown running until new readings arrive.
        """
        if self._fired:
            return PlacementStatus.READY
        if self.beta is None:
            return self.status
        return self._advance(now)

    def _advance(self, now: float) -> PlacementStatus:
        beta, gamma = self.beta, self.gamma
        if not is_flat(beta, gamma, self.config.flat_tolerance_deg):
            if self._holding_since is not None or self.countdown is not None:
                log.debug('Device tilted, placement reset')
            self._holding_since = None
            self.countdown = None
            return self.status

        if self.countdown is None:
            if self._holding_since is None:
                self._holding_since = now
            elif now - self._holding_since >= self.config.hold_steady_s * 1000.0:
                self._holding_since = None
                self.countdown = self.config.countdown_from
                self._last_count_ms = now
                safe_notify(self.notifier.speak, str(self.countdown))
            return self.status

        while self.countdown > 0 and now - self._last_count_ms >= 1000.0:
            self.countdown -= 1
            self._last_count_ms += 1000.0
            if self.countdown > 0:
                safe_notify(self.notifier.speak, str(self.countdown))

        if self.countdown == 0:
            self._fired = True
            log.info('Placement confirmed, starting session')
            if self.on_ready is not None:
                self.on_ready()
        return self.status
