"""
Clock Engine

Writes the current timecode into the Store on a fixed 33 ms cadence.

AUTO mode shows the local time of day. MANUAL mode shows a timecode that
started at a chosen base value at a chosen instant; each tick recomputes it
from the absolute wall-clock delta, so no error accumulates across ticks.
The mode itself lives in the Store's timecode_mode slice and is read every
tick.
"""
import time
from datetime import datetime
from typing import Callable, Optional

from PyQt6.QtCore import QObject, QTimer, Qt, pyqtSignal

from src.features.state.application.store import Store
from src.features.state.domain import actions
from src.features.state.domain.app_state import TimecodeModeState
from src.features.timecode.domain.timecode import (
    parse_timecode,
    seconds_to_timecode,
    timecode_to_seconds,
    wall_clock_timecode,
)
from src.utils.message import Log


DEFAULT_TICK_INTERVAL_MS = 33


class ClockEngine(QObject):
    """
    Timecode producer with an explicit lifecycle.

    Signals:
        timecode_changed(str): Emitted on every tick with the dispatched timecode
        started(): Timer started
        stopped(): Timer stopped

    Args:
        store: Store receiving SET_TIMECODE / SET_MANUAL_TIMECODE
        interval_ms: Tick period
        now_fn: Wall clock in epoch seconds (injectable for tests)
    """

    timecode_changed = pyqtSignal(str)
    started = pyqtSignal()
    stopped = pyqtSignal()

    def __init__(
        self,
        store: Store,
        interval_ms: int = DEFAULT_TICK_INTERVAL_MS,
        now_fn: Callable[[], float] = time.time,
        parent=None,
    ):
        super().__init__(parent)
        self._store = store
        self._now = now_fn

        self._timer = QTimer(self)
        self._timer.setTimerType(Qt.TimerType.PreciseTimer)
        self._timer.setInterval(interval_ms)
        self._timer.timeout.connect(self.tick)

    @property
    def is_running(self) -> bool:
        return self._timer.isActive()

    @property
    def interval_ms(self) -> int:
        return self._timer.interval()

    def set_interval(self, interval_ms: int) -> None:
        self._timer.setInterval(interval_ms)

    def start(self) -> None:
        """Tick once immediately, then every interval."""
        if self.is_running:
            return
        self.tick()
        self._timer.start()
        Log.info(f"ClockEngine: Started ({self._timer.interval()} ms)")
        self.started.emit()

    def stop(self) -> None:
        if not self.is_running:
            return
        self._timer.stop()
        Log.info("ClockEngine: Stopped")
        self.stopped.emit()

    # =========================================================================
    # Mode transitions
    # =========================================================================

    def set_manual(self, base_timecode: str, anchor_epoch: Optional[float] = None) -> None:
        """
        Enter MANUAL mode.

        Args:
            base_timecode: Timecode shown at the anchor instant
            anchor_epoch: Epoch seconds at which base_timecode applies; defaults to now

        Raises:
            TimecodeFormatError: If base_timecode is malformed. The Store is
                left unchanged.
        """
        parse_timecode(base_timecode)
        if anchor_epoch is None:
            anchor_epoch = self._now()

        self._store.dispatch(actions.set_manual_timecode(True, anchor_epoch, base_timecode))
        Log.info(f"ClockEngine: MANUAL from {base_timecode} at {anchor_epoch:.3f}")
        self.tick()

    def set_auto(self) -> None:
        """Return to AUTO mode, clearing the manual anchor and base."""
        self._store.dispatch(actions.set_manual_timecode(False))
        Log.info("ClockEngine: AUTO")
        self.tick()

    # =========================================================================
    # Ticking
    # =========================================================================

    def compute_timecode(self, mode_state: TimecodeModeState, now: float) -> str:
        """
        Timecode for a given mode at a given instant.

        Args:
            mode_state: The timecode_mode slice
            now: Epoch seconds
        """
        if mode_state.is_manual:
            elapsed = now - mode_state.anchor_epoch
            return seconds_to_timecode(timecode_to_seconds(mode_state.base_timecode) + elapsed)
        return wall_clock_timecode(datetime.fromtimestamp(now))

    def tick(self) -> str:
        """Compute the timecode for now and dispatch it."""
        timecode = self.compute_timecode(self._store.state.timecode_mode, self._now())
        Log.debug(f"ClockEngine: tick {timecode}")
        self._store.dispatch(actions.set_timecode(timecode))
        self.timecode_changed.emit(timecode)
        return timecode
