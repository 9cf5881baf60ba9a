"""
State Store

Holds the single AppState and applies actions to it through the reducer.

All reductions run on the Qt main thread: dispatch() from any other thread
is posted to the main event loop, so producers (clock ticks, sync snapshots,
mutation callbacks) are strictly sequenced and the reducer never runs
concurrently with itself.
"""
from typing import Callable, List, Optional

from PyQt6.QtCore import QObject, pyqtSignal

from src.application.events.event_bus import EventBus, call_on_main_thread, init_event_dispatcher
from src.application.events.events import DarkModeChanged, TimecodeModeChanged
from src.application.settings.dark_mode_setting import BooleanSetting
from src.features.state.application.reducer import reduce
from src.features.state.domain.actions import Action, ActionType
from src.features.state.domain.app_state import AppState
from src.utils.message import Log


StateListener = Callable[[AppState], None]


class Store(QObject):
    """
    Owner of the application state.

    Signals:
        state_changed(AppState): Emitted after every reduction that changed state

    Args:
        dark_mode_setting: Durable flag read once for the initial dark mode
            and written whenever TOGGLE_DARK_MODE is applied
        initial_state: Starting state; defaults to AppState() seeded with
            the stored dark mode
        event_bus: Optional bus for DarkModeChanged/TimecodeModeChanged
    """

    state_changed = pyqtSignal(object)

    def __init__(
        self,
        dark_mode_setting: BooleanSetting,
        initial_state: Optional[AppState] = None,
        event_bus: Optional[EventBus] = None,
        parent=None,
    ):
        super().__init__(parent)
        init_event_dispatcher()
        self._dark_mode_setting = dark_mode_setting
        self._event_bus = event_bus
        self._listeners: List[StateListener] = []
        self._closed = False
        if initial_state is None:
            initial_state = AppState(dark_mode=dark_mode_setting.get())
        self._state = initial_state

    @property
    def state(self) -> AppState:
        return self._state

    @property
    def is_closed(self) -> bool:
        return self._closed

    def dispatch(self, action: Action) -> None:
        """
        Apply an action.

        On the main thread the reduction (and any dark mode write) has
        completed when this returns; from other threads it is queued.
        Actions dispatched after close() are discarded.
        """
        call_on_main_thread(self._apply, action, label=f"Store.dispatch:{getattr(action, 'name', action)}")

    def _apply(self, action: Action) -> None:
        if self._closed:
            Log.debug(f"Store: discarding {getattr(action, 'name', action)} after close")
            return

        previous = self._state
        new_state = reduce(previous, action)
        if new_state is previous:
            return

        if action.type == ActionType.TOGGLE_DARK_MODE and not self._persist_dark_mode(new_state.dark_mode):
            return

        Log.debug(f"Store: dispatch {action.name}")
        self._state = new_state

        if action.type == ActionType.TOGGLE_DARK_MODE and self._event_bus is not None:
            self._event_bus.publish(DarkModeChanged(data={"dark_mode": new_state.dark_mode}))
        elif action.type == ActionType.SET_MANUAL_TIMECODE and self._event_bus is not None:
            mode_state = new_state.timecode_mode
            self._event_bus.publish(TimecodeModeChanged(data={
                "mode": mode_state.mode.value,
                "base_timecode": mode_state.base_timecode,
                "anchor_epoch": mode_state.anchor_epoch,
            }))

        self._notify(new_state)

    def _persist_dark_mode(self, value: bool) -> bool:
        """Write the flag; on failure the toggle is not applied."""
        try:
            self._dark_mode_setting.set(value)
        except Exception as e:
            Log.error(f"Store: Failed to persist dark mode, keeping dark_mode={not value}: {e}")
            return False
        return True

    def _notify(self, state: AppState) -> None:
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception as e:
                Log.error(f"Store: Error in state listener {listener!r}: {e}")
        self.state_changed.emit(state)

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """
        Register a callback invoked with the new state after each change.

        Returns:
            A function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Stop accepting actions. Late dispatches are discarded."""
        if not self._closed:
            self._closed = True
            self._listeners.clear()
            Log.info("Store: Closed")
