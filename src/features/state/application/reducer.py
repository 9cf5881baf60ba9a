"""
State reducer

reduce(state, action) is pure and total: it never raises, never performs I/O,
and returns the very same state object for anything it does not handle.
Each handled action replaces exactly one slice.
"""
from dataclasses import replace
from typing import Callable, Dict

from src.features.state.domain.actions import Action, ActionType, ManualTimecodePayload
from src.features.state.domain.app_state import AppState, TimecodeMode, TimecodeModeState
from src.shared.domain.entities import User
from src.utils.message import Log


def _collection(slice_name: str) -> Callable[[AppState, Action], AppState]:
    def handler(state: AppState, action: Action) -> AppState:
        if not isinstance(action.payload, (list, tuple)):
            Log.warning(f"Reducer: {action.name} ignored, payload is not a list")
            return state
        return replace(state, **{slice_name: tuple(action.payload)})
    return handler


def _id_list(slice_name: str) -> Callable[[AppState, Action], AppState]:
    def handler(state: AppState, action: Action) -> AppState:
        payload = action.payload
        if not isinstance(payload, (list, tuple, set, frozenset)):
            Log.warning(f"Reducer: {action.name} ignored, payload is not a list of ids")
            return state
        return replace(state, **{slice_name: tuple(payload)})
    return handler


def _string(slice_name: str) -> Callable[[AppState, Action], AppState]:
    def handler(state: AppState, action: Action) -> AppState:
        if not isinstance(action.payload, str):
            Log.warning(f"Reducer: {action.name} ignored, payload is not a string")
            return state
        return replace(state, **{slice_name: action.payload})
    return handler


def _set_user(state: AppState, action: Action) -> AppState:
    if action.payload is not None and not isinstance(action.payload, User):
        Log.warning("Reducer: SET_USER ignored, payload is not a User")
        return state
    return replace(state, current_user=action.payload)


def _set_manual_timecode(state: AppState, action: Action) -> AppState:
    payload = action.payload
    if not isinstance(payload, ManualTimecodePayload) or not payload.is_well_formed():
        Log.warning(f"Reducer: SET_MANUAL_TIMECODE ignored, malformed payload {payload!r}")
        return state

    if payload.is_manual:
        mode_state = TimecodeModeState(
            mode=TimecodeMode.MANUAL,
            anchor_epoch=float(payload.start_epoch),
            base_timecode=payload.base_timecode,
        )
    else:
        mode_state = TimecodeModeState()
    return replace(state, timecode_mode=mode_state)


def _set_recording(state: AppState, action: Action) -> AppState:
    if not isinstance(action.payload, bool):
        Log.warning("Reducer: SET_RECORDING ignored, payload is not a boolean")
        return state
    return replace(state, is_recording=action.payload)


def _toggle_dark_mode(state: AppState, action: Action) -> AppState:
    return replace(state, dark_mode=not state.dark_mode)


_HANDLERS: Dict[ActionType, Callable[[AppState, Action], AppState]] = {
    ActionType.SET_USER: _set_user,
    ActionType.SET_PARTICIPANTS: _collection("participants"),
    ActionType.SET_LOCATIONS: _collection("locations"),
    ActionType.SET_ACTION_CATEGORIES: _collection("action_categories"),
    ActionType.SET_TAGS: _collection("tags"),
    ActionType.SET_LOG_ENTRIES: _collection("log_entries"),
    ActionType.SET_TIMECODE: _string("current_timecode"),
    ActionType.SET_MANUAL_TIMECODE: _set_manual_timecode,
    ActionType.SET_RECORDING: _set_recording,
    ActionType.SET_SELECTED_PARTICIPANTS: _id_list("selected_participants"),
    ActionType.SET_SELECTED_LOCATION: _string("selected_location"),
    ActionType.SET_SELECTED_ACTION: _string("selected_action"),
    ActionType.SET_SELECTED_TAGS: _id_list("selected_tags"),
    ActionType.TOGGLE_DARK_MODE: _toggle_dark_mode,
}


def reduce(state: AppState, action: Action) -> AppState:
    """
    Apply one action to the state.

    Args:
        state: Current state
        action: Action to apply

    Returns:
        A new AppState, or state itself when the action is unknown or
        its payload is unusable.
    """
    action_type = getattr(action, "type", None)
    handler = _HANDLERS.get(action_type) if isinstance(action_type, ActionType) else None
    if handler is None:
        Log.debug(f"Reducer: ignoring unknown action {action!r}")
        return state
    return handler(state, action)
