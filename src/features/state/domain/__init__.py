"""
Domain layer for the state feature.

Contains:
- AppState, TimecodeModeState, TimecodeMode - the immutable state aggregate
- Action, ActionType, ManualTimecodePayload - the closed action set
- Action factories (set_participants, set_manual_timecode, ...)

Usage:
    from src.features.state.domain import actions
    store.dispatch(actions.set_timecode("01:00:00:00"))
"""
from src.features.state.domain.app_state import AppState, TimecodeMode, TimecodeModeState
from src.features.state.domain.actions import Action, ActionType, ManualTimecodePayload
from src.features.state.domain import actions

__all__ = [
    'AppState',
    'TimecodeMode',
    'TimecodeModeState',
    'Action',
    'ActionType',
    'ManualTimecodePayload',
    'actions',
]
