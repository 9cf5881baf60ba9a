"""
State feature module.

A single immutable AppState changed only by the pure reducer, held by a
Store that serializes every dispatch onto the main thread.

Usage:
    from src.features.state.domain import actions
    from src.features.state.application import Store

    store = Store(dark_mode_setting)
    store.dispatch(actions.set_tags(tags))
"""
