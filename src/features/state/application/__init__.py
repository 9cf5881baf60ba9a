"""
Application layer for the state feature.

Contains:
- reduce - the pure reducer
- Store - main-thread owner of AppState
- selectors - read-side helpers (name resolution, feed filtering)
"""
from src.features.state.application.reducer import reduce
from src.features.state.application.store import Store
from src.features.state.application import selectors

__all__ = [
    'reduce',
    'Store',
    'selectors',
]
