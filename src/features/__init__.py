"""
Features module - Vertical Feature Organization

Each feature module contains all related code organized by layer:
- domain/: Entities, value types, interfaces
- application/: Services and pure logic
- infrastructure/: Remote and local implementations

Features:
- state/: Application state, actions, reducer and selectors
- timecode/: Timecode arithmetic and the clock engine
- sync/: Remote document stores and the sync adapter
- log_entries/: Log entry mutations and sample reference data
"""
