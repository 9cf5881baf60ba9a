"""
Infrastructure layer - External concerns

This layer contains:
- SQLite database management
- Preferences repository
"""
