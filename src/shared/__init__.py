"""
Shared module containing cross-cutting concerns.

Structure:
    shared/
        domain/
            entities/       - Records shared by the state, sync and log entry features

Usage:
    from src.shared.domain.entities import LogEntry, Participant
"""
