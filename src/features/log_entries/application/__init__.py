"""
Application layer for the log entries feature.
"""
from src.features.log_entries.application.mutation_gateway import (
    ANONYMOUS_USER,
    LogEntryGateway,
    PendingMutation,
)
from src.features.log_entries.application.sample_data import seed_reference_data

__all__ = [
    'ANONYMOUS_USER',
    'LogEntryGateway',
    'PendingMutation',
    'seed_reference_data',
]
