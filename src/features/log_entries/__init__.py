"""
Log entries feature module.

Handles:
- LogEntryGateway: create, update and delete log entries in the remote store
- Sample reference data for fresh sessions

Writes never touch the Store directly; the Sync Adapter delivers the result.
"""
