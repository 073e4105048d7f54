"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, MoveRecord, FilterState)
- task_store.py: canonical in-memory collection + gateway mutations
- task_filters.py: pure per-column derivation (status + created-date filters)
- task_moves.py: drag/drop state machine with optimistic status changes
"""
