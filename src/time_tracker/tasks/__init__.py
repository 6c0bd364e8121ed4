"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, Outcome, Failure)
- lifecycle.py: transition rules and duration computation
- lock_registry.py: fixed pool of per-task locks
- task_store.py: SQLite-backed storage
- coordinator.py: thread-safe operations used by the front end
"""
