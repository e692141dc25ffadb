"""
Task subsystem.

Components:
- task_models.py: data structures (Task, MoveDirection)
- similarity.py: near-duplicate matching of task texts
- task_store.py: in-memory, explained task list state machine
- task_scheduler.py: auto-archive timer table + asyncio timer backend
- task_api.py: small high-level helpers used by the presentation layer
"""
