"""
Task subsystem.

Components:
- task_models.py: data structures (Task, User, Priority, TaskStatus, ReminderPayload)
- task_store.py: SQLite-backed storage, the task-mutation rules and the reminder queries
"""
