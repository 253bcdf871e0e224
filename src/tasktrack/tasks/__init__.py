"""
Task subsystem.

Components:
- task_models.py: data structures (Task, Priority)
- task_codec.py: JSON record <-> Task conversion
- task_storage.py: JSON file persistence, corruption backup, archive
- task_timer.py: per-task start/stop time tracking
- task_store.py: in-memory collection, identifier resolution, mutations
- task_query.py: read-only filters, sorting and summaries
"""
