"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, SortBy) and the wire format
- task_store.py: SQLite key/value store holding the whole collection
- task_repository.py: CRUD, status changes and view ordering over the store
- task_forms.py: add/edit form validation and payload building
"""
