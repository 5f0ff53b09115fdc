"""
Service layer.

Each service encapsulates the business rules for one entity kind and
talks to the shared SQLite connection from ``core.db``.
"""
