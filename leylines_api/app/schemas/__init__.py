"""
Pydantic schema definitions for API payloads.

Schemas are separated from the SQLite rows so that the wire format
(camelCase JSON) stays independent of the storage layout.
"""
