"""
Pydantic schema definitions for API payloads.

Schemas are separated from the store so the API representation of a
guest (camelCase aliases, public projection) stays decoupled from how
records are persisted.
"""
