"""
Pydantic schema definitions for API payloads.

Schemas describe computed responses only; stored bills are free-form
documents and are passed around as dictionaries.
"""
