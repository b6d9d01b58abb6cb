"""
Application package initializer.

The package is split into ``core`` (configuration, logging, database
and shared helpers), ``services`` (the bill store and the analytics
engine), ``schemas`` (response models) and ``api`` (FastAPI routers).
"""

from .main import app  # noqa: F401
