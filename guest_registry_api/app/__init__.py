"""
Application package initializer.

This package contains the main entrypoint for the API and all of its
submodules: ``core`` (configuration, logging, store, security),
``schemas`` (pydantic models), ``services`` (validation pipeline and
registration logic) and ``api`` (routers).
"""

from .main import app  # noqa: F401
