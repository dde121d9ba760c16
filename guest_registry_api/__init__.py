"""
Top‑level package for the Guest Registry API.

This file makes ``guest_registry_api`` a Python package so that
modules within ``app`` can be imported using fully qualified names
like ``guest_registry_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
