"""
Endpoint subpackage.

Each module in this package defines an APIRouter for one area (guests,
health).  The routers are aggregated in ``router.py`` at the package
level and mounted under ``/api`` by the application.
"""
