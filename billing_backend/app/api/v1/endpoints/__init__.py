"""
Endpoint subpackage.

Each module defines an APIRouter for one concern.  The bill and
comparison routers are aggregated in ``router.py``; the health router
is mounted directly by the application.
"""
