"""
Endpoint modules for API v1.

One module per caller: ``auth``, ``admin``, ``parents`` and
``tutors``.  Each defines an ``APIRouter`` that ``router.py``
mounts under its own prefix.
"""
