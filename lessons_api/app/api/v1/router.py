"""
Top-level router for version 1 of the API.

Routes are grouped by who is calling: sign-up and login, the admin
console, and the parent, tutor and student areas.  Those three carry
the account id in their path.
"""

from fastapi import APIRouter

from .endpoints import admin, auth, parents, students, tutors

router = APIRouter()

router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
router.include_router(parents.router, prefix="/parents", tags=["parents"])
router.include_router(tutors.router, prefix="/tutors", tags=["tutors"])
router.include_router(students.router, prefix="/students", tags=["students"])
