"""
Shared FastAPI dependencies.

The application keeps one ``LocalStore`` on ``app.state.store``; these
helpers hand it (or a service bound to it) to route handlers.
"""

from typing import Any, Callable, TypeVar

from fastapi import Depends, HTTPException, Path, Request, status

from ..core.errors import DuplicateEmail
from ..core.store import LocalStore
from ..services.admin_service import AdminService
from ..services.parent_service import ParentService
from ..services.student_service import StudentService
from ..services.tutor_service import TutorService


T = TypeVar("T")


def get_store(request: Request) -> LocalStore:
    return request.app.state.store


def get_admin_service(store: LocalStore = Depends(get_store)) -> AdminService:
    return AdminService(store)


def get_parent_service(
    parent_id: str = Path(..., description="Parent account id"),
    store: LocalStore = Depends(get_store),
) -> ParentService:
    return ParentService(store, parent_id)


def get_tutor_service(
    tutor_id: str = Path(..., description="Tutor account id"),
    store: LocalStore = Depends(get_store),
) -> TutorService:
    return TutorService(store, tutor_id)


def get_student_service(
    student_id: str = Path(..., description="Student account id"),
    store: LocalStore = Depends(get_store),
) -> StudentService:
    return StudentService(store, student_id)


def found(result: T, what: str = "Record") -> T:
    """Return ``result`` or raise 404 when it is ``None``/``False``."""
    if result is None or result is False:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")
    return result


def call(operation: Callable[..., T], *args: Any, **kwargs: Any) -> T:
    """Run a service operation, mapping its errors to HTTP responses."""
    try:
        return operation(*args, **kwargs)
    except DuplicateEmail as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
