"""
Sign-up and login endpoints for API v1.

Login checks the password by exact match and returns the account
without its password.  No token or session is issued: callers use the
returned account id in the role-scoped routes.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from lessons_api.app.api.deps import call, get_store
from lessons_api.app.core.store import LocalStore
from lessons_api.app.schemas.account import AccountCreate, LoginRequest
from lessons_api.app.services.account_service import AccountService


router = APIRouter()


@router.post("/signup", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
def signup(payload: AccountCreate, store: LocalStore = Depends(get_store)) -> Dict[str, Any]:
    """Register a parent or tutor account.

    Returns 409 if the email is already registered (case-insensitive).
    """
    data = payload.model_dump(exclude_none=True)
    if data.get("role") == "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin accounts cannot sign up")
    account = call(AccountService(store).register, data)
    return account.public()


@router.post("/login", response_model=Dict[str, Any])
def login(payload: LoginRequest, store: LocalStore = Depends(get_store)) -> Dict[str, Any]:
    """Check credentials and return the matching account."""
    account = AccountService(store).authenticate(payload.email, payload.password)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect email or password")
    return account.public()
