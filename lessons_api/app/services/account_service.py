"""
Service layer for accounts.

Handles sign-up, login and lookups that happen before a caller has a
role-scoped identity.  Emails are unique across all roles, compared
case-insensitively.  Passwords are stored and compared as given; this
layer does not provide authentication security.
"""

import logging
from typing import Any, List, Mapping, Optional

from ..core.errors import DuplicateEmail, require_fields
from ..core.store import LocalStore, new_id
from ..schemas.account import ID_PREFIXES, Account


class AccountService:
    """Service for creating and looking up accounts."""

    def __init__(self, store: LocalStore) -> None:
        self.store = store

    def get_by_email(self, email: str) -> Optional[Account]:
        wanted = (email or "").strip().lower()
        if not wanted:
            return None
        return self.store.accounts.find(lambda account: account.email.lower() == wanted)

    def get(self, account_id: str) -> Optional[Account]:
        return self.store.accounts.get_by_id(account_id)

    def list_accounts(self, role: Optional[str] = None) -> List[Account]:
        if role:
            return self.store.accounts.filter(lambda account: account.role == role)
        return self.store.accounts.list()

    def register(self, data: Mapping[str, Any]) -> Account:
        """Create an account.

        ``email``, ``password`` and ``name`` are required.  ``role``
        defaults to ``parent``.  Raises ``DuplicateEmail`` when the
        email is already registered.
        """
        logger = logging.getLogger(__name__)
        require_fields(data, "email", "password", "name")
        email = self.check_email(None, data["email"])

        role = data.get("role") or "parent"
        fields = {key: value for key, value in data.items() if value is not None}
        fields.update(email=email, role=role)
        account = self.store.accounts.create(fields, entity_id=new_id(ID_PREFIXES.get(role, "acct")))
        logger.info("Registered %s account %s", role, account.id)
        return account

    def authenticate(self, email: str, password: str) -> Optional[Account]:
        """Return the account when ``password`` matches exactly, else ``None``.

        Deactivated accounts cannot log in.
        """
        account = self.get_by_email(email)
        if account is None or not account.active:
            return None
        if account.password != password:
            return None
        return account

    def set_password(self, email: str, password: str) -> Optional[Account]:
        require_fields({"password": password}, "password")
        account = self.get_by_email(email)
        if account is None:
            return None
        return self.store.accounts.update(account.id, {"password": password})

    def check_email(self, account_id: Optional[str], email: Optional[str]) -> str:
        """Return ``email`` stripped, raising if it is blank or taken by another account."""
        require_fields({"email": email}, "email")
        email = email.strip()
        existing = self.get_by_email(email)
        if existing is not None and existing.id != account_id:
            raise DuplicateEmail(f"An account with email {email} already exists", fields=["email"])
        return email
