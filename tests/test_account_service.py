"""Tests for ``AccountService``."""

import pytest

from lessons_api.app.core.errors import DuplicateEmail, ValidationFailed
from lessons_api.app.services.account_service import AccountService


@pytest.fixture
def accounts(store):
    return AccountService(store)


def test_register_defaults_to_parent(accounts):
    account = accounts.register({"email": " new@example.com ", "password": "pw", "name": "New"})
    assert account.role == "parent"
    assert account.id.startswith("par_")
    assert account.email == "new@example.com"
    assert account.active is True
    assert "password" not in account.public()
    assert account.public()["createdAt"] == account.created_at


def test_register_requires_fields(accounts):
    with pytest.raises(ValidationFailed) as excinfo:
        accounts.register({"email": "x@example.com"})
    assert excinfo.value.fields == ["password", "name"]


def test_email_is_unique_case_insensitively(accounts, parent):
    with pytest.raises(DuplicateEmail):
        accounts.register({"email": "PARENT@example.com", "password": "pw", "name": "Dup"})
    assert accounts.get_by_email("Parent@Example.com") == parent


def test_authenticate_exact_password(accounts, parent):
    assert accounts.authenticate("parent@example.com", "secret") == parent
    assert accounts.authenticate("parent@example.com", "Secret") is None
    assert accounts.authenticate("nobody@example.com", "secret") is None


def test_inactive_accounts_cannot_log_in(store, accounts, parent):
    store.accounts.update(parent.id, {"active": False})
    assert accounts.authenticate("parent@example.com", "secret") is None


def test_set_password(accounts, parent):
    updated = accounts.set_password("PARENT@example.com", "changed")
    assert updated.id == parent.id
    assert accounts.authenticate("parent@example.com", "changed") is not None
    assert accounts.set_password("nobody@example.com", "x") is None
    with pytest.raises(ValidationFailed):
        accounts.set_password("parent@example.com", "")
