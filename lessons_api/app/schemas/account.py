"""
Pydantic models for accounts.

One table holds every role.  Parents fill in ``child_name`` and
``school_year``; tutors fill in ``subjects``, ``rate``, ``commission``
and an approval ``status``.  Unused profile fields stay ``None``.
"""

from typing import ClassVar, Dict, List, Literal, Optional

from pydantic import Field

from .entity import CamelModel, Entity


Role = Literal["parent", "tutor", "student", "admin"]
TutorStatus = Literal["pending", "approved", "rejected", "inactive"]

ID_PREFIXES: Dict[str, str] = {
    "parent": "par",
    "tutor": "tut",
    "student": "stu",
    "admin": "adm",
}


class Account(Entity):
    ID_PREFIX: ClassVar[str] = "acct"

    email: str
    password: str = ""
    role: Role = "parent"
    name: str = ""
    verified: bool = False
    active: bool = True

    # Parent profile
    child_name: Optional[str] = None
    school_year: Optional[str] = None
    phone: Optional[str] = None

    # Tutor profile
    subjects: Optional[List[str]] = None
    rate: Optional[float] = None
    commission: Optional[float] = None
    status: Optional[TutorStatus] = None
    bio: Optional[str] = None

    def public(self) -> dict:
        """Persisted layout without the password."""
        data = self.to_record()
        data.pop("password", None)
        return data


class AccountCreate(CamelModel):
    """Sign-up or admin-created account.

    Every field is optional at the schema level; the service reports
    missing values so the caller gets one consistent error.
    """

    email: Optional[str] = Field(None, examples=["parent@example.com"])
    password: Optional[str] = None
    role: Optional[Role] = None
    name: Optional[str] = Field(None, examples=["Jane Doe"])
    verified: Optional[bool] = None
    child_name: Optional[str] = None
    school_year: Optional[str] = None
    phone: Optional[str] = None
    subjects: Optional[List[str]] = None
    rate: Optional[float] = None
    commission: Optional[float] = None
    status: Optional[TutorStatus] = None
    bio: Optional[str] = None


class AccountUpdate(CamelModel):
    name: Optional[str] = None
    password: Optional[str] = None
    verified: Optional[bool] = None
    active: Optional[bool] = None
    child_name: Optional[str] = None
    school_year: Optional[str] = None
    phone: Optional[str] = None
    subjects: Optional[List[str]] = None
    rate: Optional[float] = None
    commission: Optional[float] = None
    status: Optional[TutorStatus] = None
    bio: Optional[str] = None


class LoginRequest(CamelModel):
    email: str = ""
    password: str = ""
