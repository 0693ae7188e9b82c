"""
User Schemas
Pydantic models for user-related data.
"""

import re
import uuid
from datetime import datetime
from typing import Annotated, Optional
from pydantic import (
    AfterValidator, BaseModel, EmailStr, StrictBool, StringConstraints, TypeAdapter, ValidationError,
)

from app.models.user import UserRole
from app.schemas.validation import enforce, rule
from app.utils.password_policy import validate_password

UUID_PATTERN = re.compile(
    r"^[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}$"
)
NAME_MAX_LENGTH = 100
ROLE_VALUES = tuple(role.value for role in UserRole)

_email_adapter = TypeAdapter(EmailStr)


def _is_email_address(value: str) -> bool:
    # EmailStr also accepts "Name <addr>"; only a bare, already-normalized address passes
    try:
        return _email_adapter.validate_python(value) == value
    except ValidationError:
        return False


Email = Annotated[
    str,
    StringConstraints(strip_whitespace=True, to_lower=True),
    enforce(
        rule(_is_email_address, "Invalid email format"),
        rule(lambda v: len(v) <= 255, "Email must not exceed 255 characters"),
    ),
]

Password = Annotated[str, enforce(validate_password)]

Role = Annotated[
    str,
    enforce(rule(lambda v: v in ROLE_VALUES, "Role must be either 'user' or 'admin'")),
]


def _name(label: str, empty_message: str):
    return Annotated[
        str,
        StringConstraints(strip_whitespace=True),
        enforce(
            rule(lambda v: len(v) >= 1, empty_message),
            rule(lambda v: len(v) <= NAME_MAX_LENGTH,
                 f"{label} must not exceed {NAME_MAX_LENGTH} characters"),
        ),
    ]


FirstName = _name("First name", "First name is required")
LastName = _name("Last name", "Last name is required")
FirstNameChange = _name("First name", "First name cannot be empty")
LastNameChange = _name("Last name", "Last name cannot be empty")


class UserCreate(BaseModel):
    email: Email
    password: Password
    first_name: FirstName
    last_name: LastName
    role: Role = UserRole.USER.value


class UserUpdate(BaseModel):
    """All fields optional; an explicit null counts as not supplied."""
    email: Optional[Email] = None
    password: Optional[Password] = None
    first_name: Optional[FirstNameChange] = None
    last_name: Optional[LastNameChange] = None
    role: Optional[Role] = None
    is_active: Optional[StrictBool] = None


class UserListQuery(BaseModel):
    page: Annotated[int, enforce(rule(lambda v: v >= 1, "Page must be at least 1"))] = 1
    limit: Annotated[
        int,
        enforce(
            rule(lambda v: v >= 1, "Limit must be at least 1"),
            rule(lambda v: v <= 100, "Limit cannot exceed 100"),
        ),
    ] = 10


class UserIdParams(BaseModel):
    id: Annotated[
        str,
        enforce(rule(lambda v: bool(UUID_PATTERN.match(v)), "Invalid user ID format")),
        AfterValidator(lambda v: str(uuid.UUID(v))),
    ]


class UserResponse(BaseModel):
    """Outward representation. Never carries the password digest."""
    id: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
