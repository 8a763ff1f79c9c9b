import uuid
from decimal import Decimal
from typing import Optional

from pydantic import Field

from .base import RequestModel, UtcDatetime
from .customers import EMAIL_PATTERN


class UserFields(RequestModel):
    phone: Optional[str] = Field(None, max_length=20)
    avatar: Optional[str] = None
    department: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    hire_date: Optional[UtcDatetime] = None
    salary: Optional[Decimal] = Field(None, ge=0)
    address: Optional[dict] = None
    preferences: Optional[dict] = None


class UserCreate(UserFields):
    audit_exclude = {'password'}

    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=6)
    # Free text; aliases and membership are resolved by the create operation.
    role: Optional[str] = None
    warehouse: Optional[uuid.UUID] = None


class UserUpdate(UserFields):
    """Admin-side update. Password changes never go through this path."""
    model_config = {'extra': 'ignore'}
    not_null = ('first_name', 'last_name', 'email', 'role')

    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    role: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(UserFields):
    """Self-service update; password, role and isActive are dropped."""
    model_config = {'extra': 'ignore'}
    not_null = ('first_name', 'last_name', 'email')

    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)


class LoginIn(RequestModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class ChangePasswordIn(RequestModel):
    audit_exclude = {'current_password', 'new_password'}

    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6)
