import uuid
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from ..models import ACCOUNT_TYPES
from .base import RequestModel


class AccountSettingsIn(RequestModel):
    allow_negative_balance: Optional[bool] = None
    require_approval: Optional[bool] = None


class AccountFields(RequestModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    category: Optional[str] = Field(None, max_length=50)
    parent_account: Optional[uuid.UUID] = None
    description: Optional[str] = Field(None, max_length=500)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    opening_balance: Optional[Decimal] = None
    is_system_account: Optional[bool] = None
    settings: Optional[AccountSettingsIn] = None


class AccountCreate(AccountFields):
    name: str = Field(min_length=1, max_length=100)
    type: Literal[ACCOUNT_TYPES]


class AccountUpdate(AccountFields):
    not_null = ('name', 'type', 'code')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    type: Optional[Literal[ACCOUNT_TYPES]] = None
    is_active: Optional[bool] = None
