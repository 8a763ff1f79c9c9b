import uuid
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field

from ..models import CUSTOMER_TYPES, GENDERS, WALLET_ENTRY_TYPES
from .base import Money, RequestModel, UtcDatetime

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


class AddressIn(RequestModel):
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None


class BusinessInfoIn(RequestModel):
    company_name: Optional[str] = Field(None, max_length=200)
    tax_id: Optional[str] = Field(None, max_length=50)
    registration_number: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=255)


class CustomerFields(RequestModel):
    phone: Optional[str] = Field(None, max_length=20)
    date_of_birth: Optional[UtcDatetime] = None
    gender: Optional[Literal[GENDERS]] = None
    avatar: Optional[str] = None
    type: Optional[Literal[CUSTOMER_TYPES]] = None
    business_info: Optional[BusinessInfoIn] = None
    address: Optional[AddressIn] = None
    preferences: Optional[dict] = None
    credit_limit: Optional[Money] = None
    payment_terms: Optional[int] = Field(None, ge=0)
    is_verified: Optional[bool] = None
    notes: Optional[str] = None
    user: Optional[uuid.UUID] = None


class CustomerCreate(CustomerFields):
    first_name: str = Field(min_length=1, max_length=50)
    last_name: str = Field(min_length=1, max_length=50)
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)


class CustomerUpdate(CustomerFields):
    not_null = ('first_name', 'last_name', 'email', 'type')

    first_name: Optional[str] = Field(None, min_length=1, max_length=50)
    last_name: Optional[str] = Field(None, min_length=1, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    is_active: Optional[bool] = None


class WalletEntryIn(RequestModel):
    type: Literal[WALLET_ENTRY_TYPES]
    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    description: Optional[str] = Field(None, max_length=255)
    reference: Optional[str] = Field(None, max_length=100)
