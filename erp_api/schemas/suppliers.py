import uuid
from typing import List, Literal, Optional

from pydantic import Field

from ..models import SUPPLIER_STATUSES
from .base import Money, RequestModel
from .customers import EMAIL_PATTERN


class ContactPersonIn(RequestModel):
    first_name: Optional[str] = Field(None, max_length=50)
    last_name: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN)
    phone: Optional[str] = Field(None, max_length=20)


class SupplierBusinessInfoIn(RequestModel):
    company_name: str = Field(min_length=1, max_length=200)
    tax_id: Optional[str] = Field(None, max_length=50)
    registration_number: Optional[str] = Field(None, max_length=50)
    website: Optional[str] = Field(None, max_length=255)


class SupplierAddressIn(RequestModel):
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    country: str = Field(min_length=1)


class SupplierFields(RequestModel):
    code: Optional[str] = Field(None, min_length=1, max_length=20)
    contact_person: Optional[ContactPersonIn] = None
    payment_terms: Optional[int] = Field(None, ge=0)
    credit_limit: Optional[Money] = None
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    status: Optional[Literal[SUPPLIER_STATUSES]] = None
    rating: Optional[float] = Field(None, ge=1, le=5)
    notes: Optional[str] = None
    categories: Optional[List[uuid.UUID]] = None


class SupplierCreate(SupplierFields):
    name: str = Field(min_length=1, max_length=100)
    business_info: SupplierBusinessInfoIn
    address: SupplierAddressIn


class SupplierUpdate(SupplierFields):
    not_null = ('name', 'code', 'business_info', 'address', 'status')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    business_info: Optional[SupplierBusinessInfoIn] = None
    address: Optional[SupplierAddressIn] = None
    is_active: Optional[bool] = None


class RatingIn(RequestModel):
    # Range is checked by the rating operation so the caller gets its specific message.
    rating: float
    reason: Optional[str] = None
