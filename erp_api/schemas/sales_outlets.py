import uuid
from typing import Literal, Optional

from pydantic import Field

from ..models import OUTLET_TYPES
from .base import RequestModel
from .customers import AddressIn


class OutletFields(RequestModel):
    type: Optional[Literal[OUTLET_TYPES]] = None
    description: Optional[str] = None
    address: Optional[AddressIn] = None
    contact: Optional[dict] = None
    warehouse: Optional[uuid.UUID] = None
    manager: Optional[uuid.UUID] = None
    operating_hours: Optional[dict] = None
    settings: Optional[dict] = None


class OutletCreate(OutletFields):
    outlet_code: str = Field(min_length=1, max_length=20)
    name: str = Field(min_length=1, max_length=100)


class OutletUpdate(OutletFields):
    not_null = ('outlet_code', 'name', 'type')

    outlet_code: Optional[str] = Field(None, min_length=1, max_length=20)
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    is_active: Optional[bool] = None
