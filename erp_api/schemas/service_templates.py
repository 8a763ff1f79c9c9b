from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from ..models import PRIORITIES, SERVICE_CATEGORIES
from .base import RequestModel

MAX_DURATION_MINUTES = 10080


class RequiredItemIn(RequestModel):
    name: str = Field(min_length=1)
    quantity: int = Field(1, ge=1)
    optional: bool = False


class TaskIn(RequestModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    estimated_duration: Optional[int] = Field(None, ge=1)
    order: Optional[int] = Field(None, ge=0)
    required: bool = True


class TemplateFields(RequestModel):
    description: Optional[str] = Field(None, max_length=500)
    estimated_cost: Optional[Decimal] = Field(None, ge=0, max_digits=12, decimal_places=2)
    priority: Optional[Literal[PRIORITIES]] = None
    required_tools: Optional[List[RequiredItemIn]] = None
    required_parts: Optional[List[RequiredItemIn]] = None
    tasks: Optional[List[TaskIn]] = None
    notes: Optional[str] = Field(None, max_length=1000)


class TemplateCreate(TemplateFields):
    name: str = Field(min_length=1, max_length=100)
    category: Literal[SERVICE_CATEGORIES]
    estimated_duration: int = Field(ge=1, le=MAX_DURATION_MINUTES)


class TemplateUpdate(TemplateFields):
    not_null = ('name', 'category', 'estimated_duration', 'priority')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[Literal[SERVICE_CATEGORIES]] = None
    estimated_duration: Optional[int] = Field(None, ge=1, le=MAX_DURATION_MINUTES)
    is_active: Optional[bool] = None
