import uuid
from typing import List, Literal, Optional

from pydantic import Field

from ..models import PRIORITIES, TICKET_CATEGORIES, TICKET_STATUSES, TICKET_TYPES
from .base import RequestModel


class SlaIn(RequestModel):
    response_time: Optional[int] = Field(None, ge=1)
    resolution_time: Optional[int] = Field(None, ge=1)


class TicketFields(RequestModel):
    assigned_to: Optional[uuid.UUID] = None
    priority: Optional[Literal[PRIORITIES]] = None
    type: Optional[Literal[TICKET_TYPES]] = None
    attachments: Optional[List[dict]] = None
    tags: Optional[List[str]] = None
    sla: Optional[SlaIn] = None


class TicketCreate(TicketFields):
    subject: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    customer: uuid.UUID
    category: Literal[TICKET_CATEGORIES]


class TicketUpdate(TicketFields):
    not_null = ('subject', 'description', 'category', 'priority', 'type')

    subject: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[Literal[TICKET_CATEGORIES]] = None
    is_active: Optional[bool] = None


class ConversationIn(RequestModel):
    message: str = Field(min_length=1)
    is_internal: bool = False
    attachments: Optional[List[dict]] = None


class AssignIn(RequestModel):
    assigned_to: uuid.UUID


class StatusIn(RequestModel):
    status: Literal[TICKET_STATUSES]


class SatisfactionIn(RequestModel):
    # Range is checked by the rating operation so the caller gets its specific message.
    rating: float
    feedback: Optional[str] = None
