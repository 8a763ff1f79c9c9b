import uuid
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from ..models import PAYMENT_METHODS, TRANSACTION_TYPES
from .base import Money, RequestModel, UtcDatetime


class EntryIn(RequestModel):
    account: uuid.UUID
    debit: Money = Decimal('0')
    credit: Money = Decimal('0')
    description: Optional[str] = Field(None, max_length=255)


class TransactionFields(RequestModel):
    not_null = ('date',)

    date: Optional[UtcDatetime] = None
    reference: Optional[str] = Field(None, max_length=100)
    currency: Optional[str] = Field(None, min_length=3, max_length=3)
    customer: Optional[uuid.UUID] = None
    supplier: Optional[uuid.UUID] = None
    invoice: Optional[uuid.UUID] = None
    payment_method: Optional[Literal[PAYMENT_METHODS]] = None
    bank_account: Optional[dict] = None
    attachments: Optional[List[dict]] = None
    notes: Optional[str] = None
    metadata: Optional[dict] = None


class TransactionCreate(TransactionFields):
    description: str = Field(min_length=1, max_length=500)
    type: Literal[TRANSACTION_TYPES]
    entries: List[EntryIn] = Field(min_length=1)


class TransactionUpdate(TransactionFields):
    not_null = ('description', 'type', 'entries', 'date')

    description: Optional[str] = Field(None, min_length=1, max_length=500)
    type: Optional[Literal[TRANSACTION_TYPES]] = None
    entries: Optional[List[EntryIn]] = Field(None, min_length=1)
