import uuid
from typing import Literal, Optional

from pydantic import Field, model_validator

from ..models import ATTENDANCE_STATUSES, BREAK_TYPES
from .base import RequestModel, UtcDatetime


class CheckInIn(RequestModel):
    employee_id: uuid.UUID
    location: Optional[dict] = None
    method: Optional[str] = Field(None, max_length=20)
    notes: Optional[str] = None


class CheckOutIn(CheckInIn):
    pass


class BreakIn(RequestModel):
    start_time: UtcDatetime
    end_time: Optional[UtcDatetime] = None
    type: Literal[BREAK_TYPES] = 'personal'
    notes: Optional[str] = None

    @model_validator(mode='after')
    def check_order(self):
        if self.end_time is not None and self.end_time < self.start_time:
            raise ValueError('endTime must not be before startTime')
        return self


class AttendanceUpdate(RequestModel):
    not_null = ('status', 'date')

    date: Optional[UtcDatetime] = None
    check_in_time: Optional[UtcDatetime] = None
    check_out_time: Optional[UtcDatetime] = None
    status: Optional[Literal[ATTENDANCE_STATUSES]] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class ApprovalIn(RequestModel):
    notes: Optional[str] = None
