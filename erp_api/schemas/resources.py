import uuid
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field

from ..models import (
    MACHINE_CATEGORIES, MACHINE_STATUSES, MAINTENANCE_TYPES, TOOL_CATEGORIES,
    TOOL_CONDITIONS, TOOL_STATUSES, WORKSTATION_STATUSES, WORKSTATION_TYPES,
)
from .base import Money, RequestModel, UtcDatetime

CALENDAR_SCHEDULES = ('daily', 'weekly', 'monthly', 'quarterly', 'annually')


class MachineMaintenanceIn(RequestModel):
    schedule: Optional[Literal[CALENDAR_SCHEDULES]] = None
    last_maintenance: Optional[UtcDatetime] = None
    next_maintenance: Optional[UtcDatetime] = None


class MachineFields(RequestModel):
    model: Optional[str] = Field(None, max_length=100)
    manufacturer: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    status: Optional[Literal[MACHINE_STATUSES]] = None
    location: Optional[dict] = None
    specifications: Optional[dict] = None
    purchase_info: Optional[dict] = None
    maintenance: Optional[MachineMaintenanceIn] = None
    operating_instructions: Optional[str] = None
    safety_requirements: Optional[List[str]] = None
    required_certifications: Optional[List[str]] = None
    notes: Optional[str] = None


class MachineCreate(MachineFields):
    name: str = Field(min_length=1, max_length=100)
    category: Literal[MACHINE_CATEGORIES]


class MachineUpdate(MachineFields):
    not_null = ('name', 'category', 'status')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[Literal[MACHINE_CATEGORIES]] = None
    is_active: Optional[bool] = None


class ToolMaintenanceIn(RequestModel):
    schedule: Optional[Literal[CALENDAR_SCHEDULES + ('as_needed',)]] = None
    last_maintenance: Optional[UtcDatetime] = None
    next_maintenance: Optional[UtcDatetime] = None


class CalibrationIn(RequestModel):
    requires_calibration: Optional[bool] = None
    calibration_interval: Optional[int] = Field(None, ge=1)
    last_calibrated: Optional[UtcDatetime] = None
    next_calibration: Optional[UtcDatetime] = None
    calibration_certificate: Optional[str] = None


class ToolFields(RequestModel):
    tool_number: Optional[str] = Field(None, min_length=1, max_length=50)
    subcategory: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    serial_number: Optional[str] = Field(None, max_length=100)
    condition: Optional[Literal[TOOL_CONDITIONS]] = None
    status: Optional[Literal[TOOL_STATUSES]] = None
    location: Optional[dict] = None
    specifications: Optional[dict] = None
    purchase_info: Optional[dict] = None
    maintenance: Optional[ToolMaintenanceIn] = None
    calibration: Optional[CalibrationIn] = None
    notes: Optional[str] = None


class ToolCreate(ToolFields):
    name: str = Field(min_length=1, max_length=100)
    category: Literal[TOOL_CATEGORIES]


class ToolUpdate(ToolFields):
    not_null = ('name', 'category', 'condition', 'status')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[Literal[TOOL_CATEGORIES]] = None
    is_active: Optional[bool] = None


class WorkstationLocationIn(RequestModel):
    building: Optional[str] = None
    floor: Optional[str] = None
    section: Optional[str] = None


class WorkstationMaintenanceIn(RequestModel):
    schedule: Optional[Literal[('daily', 'weekly', 'monthly', 'quarterly')]] = None
    notes: Optional[str] = None


class WorkstationFields(RequestModel):
    status: Optional[Literal[WORKSTATION_STATUSES]] = None
    location: Optional[WorkstationLocationIn] = None
    capacity: Optional[dict] = None
    equipment: Optional[List[dict]] = None
    operating_hours: Optional[dict] = None
    maintenance: Optional[WorkstationMaintenanceIn] = None
    hourly_rate: Optional[Money] = None
    notes: Optional[str] = None


class WorkstationCreate(WorkstationFields):
    name: str = Field(min_length=1, max_length=100)
    station_number: str = Field(min_length=1, max_length=50)
    type: Literal[WORKSTATION_TYPES]


class WorkstationUpdate(WorkstationFields):
    not_null = ('name', 'station_number', 'type', 'status')

    name: Optional[str] = Field(None, min_length=1, max_length=100)
    station_number: Optional[str] = Field(None, min_length=1, max_length=50)
    type: Optional[Literal[WORKSTATION_TYPES]] = None
    is_active: Optional[bool] = None


class BookingIn(RequestModel):
    job_id: Optional[uuid.UUID] = None
    until: Optional[UtcDatetime] = None
    booked_until: Optional[UtcDatetime] = None


class ToolAssignIn(RequestModel):
    job_id: Optional[uuid.UUID] = None
    expected_return: Optional[UtcDatetime] = None


class ToolReturnIn(RequestModel):
    condition: Optional[Literal[TOOL_CONDITIONS]] = None


class WorkstationReleaseIn(RequestModel):
    job_duration: Optional[float] = Field(None, gt=0)  # minutes


class MaintenanceRecordIn(RequestModel):
    type: Literal[MAINTENANCE_TYPES] = 'preventive'
    description: str = Field(min_length=1)
    cost: Decimal = Field(Decimal('0'), ge=0, max_digits=12, decimal_places=2)
    notes: Optional[str] = None


class WorkstationMaintenanceScheduleIn(RequestModel):
    maintenance_date: Optional[UtcDatetime] = None
    notes: Optional[str] = None


class CalibrateIn(RequestModel):
    calibration_date: Optional[UtcDatetime] = None
    certificate: Optional[str] = None
