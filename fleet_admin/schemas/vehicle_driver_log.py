# fleet_admin/schemas/vehicle_driver_log.py
from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from fleet_admin.schemas.vehicle import DriverRef, _CamelModel

LogStatus = Literal["active", "completed", "terminated"]


class _LogInput(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        allow_inf_nan = False

    @field_validator("reason_for_assignment", "notes", check_fields=False)
    @classmethod
    def _lowercase(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("assignment_start_date", "assignment_end_date", check_fields=False)
    @classmethod
    def _naive_utc(cls, value):
        # stored as naive UTC, like created_at
        if isinstance(value, datetime) and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class DriverLogCreate(_LogInput):
    vehicle_id: int
    employee_id: int
    vehicle_location: str = Field(min_length=1)
    assignment_start_date: Optional[datetime] = None     # defaults to now
    assignment_end_date: Optional[datetime] = None
    reason_for_assignment: Optional[str] = None
    odometer_reading_at_start: Optional[float] = Field(None, ge=0)
    odometer_reading_at_end: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    status: LogStatus = "active"


class DriverLogUpdate(_LogInput):
    vehicle_id: Optional[int] = None
    employee_id: Optional[int] = None
    vehicle_location: Optional[str] = None
    assignment_start_date: Optional[datetime] = None
    assignment_end_date: Optional[datetime] = None
    reason_for_assignment: Optional[str] = None
    odometer_reading_at_start: Optional[float] = Field(None, ge=0)
    odometer_reading_at_end: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None
    status: Optional[LogStatus] = None


class DriverLogComplete(_LogInput):
    odometer_reading_at_end: float = Field(ge=0)
    notes: Optional[str] = None


class VehicleSummary(_CamelModel):
    id: int
    registration_number: str
    make: str
    model: str
    year: int


class DriverLogOut(_CamelModel):
    id: int
    vehicle: Optional[VehicleSummary] = None
    employee: Optional[DriverRef] = None
    vehicle_location: Optional[str] = None
    assignment_start_date: datetime
    assignment_end_date: Optional[datetime] = None
    reason_for_assignment: Optional[str] = None
    odometer_reading_at_start: Optional[float] = None
    odometer_reading_at_end: Optional[float] = None
    notes: Optional[str] = None
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DriverLogDeleted(_CamelModel):
    message: str
    deleted_vehicle_driver_log: DriverLogOut
