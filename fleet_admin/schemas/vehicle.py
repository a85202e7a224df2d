# fleet_admin/schemas/vehicle.py
"""
Vehicle request models (input side) and response DTOs (output side).

VehicleCreate / VehicleUpdate hold every field constraint of a vehicle record:
required fields, enums, bounds and lowercase normalisation. load_vehicle()
runs one of them over a raw payload (JSON body or form fields) before every
create/update. Both sides use camelCase aliases on the wire.
"""

from datetime import date, datetime
from typing import Any, ClassVar, Literal, Optional

from pydantic import BaseModel, Field, ValidationInfo, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from fleet_admin.config import settings
from fleet_admin.errors import ValidationError
from fleet_admin.schemas.brand import BrandOut

VehicleType = Literal["sedan", "suv", "truck", "van", "pickup", "minivan", "bus", "motorcycle",
                      "utility", "coupe", "saloon"]
VehicleStatus = Literal["active", "available", "in-use", "maintenance", "out-of-service", "retired",
                        "reserved", "auctioned", "sold", "disposed off"]
VehicleCondition = Literal["new", "used", "damaged", "salvage", "repaired", "refurbished"]
OwnershipType = Literal["owned", "leased", "rented", "financed", "borrowed", "shared"]
TransmissionType = Literal["automatic", "manual", "semi-automatic", "cvt"]
FuelType = Literal["diesel", "petrol", "electric", "hybrid", "compressed natural gas", "biofuel",
                   "ethanol", "propane", "hydrogen"]
WeightUnit = Literal["kg", "grams", "tons"]

# Fields that must be unique across all vehicles
UNIQUE_FIELDS = ("registration_number", "vin_number", "plate_number")

LOWERCASE_FIELDS = {
    "registration_number", "vin_number", "plate_number", "vehicle_type", "make", "model",
    "fuel_type", "transmission_type", "colour", "engine_description", "description",
}

DATE_FIELDS = {
    "purchase_date", "insurance_start_date", "insurance_end_date",
    "road_worth_start_date", "road_worth_end_date",
}

# Optional fields with no enum and no default: a blank value on update clears them
CLEARABLE_FIELDS = {
    "brand_id", "seating_capacity", "weight", "colour", "engine_description", "department_id",
    "assigned_driver_id", "purchase_date", "purchase_price", "insurance_id", "insurance_start_date",
    "insurance_end_date", "road_worth_id", "road_worth_start_date", "road_worth_end_date", "description",
}


def max_vehicle_year() -> int:
    return datetime.utcnow().year + 1


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class _CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ── Input ────────────────────────────────────────────────────────────────────

class VehicleCreate(BaseModel):
    # Form fields arrive as strings; blank ones count as not supplied
    BLANK_IS_UNSET: ClassVar[bool] = True

    registration_number: str
    vin_number: str
    plate_number: str

    vehicle_type: VehicleType
    make: str
    model: str
    year: int = Field(ge=settings.VEHICLE_MIN_YEAR)
    brand_id: Optional[int] = Field(None, alias="brand")

    fuel_type: FuelType
    transmission_type: Optional[TransmissionType] = None
    seating_capacity: Optional[int] = Field(None, ge=1)
    weight: Optional[float] = Field(None, ge=0)
    weight_unit: WeightUnit = "kg"
    colour: Optional[str] = None
    engine_description: Optional[str] = None

    status: VehicleStatus = "active"
    ownership_type: OwnershipType = "owned"
    condition: VehicleCondition = "new"
    department_id: Optional[int] = Field(None, alias="department")
    assigned_driver_id: Optional[int] = Field(None, alias="assignedDriver")
    is_available_for_pool: bool = True

    current_mileage: float = Field(0, ge=0)
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = Field(None, ge=0)

    insurance_id: Optional[int] = Field(None, alias="insurance")
    insurance_start_date: Optional[date] = None
    insurance_end_date: Optional[date] = None
    road_worth_id: Optional[int] = Field(None, alias="roadWorth")
    road_worth_start_date: Optional[date] = None
    road_worth_end_date: Optional[date] = None

    description: Optional[str] = None

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        allow_inf_nan = False
        extra = "ignore"

    @model_validator(mode="before")
    @classmethod
    def _blank_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = {}
        for key, value in data.items():
            if _is_blank(value):
                if cls.BLANK_IS_UNSET:
                    continue
                value = None
            cleaned[key] = value
        return cleaned

    @field_validator("*", mode="before")
    @classmethod
    def _normalise(cls, value: Any, info: ValidationInfo) -> Any:
        name = info.field_name
        if isinstance(value, str):
            value = value.strip()
            if name in LOWERCASE_FIELDS:
                value = value.lower()
            elif name in DATE_FIELDS and "T" in value:
                value = datetime.fromisoformat(value.replace("Z", "+00:00")).date()
        elif isinstance(value, datetime) and name in DATE_FIELDS:
            value = value.date()
        if value is None and name not in CLEARABLE_FIELDS:
            raise ValueError(f"{cls.model_fields[name].alias} cannot be blank")
        return value

    @field_validator("year")
    @classmethod
    def _not_after_next_year(cls, value: Optional[int]) -> Optional[int]:
        upper = max_vehicle_year()
        if value is not None and value > upper:
            raise ValueError(f"year ({value}) is more than maximum allowed value ({upper})")
        return value


class VehicleUpdate(VehicleCreate):
    """Every field optional; only the supplied ones are applied."""

    # A blank value is an explicit clear, rejected unless the field is clearable
    BLANK_IS_UNSET: ClassVar[bool] = False

    registration_number: Optional[str] = None
    vin_number: Optional[str] = None
    plate_number: Optional[str] = None
    vehicle_type: Optional[VehicleType] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = Field(None, ge=settings.VEHICLE_MIN_YEAR)
    fuel_type: Optional[FuelType] = None


def load_vehicle(data: dict, partial: bool = False) -> dict:
    """
    Validate a raw vehicle payload and return its values keyed by column name.

    partial=False (create): defaults are filled in and required fields enforced.
    partial=True (update): only the supplied fields come back.
    """
    schema = VehicleUpdate if partial else VehicleCreate
    try:
        body = schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e)
    return body.model_dump(exclude_unset=partial)


WIRE_NAMES = {name: field.alias or name for name, field in VehicleCreate.model_fields.items()}


# ── Output ───────────────────────────────────────────────────────────────────

class DepartmentRef(_CamelModel):
    id: int
    name: str
    description: Optional[str] = None
    head: Optional[int] = None


class DriverRef(_CamelModel):
    id: int
    first_name: str
    last_name: str
    staff_number: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None


class InsuranceRef(_CamelModel):
    id: int
    policy_number: str
    provider: str
    insurance_type: str
    coverage_amount: float
    description: Optional[str] = None


class RoadWorthRef(_CamelModel):
    id: int
    certificate_number: str
    issued_by: str
    notes: Optional[str] = None


class VehicleOut(_CamelModel):
    id: int
    registration_number: str
    vin_number: str
    plate_number: str
    vehicle_type: str
    make: str
    model: str
    year: int
    brand: Optional[BrandOut] = None
    fuel_type: str
    transmission_type: Optional[str] = None
    seating_capacity: Optional[int] = None
    weight: Optional[float] = None
    weight_unit: Optional[str] = None
    colour: Optional[str] = None
    engine_description: Optional[str] = None
    status: str
    ownership_type: Optional[str] = None
    condition: Optional[str] = None
    department: Optional[DepartmentRef] = None
    assigned_driver: Optional[DriverRef] = None
    is_available_for_pool: bool
    current_mileage: float
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    insurance: Optional[InsuranceRef] = None
    insurance_start_date: Optional[date] = None
    insurance_end_date: Optional[date] = None
    road_worth: Optional[RoadWorthRef] = None
    road_worth_start_date: Optional[date] = None
    road_worth_end_date: Optional[date] = None
    pictures: list[str] = []
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class VehicleDeleted(_CamelModel):
    message: str
    deleted_vehicle: VehicleOut
