# fleet_admin/services/vehicle_service.py
"""
Vehicle store: persistence and schema-level rules for vehicle records.

Every write runs the vehicle request models (required fields, enums,
bounds, lowercase normalisation), the unique-key check on the identification
numbers and the brand/model consistency check. References are stored as ids
and never resolved here; see reference_resolver.
"""

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from fleet_admin.errors import BadRequest, DuplicateKeyError, NotFound, ValidationError
from fleet_admin.models.brand import Brand
from fleet_admin.models.vehicle import Vehicle
from fleet_admin.schemas.vehicle import UNIQUE_FIELDS, WIRE_NAMES, load_vehicle
from fleet_admin.services import driver_log_service
from fleet_admin.utils.logger import get_logger

logger = get_logger(__name__)

POOL_FILTER = {"is_available_for_pool": True, "status": "available"}

# (start, end, wire name of the end field) for each compliance window
_DATE_WINDOWS = (
    ("insurance_start_date", "insurance_end_date", "insuranceEndDate"),
    ("road_worth_start_date", "road_worth_end_date", "roadWorthEndDate"),
)

# ── Checks ───────────────────────────────────────────────────────────────────

def _check_unique(db: Session, values: dict, exclude_id: int = None):
    wanted = {field: values[field] for field in UNIQUE_FIELDS if values.get(field)}
    if not wanted:
        return
    q = db.query(Vehicle).filter(or_(*[getattr(Vehicle, f) == v for f, v in wanted.items()]))
    if exclude_id is not None:
        q = q.filter(Vehicle.id != exclude_id)
    collisions = {}
    for other in q.all():
        for field, value in wanted.items():
            if getattr(other, field) == value:
                collisions[WIRE_NAMES[field]] = value
    if collisions:
        raise DuplicateKeyError(collisions)


def _check_brand_model(db: Session, values: dict, current: Vehicle = None):
    """If brand or model changes, the model must be one the brand offers."""
    if "brand_id" not in values and "model" not in values:
        return
    brand_id = values.get("brand_id", current.brand_id if current else None)
    if brand_id is None:
        return
    model = values.get("model", current.model if current else None)
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise ValidationError({"brand": "Brand not found"})
    if model not in (brand.models or []):
        raise ValidationError({"model": f"Model {model} is not available for brand {brand.name}"})


def check_date_windows(values: dict, current: Vehicle = None):
    """insuranceEndDate / roadWorthEndDate must fall strictly after their start date."""
    for start_field, end_field, wire_name in _DATE_WINDOWS:
        if start_field not in values and end_field not in values:
            continue
        start = values.get(start_field, getattr(current, start_field, None))
        end = values.get(end_field, getattr(current, end_field, None))
        if start and end and end <= start:
            raise BadRequest(f"{wire_name} must be after the start date",
                             details={"start": start.isoformat(), "end": end.isoformat()})


def _check_mileage(vehicle: Vehicle, mileage: float):
    stored = vehicle.current_mileage or 0
    if mileage < stored:
        raise BadRequest("New mileage cannot be less than the current mileage", currentMileage=stored)


def _unique_collisions(error: IntegrityError, vehicle: Vehicle) -> dict:
    """Wire name → value for the identification columns a unique violation names. Empty for other violations."""
    text = str(error.orig).lower()
    if "unique" not in text and "duplicate key" not in text:
        return {}
    return {WIRE_NAMES[field]: getattr(vehicle, field) for field in UNIQUE_FIELDS if field in text}


def _commit(db: Session, vehicle: Vehicle) -> Vehicle:
    try:
        db.commit()
    except IntegrityError as e:
        # read the attempted values before rollback expires them
        collisions = _unique_collisions(e, vehicle)
        db.rollback()
        if not collisions:
            logger.error(f"[VEHICLES] Write rejected by the database: {e.orig}")
            raise
        logger.warning(f"[VEHICLES] Unique constraint rejected write: {e.orig}")
        raise DuplicateKeyError(collisions)
    db.refresh(vehicle)
    return vehicle


# ── Store operations ─────────────────────────────────────────────────────────

def create_vehicle(db: Session, data: dict, pictures: list[str] = None) -> Vehicle:
    values = load_vehicle(data)
    check_date_windows(values)
    _check_unique(db, values)
    _check_brand_model(db, values)

    vehicle = Vehicle(**values, pictures=list(pictures or []))
    db.add(vehicle)
    _commit(db, vehicle)
    logger.info(f"[VEHICLES] Created {vehicle.registration_number} (id={vehicle.id})")
    return vehicle


def get_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()
    if not vehicle:
        raise NotFound("Vehicle")
    return vehicle


def find_vehicles(db: Session, filters: dict = None) -> list[Vehicle]:
    """Exact-match filter over vehicle columns, e.g. {"status": "in-use"} or POOL_FILTER."""
    q = db.query(Vehicle)
    for field, value in (filters or {}).items():
        q = q.filter(getattr(Vehicle, field) == value)
    return q.order_by(Vehicle.id).all()


def update_vehicle(db: Session, vehicle_id: int, data: dict, new_pictures: list[str] = None) -> Vehicle:
    """
    Partial update: only supplied fields change. Runs the same rules as create,
    plus the non-decreasing mileage check. New pictures are appended.
    """
    vehicle = get_vehicle(db, vehicle_id)
    values = load_vehicle(data, partial=True)
    check_date_windows(values, vehicle)
    if values.get("current_mileage") is not None:
        _check_mileage(vehicle, values["current_mileage"])
    _check_unique(db, values, exclude_id=vehicle.id)
    _check_brand_model(db, values, vehicle)

    for field, value in values.items():
        setattr(vehicle, field, value)
    if new_pictures:
        vehicle.pictures = list(vehicle.pictures or []) + list(new_pictures)

    _commit(db, vehicle)
    logger.info(f"[VEHICLES] Updated id={vehicle.id} fields={sorted(values)} +{len(new_pictures or [])} pictures")
    return vehicle


def delete_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    db.delete(vehicle)
    db.commit()
    logger.info(f"[VEHICLES] Deleted id={vehicle_id}")
    return vehicle


# ── Narrow single-field updates ──────────────────────────────────────────────

def set_status(db: Session, vehicle_id: int, status) -> Vehicle:
    if status is None or status == "":
        raise BadRequest("Status is required")
    vehicle = get_vehicle(db, vehicle_id)
    vehicle.status = load_vehicle({"status": status}, partial=True)["status"]
    return _commit(db, vehicle)


def set_mileage(db: Session, vehicle_id: int, mileage) -> Vehicle:
    if mileage is None or mileage == "":
        raise BadRequest("Current mileage is required")
    value = load_vehicle({"currentMileage": mileage}, partial=True)["current_mileage"]
    vehicle = get_vehicle(db, vehicle_id)
    _check_mileage(vehicle, value)
    vehicle.current_mileage = value
    return _commit(db, vehicle)


def remove_picture(db: Session, vehicle_id: int, picture_url: str) -> Vehicle:
    vehicle = get_vehicle(db, vehicle_id)
    vehicle.pictures = [pic for pic in (vehicle.pictures or []) if pic != picture_url]
    return _commit(db, vehicle)


def assign_driver(db: Session, vehicle_id: int, driver_id, location: str = None, reason: str = None) -> Vehicle:
    """Sets the driver, forces status to in-use and opens an assignment log entry."""
    if driver_id is None or driver_id == "":
        raise BadRequest("Driver ID is required")
    driver = load_vehicle({"assignedDriver": driver_id}, partial=True)["assigned_driver_id"]
    vehicle = get_vehicle(db, vehicle_id)
    driver_log_service.open_assignment(db, vehicle, driver, location=location, reason=reason)
    vehicle.assigned_driver_id = driver
    vehicle.status = "in-use"
    _commit(db, vehicle)
    logger.info(f"[VEHICLES] Driver {driver} assigned to id={vehicle_id}")
    return vehicle


def unassign_driver(db: Session, vehicle_id: int) -> Vehicle:
    """Clears the driver, sets status to available and completes the open assignment log entry."""
    vehicle = get_vehicle(db, vehicle_id)
    driver_log_service.close_assignment(db, vehicle)
    vehicle.assigned_driver_id = None
    vehicle.status = "available"
    _commit(db, vehicle)
    logger.info(f"[VEHICLES] Driver unassigned from id={vehicle_id}")
    return vehicle
