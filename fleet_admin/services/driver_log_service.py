# fleet_admin/services/driver_log_service.py
"""
Vehicle-driver assignment log.

Entries are written two ways: directly through the /vehicle-driver-logs API,
and implicitly by the vehicle driver endpoints. Assigning a driver opens an
active entry (terminating any still-open one for that vehicle) and
unassigning completes it. The implicit helpers only stage changes on the
session; the vehicle store commits them with the vehicle.
"""

from datetime import datetime

from sqlalchemy.orm import Session

from fleet_admin.errors import BadRequest, NotFound, ValidationError
from fleet_admin.models.vehicle import Vehicle
from fleet_admin.models.vehicle_driver_log import VehicleDriverLog
from fleet_admin.schemas.vehicle_driver_log import DriverLogComplete, DriverLogCreate, DriverLogUpdate
from fleet_admin.utils.logger import get_logger

logger = get_logger(__name__)

# non-nullable columns an update may not blank out → wire name
_NOT_NULL = {
    "vehicle_id": "vehicleId",
    "employee_id": "employeeId",
    "assignment_start_date": "assignmentStartDate",
    "status": "status",
}


def _check_log(values: dict, current: VehicleDriverLog = None):
    def merged(field):
        return values.get(field, getattr(current, field, None))

    start, end = merged("assignment_start_date"), merged("assignment_end_date")
    if start and end and end < start:
        raise BadRequest("assignmentEndDate must not be before assignmentStartDate")
    at_start, at_end = merged("odometer_reading_at_start"), merged("odometer_reading_at_end")
    if at_start is not None and at_end is not None and at_end < at_start:
        raise BadRequest("Odometer reading at end cannot be less than the reading at start",
                         odometerReadingAtStart=at_start)


def _check_vehicle(db: Session, vehicle_id: int):
    if not db.query(Vehicle.id).filter(Vehicle.id == vehicle_id).first():
        raise ValidationError({"vehicleId": "Vehicle not found"})


def find_logs(db: Session, filters: dict = None) -> list[VehicleDriverLog]:
    """Exact-match filter, newest assignment first."""
    q = db.query(VehicleDriverLog)
    for field, value in (filters or {}).items():
        q = q.filter(getattr(VehicleDriverLog, field) == value)
    return q.order_by(VehicleDriverLog.assignment_start_date.desc(), VehicleDriverLog.id.desc()).all()


def get_log(db: Session, log_id: int) -> VehicleDriverLog:
    log = db.query(VehicleDriverLog).filter(VehicleDriverLog.id == log_id).first()
    if not log:
        raise NotFound("Vehicle driver log")
    return log


def create_log(db: Session, body: DriverLogCreate) -> VehicleDriverLog:
    values = body.model_dump()
    if values["assignment_start_date"] is None:
        values["assignment_start_date"] = datetime.utcnow()
    _check_vehicle(db, values["vehicle_id"])
    _check_log(values)

    log = VehicleDriverLog(**values)
    db.add(log)
    db.commit()
    db.refresh(log)
    logger.info(f"[DRIVER LOGS] Created id={log.id} vehicle={log.vehicle_id} employee={log.employee_id}")
    return log


def update_log(db: Session, log_id: int, body: DriverLogUpdate) -> VehicleDriverLog:
    log = get_log(db, log_id)
    values = body.model_dump(exclude_unset=True)
    blank = {wire: f"{wire} cannot be blank" for field, wire in _NOT_NULL.items()
             if field in values and values[field] is None}
    if blank:
        raise ValidationError(blank)
    if "vehicle_id" in values:
        _check_vehicle(db, values["vehicle_id"])
    _check_log(values, log)

    for field, value in values.items():
        setattr(log, field, value)
    db.commit()
    db.refresh(log)
    logger.info(f"[DRIVER LOGS] Updated id={log.id} fields={sorted(values)}")
    return log


def complete_log(db: Session, log_id: int, body: DriverLogComplete) -> VehicleDriverLog:
    log = get_log(db, log_id)
    if log.status != "active":
        raise BadRequest("Only an active assignment can be completed", status=log.status)
    _check_log({"odometer_reading_at_end": body.odometer_reading_at_end}, log)

    log.status = "completed"
    log.assignment_end_date = datetime.utcnow()
    log.odometer_reading_at_end = body.odometer_reading_at_end
    if body.notes is not None:
        log.notes = body.notes
    db.commit()
    db.refresh(log)
    logger.info(f"[DRIVER LOGS] Completed id={log.id}")
    return log


def delete_log(db: Session, log_id: int) -> VehicleDriverLog:
    log = get_log(db, log_id)
    db.delete(log)
    db.commit()
    logger.info(f"[DRIVER LOGS] Deleted id={log_id}")
    return log


# ── Staged by the vehicle driver endpoints ──────────────────────────────────

def close_assignment(db: Session, vehicle: Vehicle, status: str = "completed") -> int:
    """End every active entry for the vehicle at its current mileage. Returns how many were closed."""
    open_logs = (
        db.query(VehicleDriverLog)
        .filter(VehicleDriverLog.vehicle_id == vehicle.id, VehicleDriverLog.status == "active")
        .all()
    )
    now = datetime.utcnow()
    for log in open_logs:
        log.status = status
        log.assignment_end_date = now
        log.odometer_reading_at_end = vehicle.current_mileage
    return len(open_logs)


def open_assignment(db: Session, vehicle: Vehicle, employee_id: int,
                    location: str = None, reason: str = None) -> VehicleDriverLog:
    closed = close_assignment(db, vehicle, status="terminated")
    if closed:
        logger.info(f"[DRIVER LOGS] Terminated {closed} open assignment(s) for vehicle={vehicle.id}")
    log = VehicleDriverLog(
        vehicle_id=vehicle.id,
        employee_id=employee_id,
        vehicle_location=location.strip() if isinstance(location, str) and location.strip() else None,
        assignment_start_date=datetime.utcnow(),
        reason_for_assignment=reason.strip().lower() if isinstance(reason, str) and reason.strip() else None,
        odometer_reading_at_start=vehicle.current_mileage,
        status="active",
    )
    db.add(log)
    return log
