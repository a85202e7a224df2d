# fleet_admin/routers/vehicle_driver_logs.py
"""
Vehicle-driver assignment history.
Every response embeds a vehicle summary and the employee's contact fields.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fleet_admin.database import get_db
from fleet_admin.schemas.vehicle_driver_log import (
    DriverLogComplete, DriverLogCreate, DriverLogDeleted, DriverLogOut, DriverLogUpdate,
)
from fleet_admin.services import driver_log_service
from fleet_admin.services.reference_resolver import ReferenceResolver, get_log_resolver
from fleet_admin.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)


@router.get("/vehicle-driver-logs", response_model=list[DriverLogOut], summary="List assignment logs")
def list_logs(db: Session = Depends(get_db), resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve_many(driver_log_service.find_logs(db))


@router.get("/vehicle-driver-logs/status/active", response_model=list[DriverLogOut],
            summary="Assignments still in progress")
def list_active_logs(db: Session = Depends(get_db), resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve_many(driver_log_service.find_logs(db, {"status": "active"}))


@router.get("/vehicle-driver-logs/vehicle/{vehicle_id}", response_model=list[DriverLogOut],
            summary="Assignment history of a vehicle")
def list_logs_by_vehicle(vehicle_id: int, db: Session = Depends(get_db),
                         resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve_many(driver_log_service.find_logs(db, {"vehicle_id": vehicle_id}))


@router.get("/vehicle-driver-logs/employee/{employee_id}", response_model=list[DriverLogOut],
            summary="Assignment history of an employee")
def list_logs_by_employee(employee_id: int, db: Session = Depends(get_db),
                          resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve_many(driver_log_service.find_logs(db, {"employee_id": employee_id}))


@router.get("/vehicle-driver-logs/{log_id}", response_model=DriverLogOut, summary="Get an assignment log")
def get_log(log_id: int, db: Session = Depends(get_db), resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve(driver_log_service.get_log(db, log_id))


@router.post("/vehicle-driver-logs", status_code=201, response_model=DriverLogOut,
             summary="Record an assignment")
def create_log(body: DriverLogCreate, db: Session = Depends(get_db),
               resolver: ReferenceResolver = Depends(get_log_resolver)):
    logger.info(f"[DRIVER LOGS] Recording assignment vehicle={body.vehicle_id} employee={body.employee_id}")
    return resolver.resolve(driver_log_service.create_log(db, body))


@router.put("/vehicle-driver-logs/{log_id}", response_model=DriverLogOut, summary="Update an assignment log")
def update_log(log_id: int, body: DriverLogUpdate, db: Session = Depends(get_db),
               resolver: ReferenceResolver = Depends(get_log_resolver)):
    return resolver.resolve(driver_log_service.update_log(db, log_id, body))


@router.put("/vehicle-driver-logs/{log_id}/complete", response_model=DriverLogOut,
            summary="Complete an assignment")
def complete_log(log_id: int, body: DriverLogComplete, db: Session = Depends(get_db),
                 resolver: ReferenceResolver = Depends(get_log_resolver)):
    """Marks the entry completed, stamps the end date and records the closing odometer reading."""
    return resolver.resolve(driver_log_service.complete_log(db, log_id, body))


@router.delete("/vehicle-driver-logs/{log_id}", response_model=DriverLogDeleted, summary="Delete an assignment log")
def delete_log(log_id: int, db: Session = Depends(get_db),
               resolver: ReferenceResolver = Depends(get_log_resolver)):
    snapshot = resolver.resolve(driver_log_service.get_log(db, log_id))
    driver_log_service.delete_log(db, log_id)
    return {"message": "Vehicle driver log deleted.", "deleted_vehicle_driver_log": snapshot}
