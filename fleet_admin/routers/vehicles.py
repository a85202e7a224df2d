# fleet_admin/routers/vehicles.py
"""
Vehicle CRUD + narrow update endpoints.

Create/update accept multipart form data (fields + `pictures` files, max 5)
or a JSON body. Every response embeds the department, driver, brand,
insurance and roadworthiness records via the reference resolver.
"""

from fastapi import APIRouter, Body, Depends, Request
from sqlalchemy.orm import Session
from starlette.datastructures import UploadFile

from fleet_admin.database import get_db
from fleet_admin.errors import BadRequest, FleetError
from fleet_admin.schemas.vehicle import VehicleDeleted, VehicleOut
from fleet_admin.services import vehicle_service
from fleet_admin.services.reference_resolver import ReferenceResolver, get_resolver
from fleet_admin.services.upload_service import UploadAdapter, get_upload_adapter
from fleet_admin.services.vehicle_service import POOL_FILTER
from fleet_admin.utils.logger import get_logger

router = APIRouter()
logger = get_logger(__name__)

RESOURCE = "vehicles"
PICTURE_FIELDS = ("pictures", "pictures[]")


async def _read_payload(request: Request) -> tuple[dict, list]:
    """Split the request into plain fields and picture uploads."""
    content_type = request.headers.get("content-type", "")
    if "multipart/form-data" in content_type or "application/x-www-form-urlencoded" in content_type:
        form = await request.form()
        files = [v for k, v in form.multi_items() if k in PICTURE_FIELDS and isinstance(v, UploadFile)]
        data = {k: v for k, v in form.multi_items() if k not in PICTURE_FIELDS and not isinstance(v, UploadFile)}
        return data, files

    if not (await request.body()).strip():
        return {}, []
    try:
        data = await request.json()
    except ValueError:
        raise BadRequest("Request body must be JSON or multipart form data")
    if not isinstance(data, dict):
        raise BadRequest("Request body must be a JSON object")
    return data, []


def _guarded(action: str, fn, *args):
    """Run a narrow update; unexpected failures become a 400 with the raw message."""
    try:
        return fn(*args)
    except FleetError:
        raise
    except Exception as e:
        logger.error(f"[VEHICLES] Failed to {action}: {e}", exc_info=True)
        raise BadRequest(str(e))


# ── Reads ────────────────────────────────────────────────────────────────────

@router.get("/vehicles", response_model=list[VehicleOut], summary="List all vehicles")
def list_vehicles(db: Session = Depends(get_db), resolver: ReferenceResolver = Depends(get_resolver)):
    logger.info("[VEHICLES] Fetching all vehicles")
    return resolver.resolve_many(vehicle_service.find_vehicles(db))


@router.get("/vehicles/pool/available", response_model=list[VehicleOut], summary="Vehicles available for pool use")
def list_pool_vehicles(db: Session = Depends(get_db), resolver: ReferenceResolver = Depends(get_resolver)):
    """Only vehicles flagged isAvailableForPool AND with status 'available'."""
    return resolver.resolve_many(vehicle_service.find_vehicles(db, POOL_FILTER))


@router.get("/vehicles/status/{status}", response_model=list[VehicleOut], summary="Vehicles by status")
def list_by_status(status: str, db: Session = Depends(get_db),
                   resolver: ReferenceResolver = Depends(get_resolver)):
    return resolver.resolve_many(vehicle_service.find_vehicles(db, {"status": status}))


@router.get("/vehicles/department/{department_id}", response_model=list[VehicleOut], summary="Vehicles by department")
def list_by_department(department_id: int, db: Session = Depends(get_db),
                       resolver: ReferenceResolver = Depends(get_resolver)):
    return resolver.resolve_many(vehicle_service.find_vehicles(db, {"department_id": department_id}))


@router.get("/vehicles/driver/{driver_id}", response_model=list[VehicleOut], summary="Vehicles by assigned driver")
def list_by_driver(driver_id: int, db: Session = Depends(get_db),
                   resolver: ReferenceResolver = Depends(get_resolver)):
    return resolver.resolve_many(vehicle_service.find_vehicles(db, {"assigned_driver_id": driver_id}))


@router.get("/vehicles/brand/{brand_id}", response_model=list[VehicleOut], summary="Vehicles by brand")
def list_by_brand(brand_id: int, db: Session = Depends(get_db),
                  resolver: ReferenceResolver = Depends(get_resolver)):
    return resolver.resolve_many(vehicle_service.find_vehicles(db, {"brand_id": brand_id}))


@router.get("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Get a vehicle")
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db),
                resolver: ReferenceResolver = Depends(get_resolver)):
    return resolver.resolve(vehicle_service.get_vehicle(db, vehicle_id))


# ── Writes ───────────────────────────────────────────────────────────────────

@router.post("/vehicles", status_code=201, response_model=VehicleOut, summary="Create a vehicle")
async def create_vehicle(request: Request, db: Session = Depends(get_db),
                         uploads: UploadAdapter = Depends(get_upload_adapter),
                         resolver: ReferenceResolver = Depends(get_resolver)):
    logger.info("[VEHICLES] Creating new vehicle")
    data, files = await _read_payload(request)
    pictures = await uploads.stage(RESOURCE, files)
    try:
        vehicle = vehicle_service.create_vehicle(db, data, pictures)
    except FleetError:
        uploads.discard(pictures)
        raise
    except Exception as e:
        uploads.discard(pictures)
        logger.error(f"[VEHICLES] Failed to create vehicle: {e}", exc_info=True)
        raise BadRequest("Failed to create vehicle.", details=str(e))
    return resolver.resolve(vehicle)


@router.put("/vehicles/{vehicle_id}", response_model=VehicleOut, summary="Update a vehicle")
async def update_vehicle(vehicle_id: int, request: Request, db: Session = Depends(get_db),
                         uploads: UploadAdapter = Depends(get_upload_adapter),
                         resolver: ReferenceResolver = Depends(get_resolver)):
    """Partial update. Newly uploaded pictures are appended to the existing list."""
    logger.info(f"[VEHICLES] Updating vehicle id={vehicle_id}")
    data, files = await _read_payload(request)
    pictures = await uploads.stage(RESOURCE, files)
    try:
        vehicle = vehicle_service.update_vehicle(db, vehicle_id, data, pictures)
    except FleetError:
        uploads.discard(pictures)
        raise
    except Exception as e:
        uploads.discard(pictures)
        logger.error(f"[VEHICLES] Failed to update vehicle {vehicle_id}: {e}", exc_info=True)
        raise BadRequest("Failed to update vehicle.", details=str(e))
    return resolver.resolve(vehicle)


@router.delete("/vehicles/{vehicle_id}", response_model=VehicleDeleted, summary="Delete a vehicle")
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db),
                   uploads: UploadAdapter = Depends(get_upload_adapter),
                   resolver: ReferenceResolver = Depends(get_resolver)):
    """Removes the vehicle's picture files (best-effort) and then the record."""
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    snapshot = resolver.resolve(vehicle)
    uploads.discard(snapshot["pictures"])
    vehicle_service.delete_vehicle(db, vehicle_id)
    return {"message": "Vehicle deleted", "deleted_vehicle": snapshot}


@router.put("/vehicles/{vehicle_id}/status", response_model=VehicleOut, summary="Update vehicle status")
def update_status(vehicle_id: int, body: dict = Body(default={}), db: Session = Depends(get_db),
                  resolver: ReferenceResolver = Depends(get_resolver)):
    vehicle = _guarded("update vehicle status", vehicle_service.set_status, db, vehicle_id, body.get("status"))
    return resolver.resolve(vehicle)


@router.put("/vehicles/{vehicle_id}/mileage", response_model=VehicleOut, summary="Update vehicle mileage")
def update_mileage(vehicle_id: int, body: dict = Body(default={}), db: Session = Depends(get_db),
                   resolver: ReferenceResolver = Depends(get_resolver)):
    """Mileage may only stay the same or go up."""
    vehicle = _guarded("update vehicle mileage", vehicle_service.set_mileage,
                       db, vehicle_id, body.get("currentMileage"))
    return resolver.resolve(vehicle)


@router.put("/vehicles/{vehicle_id}/pictures", response_model=VehicleOut, summary="Remove a picture")
def remove_picture(vehicle_id: int, body: dict = Body(default={}), db: Session = Depends(get_db),
                   uploads: UploadAdapter = Depends(get_upload_adapter),
                   resolver: ReferenceResolver = Depends(get_resolver)):
    picture_url = body.get("pictureUrl")
    if not picture_url:
        raise BadRequest("Picture URL is required")
    vehicle = vehicle_service.get_vehicle(db, vehicle_id)
    if picture_url in (vehicle.pictures or []):
        uploads.discard([picture_url])
    vehicle = _guarded("remove picture", vehicle_service.remove_picture, db, vehicle_id, picture_url)
    return resolver.resolve(vehicle)


@router.put("/vehicles/{vehicle_id}/driver", response_model=VehicleOut, summary="Assign a driver")
def assign_driver(vehicle_id: int, body: dict = Body(default={}), db: Session = Depends(get_db),
                  resolver: ReferenceResolver = Depends(get_resolver)):
    """Sets assignedDriver, forces status to 'in-use' and opens an assignment log entry."""
    vehicle = _guarded("assign driver", vehicle_service.assign_driver, db, vehicle_id, body.get("driverId"),
                       body.get("vehicleLocation"), body.get("reasonForAssignment"))
    return resolver.resolve(vehicle)


@router.delete("/vehicles/{vehicle_id}/driver", response_model=VehicleOut, summary="Unassign the driver")
def unassign_driver(vehicle_id: int, db: Session = Depends(get_db),
                    resolver: ReferenceResolver = Depends(get_resolver)):
    """Clears assignedDriver, resets status to 'available' and completes the open log entry."""
    vehicle = _guarded("unassign driver", vehicle_service.unassign_driver, db, vehicle_id)
    return resolver.resolve(vehicle)
