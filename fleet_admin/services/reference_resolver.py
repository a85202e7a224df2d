# fleet_admin/services/reference_resolver.py
"""
Read-time reference resolution for vehicle and driver-log responses.

A vehicle row holds plain ids for its department, driver, brand, insurance and
roadworthiness records; a driver-log row holds the vehicle and employee ids.
The resolver swaps each id for the projected fields of the referenced record,
fetched through an injected lookup callable (id → dict | None). Missing records resolve to None.
"""

from typing import Callable, Optional

from fastapi import Depends
from sqlalchemy.orm import Session

from fleet_admin.database import get_db
from fleet_admin.models.brand import Brand
from fleet_admin.models.department import Department
from fleet_admin.models.employee import Employee
from fleet_admin.models.insurance import Insurance
from fleet_admin.models.road_worth import RoadWorth
from fleet_admin.models.vehicle import Vehicle
from fleet_admin.models.vehicle_driver_log import VehicleDriverLog

Lookup = Callable[[int], Optional[dict]]

# response key → id column on the vehicle
REFERENCE_FIELDS = {
    "department": "department_id",
    "assigned_driver": "assigned_driver_id",
    "brand": "brand_id",
    "insurance": "insurance_id",
    "road_worth": "road_worth_id",
}

LOG_REFERENCE_FIELDS = {
    "vehicle": "vehicle_id",
    "employee": "employee_id",
}

# response key → {output field: model attribute}
PROJECTIONS = {
    "department": (Department, {"id": "id", "name": "name", "description": "description", "head": "head_id"}),
    "assigned_driver": (Employee, {"id": "id", "first_name": "first_name", "last_name": "last_name",
                                   "staff_number": "staff_number", "email": "email",
                                   "phone_number": "phone_number"}),
    "brand": (Brand, {"id": "id", "name": "name", "logo": "logo", "models": "models"}),
    "insurance": (Insurance, {"id": "id", "policy_number": "policy_number", "provider": "provider",
                              "insurance_type": "insurance_type", "coverage_amount": "coverage_amount",
                              "description": "description"}),
    "road_worth": (RoadWorth, {"id": "id", "certificate_number": "certificate_number",
                               "issued_by": "issued_by", "notes": "notes"}),
    "vehicle": (Vehicle, {"id": "id", "registration_number": "registration_number", "make": "make",
                          "model": "model", "year": "year"}),
    "employee": (Employee, {"id": "id", "first_name": "first_name", "last_name": "last_name",
                            "staff_number": "staff_number", "email": "email",
                            "phone_number": "phone_number"}),
}


def _projected_lookup(db: Session, model, fields: dict) -> Lookup:
    def lookup(ref_id: int) -> Optional[dict]:
        row = db.query(model).filter(model.id == ref_id).first()
        if row is None:
            return None
        return {out: getattr(row, attr) for out, attr in fields.items()}
    return lookup


def db_lookups(db: Session) -> dict[str, Lookup]:
    """Lookups backed by the collaborator tables."""
    return {key: _projected_lookup(db, model, fields) for key, (model, fields) in PROJECTIONS.items()}


class ReferenceResolver:
    def __init__(self, lookups: dict[str, Lookup], model=Vehicle, references: dict = None):
        self.lookups = lookups
        self.model = model
        self.references = REFERENCE_FIELDS if references is None else references

    def resolve(self, record, _cache: dict = None) -> dict:
        """Row → response dict with references embedded."""
        cache = {} if _cache is None else _cache
        doc = {column.name: getattr(record, column.name) for column in self.model.__table__.columns}
        for key, id_field in self.references.items():
            ref_id = doc.pop(id_field)
            lookup = self.lookups.get(key)
            if ref_id is None or lookup is None:
                doc[key] = None
                continue
            if (key, ref_id) not in cache:
                cache[(key, ref_id)] = lookup(ref_id)
            doc[key] = cache[(key, ref_id)]
        if "pictures" in doc:
            doc["pictures"] = list(doc["pictures"] or [])
        return doc

    def resolve_many(self, records: list) -> list[dict]:
        cache = {}
        return [self.resolve(record, cache) for record in records]


def get_resolver(db: Session = Depends(get_db)) -> ReferenceResolver:
    """FastAPI dependency: resolver backed by the request's DB session."""
    return ReferenceResolver(db_lookups(db))


def get_log_resolver(db: Session = Depends(get_db)) -> ReferenceResolver:
    return ReferenceResolver(db_lookups(db), VehicleDriverLog, LOG_REFERENCE_FIELDS)
