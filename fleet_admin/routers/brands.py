# fleet_admin/routers/brands.py
"""Brand catalogue, used to populate the make/model pickers and to validate vehicle models."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fleet_admin.database import get_db
from fleet_admin.schemas.brand import BrandCreate, BrandOut
from fleet_admin.services import brand_service

router = APIRouter()


@router.get("/brands", response_model=list[BrandOut], summary="List brands")
def list_brands(db: Session = Depends(get_db)):
    return brand_service.list_brands(db)


@router.get("/brands/name/{name}/models", response_model=list[str], summary="Models offered by a brand")
def get_brand_models(name: str, db: Session = Depends(get_db)):
    """Brand name is matched case-insensitively."""
    return brand_service.get_brand_by_name(db, name).models or []


@router.get("/brands/{brand_id}", response_model=BrandOut, summary="Get a brand")
def get_brand(brand_id: int, db: Session = Depends(get_db)):
    return brand_service.get_brand(db, brand_id)


@router.post("/brands", status_code=201, response_model=BrandOut, summary="Create a brand")
def create_brand(body: BrandCreate, db: Session = Depends(get_db)):
    return brand_service.create_brand(db, body)
