# fleet_admin/services/brand_service.py
"""
Brand lookups and creation.
Brand names and model names are stored lowercase, so lookups by name are case-insensitive.
"""

from sqlalchemy.orm import Session

from fleet_admin.errors import DuplicateKeyError, NotFound, ValidationError
from fleet_admin.models.brand import Brand
from fleet_admin.schemas.brand import BrandCreate
from fleet_admin.utils.logger import get_logger

logger = get_logger(__name__)


def list_brands(db: Session) -> list[Brand]:
    return db.query(Brand).order_by(Brand.name).all()


def get_brand(db: Session, brand_id: int) -> Brand:
    brand = db.query(Brand).filter(Brand.id == brand_id).first()
    if not brand:
        raise NotFound("Brand")
    return brand


def get_brand_by_name(db: Session, name: str) -> Brand:
    brand = db.query(Brand).filter(Brand.name == name.strip().lower()).first()
    if not brand:
        raise NotFound("Brand")
    return brand


def create_brand(db: Session, body: BrandCreate) -> Brand:
    name = body.name.strip().lower()
    if not name:
        raise ValidationError({"name": "name is required"})
    if db.query(Brand).filter(Brand.name == name).first():
        raise DuplicateKeyError({"name": name}, entity="brand")

    # de-duplicate while keeping order
    models = list(dict.fromkeys(m.strip().lower() for m in body.models if m and m.strip()))
    brand = Brand(name=name, logo=body.logo, models=models)
    db.add(brand)
    db.commit()
    db.refresh(brand)
    logger.info(f"[BRANDS] Created {name} with {len(models)} models")
    return brand
