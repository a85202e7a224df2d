# fleet_admin/schemas/brand.py
from pydantic import BaseModel
from typing import Optional


class BrandCreate(BaseModel):
    name: str
    logo: Optional[str] = None
    models: list[str] = []


class BrandOut(BaseModel):
    id: int
    name: str
    logo: Optional[str] = None
    models: list[str] = []

    class Config:
        from_attributes = True
