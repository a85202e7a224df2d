# fleet_admin/models/brand.py
"""
Vehicle brands and the model names each one offers.
Name and model names are stored lowercase.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, JSON
from fleet_admin.database import Base


class Brand(Base):
    __tablename__ = "brands"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    logo = Column(String(300))
    models = Column(JSON, nullable=False, default=list)    # list[str]
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f"<Brand {self.name} models={len(self.models or [])}>"
