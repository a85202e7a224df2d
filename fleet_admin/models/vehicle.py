# fleet_admin/models/vehicle.py
"""
Vehicles table, the primary fleet record.
References (department, driver, brand, insurance, roadworthiness) are plain ids;
they are resolved at read time by the reference resolver, never joined here.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Date, Float, Boolean, Text, JSON
from fleet_admin.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Identification, stored lowercase
    registration_number = Column(String(50), unique=True, nullable=False, index=True)
    vin_number = Column(String(50), unique=True, nullable=False, index=True)
    plate_number = Column(String(50), unique=True, nullable=False, index=True)

    # Classification
    vehicle_type = Column(String(30), nullable=False)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    brand_id = Column(Integer, index=True)

    # Technical
    fuel_type = Column(String(30), nullable=False)
    transmission_type = Column(String(30))
    seating_capacity = Column(Integer)
    weight = Column(Float)
    weight_unit = Column(String(10), default="kg")
    colour = Column(String(50))
    engine_description = Column(Text)

    # Status / ownership
    status = Column(String(30), nullable=False, default="active", index=True)
    ownership_type = Column(String(30), default="owned")
    condition = Column(String(30), default="new")
    department_id = Column(Integer, index=True)
    assigned_driver_id = Column(Integer, index=True)
    is_available_for_pool = Column(Boolean, nullable=False, default=True)

    # Operational
    current_mileage = Column(Float, nullable=False, default=0)
    purchase_date = Column(Date)
    purchase_price = Column(Float)

    # Compliance
    insurance_id = Column(Integer)
    insurance_start_date = Column(Date)
    insurance_end_date = Column(Date)
    road_worth_id = Column(Integer)
    road_worth_start_date = Column(Date)
    road_worth_end_date = Column(Date)

    # Media / free text
    pictures = Column(JSON, nullable=False, default=list)
    description = Column(Text)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Vehicle {self.registration_number} status={self.status} driver={self.assigned_driver_id}>"
