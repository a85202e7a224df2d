# fleet_admin/models/vehicle_driver_log.py
"""
Vehicle-driver assignment history.
One row per assignment period; vehicle and employee are plain ids like the vehicle's own references.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Float, Text
from fleet_admin.database import Base


class VehicleDriverLog(Base):
    __tablename__ = "vehicle_driver_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    vehicle_id = Column(Integer, nullable=False, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    vehicle_location = Column(String(200))

    assignment_start_date = Column(DateTime, nullable=False, default=datetime.utcnow)
    assignment_end_date = Column(DateTime)
    reason_for_assignment = Column(Text)
    odometer_reading_at_start = Column(Float)
    odometer_reading_at_end = Column(Float)
    notes = Column(Text)
    status = Column(String(20), nullable=False, default="active", index=True)   # active | completed | terminated

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<VehicleDriverLog vehicle={self.vehicle_id} employee={self.employee_id} status={self.status}>"
