# fleet_admin/models/road_worth.py
from sqlalchemy import Column, Integer, String, Text
from fleet_admin.database import Base


class RoadWorth(Base):
    __tablename__ = "road_worth"

    id = Column(Integer, primary_key=True, autoincrement=True)
    certificate_number = Column(String(100), unique=True, nullable=False)
    issued_by = Column(String(100), nullable=False, default="dvla")
    notes = Column(Text)

    def __repr__(self):
        return f"<RoadWorth {self.certificate_number}>"
