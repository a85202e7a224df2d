# fleet_admin/models/department.py
from sqlalchemy import Column, Integer, String, Text
from fleet_admin.database import Base


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(200), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    head_id = Column(Integer)   # Employee id

    def __repr__(self):
        return f"<Department {self.name}>"
