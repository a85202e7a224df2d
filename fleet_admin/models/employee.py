# fleet_admin/models/employee.py
"""
Employees table. Only the columns the vehicle views project for drivers.
"""

from sqlalchemy import Column, Integer, String
from fleet_admin.database import Base


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    staff_number = Column(String(50), unique=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(200), unique=True, nullable=False)
    phone_number = Column(String(18))
    department_id = Column(Integer)

    def __repr__(self):
        return f"<Employee {self.staff_number} {self.first_name} {self.last_name}>"
