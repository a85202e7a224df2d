# fleet_admin/models/insurance.py
from sqlalchemy import Column, Integer, String, Float, Text
from fleet_admin.database import Base


class Insurance(Base):
    __tablename__ = "insurance"

    id = Column(Integer, primary_key=True, autoincrement=True)
    policy_number = Column(String(100), unique=True, nullable=False)
    provider = Column(String(100), nullable=False)
    insurance_type = Column(String(30), nullable=False)   # auto | health | life ...
    coverage_amount = Column(Float, nullable=False, default=0)
    description = Column(Text)

    def __repr__(self):
        return f"<Insurance {self.policy_number} provider={self.provider}>"
