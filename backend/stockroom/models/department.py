from sqlalchemy import Column, Integer, String, Boolean, text
from ..core.db import Base

class Department(Base):
    __tablename__ = "Department"

    DeptID         = Column(Integer, primary_key=True, autoincrement=True)
    Name           = Column(String(200), nullable=False)
    IsITDepartment = Column(Boolean, nullable=False, default=False, server_default=text("0"))
