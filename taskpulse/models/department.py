# taskpulse/models/department.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskpulse.database import Base, generate_id

# Membership set: the composite primary key rejects a second row for the same pair
department_employees = Table(
    "department_employees",
    Base.metadata,
    Column("department_id", String(36), ForeignKey("departments.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class Department(Base):
    __tablename__ = "departments"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, unique=True, index=True, nullable=False)
    type = Column(String, nullable=False)
    description = Column(String, nullable=True)
    manager_id = Column(String(36), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    manager = relationship("User", foreign_keys=[manager_id])
    employees = relationship("User", secondary=department_employees, order_by="User.display_name")
