# taskpulse/models/user.py
from sqlalchemy import Column, String, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskpulse.database import Base, generate_id
import enum


class Role(str, enum.Enum):
    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    role = Column(
        Enum(Role, native_enum=False, values_callable=lambda roles: [r.value for r in roles]),
        nullable=False,
        default=Role.EMPLOYEE,
    )
    matricule = Column(String, unique=True, index=True, nullable=False)
    phone_number = Column(String, nullable=False)
    department_id = Column(
        String(36),
        ForeignKey("departments.id", use_alter=True, name="fk_users_department_id"),
        nullable=True,
        index=True,
    )
    position = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    department = relationship("Department", foreign_keys=[department_id])

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
