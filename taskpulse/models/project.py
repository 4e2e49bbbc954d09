# taskpulse/models/project.py
from sqlalchemy import Column, String, Float, DateTime, ForeignKey, Table, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskpulse.database import Base, generate_id
import enum

# Association table for the project team membership set
project_team = Table(
    "project_team",
    Base.metadata,
    Column("project_id", String(36), ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class ProjectStatus(str, enum.Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class Priority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def _values(enum_cls):
    return [member.value for member in enum_cls]


class Project(Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, nullable=False, index=True)
    description = Column(String, nullable=False)
    status = Column(Enum(ProjectStatus, native_enum=False, values_callable=_values),
                    nullable=False, default=ProjectStatus.PLANNING)
    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)
    manager_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    department_id = Column(String(36), ForeignKey("departments.id"), nullable=False, index=True)
    priority = Column(Enum(Priority, native_enum=False, values_callable=_values),
                      nullable=False, default=Priority.MEDIUM)
    budget = Column(Float, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    manager = relationship("User", foreign_keys=[manager_id])
    department = relationship("Department", foreign_keys=[department_id])
    team = relationship("User", secondary=project_team, order_by="User.display_name")
    tasks = relationship("Task", back_populates="project")
