from sqlalchemy import Column, String, Text, DateTime, ForeignKey, Table, Enum, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskpulse.database import Base, generate_id
from taskpulse.models.project import Priority, _values
import enum

task_dependencies = Table(
    "task_dependencies",
    Base.metadata,
    Column("task_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
    Column("depends_on_id", String(36), ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True),
)


class TaskStatus(str, enum.Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"


class Task(Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=generate_id)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False)

    # Task properties
    priority = Column(Enum(Priority, native_enum=False, values_callable=_values),
                      nullable=False, default=Priority.MEDIUM)
    status = Column(Enum(TaskStatus, native_enum=False, values_callable=_values),
                    nullable=False, default=TaskStatus.TODO)
    due_date = Column(DateTime(timezone=True), nullable=False)
    attachments = Column(JSON, nullable=False, default=list)

    # References; created_by_id is written once at creation
    assigned_to_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    created_by_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=True, index=True)

    # System dates
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    assignee = relationship("User", foreign_keys=[assigned_to_id])
    creator = relationship("User", foreign_keys=[created_by_id])
    project = relationship("Project", back_populates="tasks")
    dependencies = relationship(
        "Task",
        secondary=task_dependencies,
        primaryjoin=id == task_dependencies.c.task_id,
        secondaryjoin=id == task_dependencies.c.depends_on_id,
    )

    def __repr__(self):
        return f"<Task(id={self.id}, title='{self.title}', status='{self.status}')>"
