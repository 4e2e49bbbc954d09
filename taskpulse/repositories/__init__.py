from sqlalchemy.orm import Session

from .user import UserRepository
from .department import DepartmentRepository
from .project import ProjectRepository
from .task import TaskRepository


class EntityStore:
    """The four repositories bound to one session"""

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.departments = DepartmentRepository(db)
        self.projects = ProjectRepository(db)
        self.tasks = TaskRepository(db)
