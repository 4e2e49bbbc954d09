from .user import User, Role
from .department import Department, department_employees
from .project import Project, ProjectStatus, Priority, project_team
from .task import Task, TaskStatus, task_dependencies
