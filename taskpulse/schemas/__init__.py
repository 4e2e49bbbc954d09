from .user import UserRegister, UserCreate, UserLogin, UserBasic, UserOut, UserUpdate
from .tokens import Token
from .department import DepartmentCreate, DepartmentUpdate, DepartmentOut, DepartmentEmployee
from .project import ProjectCreate, ProjectUpdate, ProjectOut, ProjectTask, ProjectMember
from .task import TaskCreate, TaskUpdate, TaskStatusUpdate, TaskDependency, TaskOut
