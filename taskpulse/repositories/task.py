# taskpulse/repositories/task.py
from typing import Iterable, List, Optional, Set

from sqlalchemy import delete, or_, select

from taskpulse.models import Task, task_dependencies
from taskpulse.repositories.base import BaseRepository
from taskpulse.utils.permissions import Actor, ListScope


class TaskRepository(BaseRepository[Task]):
    model = Task

    def list(
        self,
        actor: Actor,
        scope: ListScope,
        project_id: Optional[str] = None,
        assigned_to_id: Optional[str] = None,
        status: Optional[str] = None,
    ) -> List[Task]:
        query = self.db.query(Task)
        if project_id:
            query = query.filter(Task.project_id == project_id)
        if assigned_to_id:
            query = query.filter(Task.assigned_to_id == assigned_to_id)
        if status:
            query = query.filter(Task.status == status)
        if scope == ListScope.ASSIGNEE_OR_CREATOR:
            query = query.filter(or_(Task.assigned_to_id == actor.id, Task.created_by_id == actor.id))
        return query.order_by(Task.created_at.desc()).all()

    def dependency_ids(self, task_ids: Iterable[str]) -> Set[str]:
        """Direct dependencies of every task in task_ids"""
        task_ids = list(task_ids)
        if not task_ids:
            return set()
        stmt = select(task_dependencies.c.depends_on_id).where(task_dependencies.c.task_id.in_(task_ids))
        return set(self.db.execute(stmt).scalars())

    def reaches(self, start_ids: Iterable[str], target_id: str) -> bool:
        """True when target_id is reachable from start_ids along dependency edges"""
        seen: Set[str] = set()
        frontier = set(start_ids)
        while frontier:
            if target_id in frontier:
                return True
            seen |= frontier
            frontier = self.dependency_ids(frontier) - seen
        return False

    def detach(self, task_id: str) -> None:
        """Remove the task from every dependency set, in both directions"""
        self.db.execute(delete(task_dependencies).where(or_(
            task_dependencies.c.task_id == task_id,
            task_dependencies.c.depends_on_id == task_id,
        )))
