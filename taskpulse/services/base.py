# taskpulse/services/base.py
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskpulse.exceptions import ConflictError, ForbiddenError, NotFoundError
from taskpulse.models import User
from taskpulse.repositories import EntityStore
from taskpulse.services.notifier import EventKind, NotificationDispatcher
from taskpulse.services.validation import ReferenceValidator
from taskpulse.utils.notifications import publish
from taskpulse.utils.permissions import Action, Actor, ResourceKind, can_perform

logger = logging.getLogger(__name__)


class BaseService:
    """Runs one operation as authorize, validate, persist, then notify.

    Subclasses set `kind` and `label`; the ordering inside each operation is
    theirs, the building blocks live here.
    """

    kind: ResourceKind
    label: str

    def __init__(self, db: Session, dispatcher: NotificationDispatcher):
        self.db = db
        self.store = EntityStore(db)
        self.validator = ReferenceValidator(self.store)
        self.dispatcher = dispatcher

    def authorize(self, actor: Actor, action: Action, resource=None,
                  changes: Optional[Iterable[str]] = None, message: Optional[str] = None) -> None:
        if not can_perform(actor, action, self.kind, resource, changes).allowed:
            logger.info(f"Denied {action.value} on {self.label} "
                        f"{getattr(resource, 'id', '-')} for {actor.id} ({actor.role.value})")
            raise ForbiddenError(message or f"Not authorized to {action.value.replace('_', ' ')} this {self.label}")

    def get_or_404(self, repository, entity_id: str):
        entity = repository.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return entity

    @contextmanager
    def transaction(self, conflict_message: str = "Conflicting change"):
        """Commit on success, roll back on any error"""
        try:
            yield
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError(conflict_message) from e
        except Exception:
            self.db.rollback()
            raise

    def actor_name(self, actor: Actor) -> str:
        user = self.store.users.get(actor.id)
        return user.display_name if user else actor.id

    def notify(self, users: Iterable[User], kind: EventKind, data: Dict[str, Any]) -> None:
        """Hand events to the dispatcher; the mutation has already committed"""
        try:
            publish(self.dispatcher, users, kind, data)
        except Exception:
            logger.exception(f"Could not queue {kind.value} notifications")

    @staticmethod
    def changed_fields(entity, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Subset of updates whose value differs from the entity's current value"""
        return {name: value for name, value in updates.items() if getattr(entity, name) != value}
