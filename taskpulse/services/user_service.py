# taskpulse/services/user_service.py
import logging
from typing import List, Optional

from taskpulse.exceptions import ConflictError, ValidationError
from taskpulse.models import Role, User
from taskpulse.schemas.user import UserCreate, UserRegister, UserUpdate
from taskpulse.services.base import BaseService
from taskpulse.utils.permissions import Action, Actor, ResourceKind, list_scope
from taskpulse.utils.security import hash_password

logger = logging.getLogger(__name__)


class UserService(BaseService):
    kind = ResourceKind.USER
    label = "user"

    def list_users(self, actor: Actor) -> List[User]:
        self.authorize(actor, Action.LIST)
        return self.store.users.list(actor, list_scope(actor, self.kind))

    def get_user(self, actor: Actor, user_id: str) -> User:
        user = self.get_or_404(self.store.users, user_id)
        self.authorize(actor, Action.READ, user, message="Not authorized to view this user")
        return user

    def _check_unique(self, email: Optional[str], matricule: Optional[str],
                      exclude_id: Optional[str] = None) -> None:
        if email:
            existing = self.store.users.get_by_email(email)
            if existing and existing.id != exclude_id:
                raise ConflictError("Email already registered")
        if matricule:
            existing = self.store.users.get_by_matricule(matricule)
            if existing and existing.id != exclude_id:
                raise ConflictError("Matricule already in use")

    def _create(self, data: UserRegister, role: Role, department_id: Optional[str]) -> User:
        self._check_unique(data.email, data.matricule)
        if department_id is not None:
            self.validator.require_department(department_id, "department_id")

        user = User(
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            display_name=data.display_name,
            role=role,
            matricule=data.matricule,
            phone_number=data.phone_number,
            department_id=department_id,
            position=data.position,
        )
        with self.transaction("Email or matricule already in use"):
            self.store.users.add(user)
        self.db.refresh(user)
        return user

    def register(self, data: UserRegister) -> User:
        """Self-registration always yields an employee"""
        user = self._create(data, Role.EMPLOYEE, None)
        logger.info(f"User {user.id} registered")
        return user

    def create_user(self, actor: Actor, data: UserCreate) -> User:
        self.authorize(actor, Action.CREATE, message="Only admins can create users")
        user = self._create(data, data.role, data.department_id)
        logger.info(f"User {user.id} created by {actor.id}")
        return user

    def update_user(self, actor: Actor, user_id: str, data: UserUpdate) -> User:
        user = self.get_or_404(self.store.users, user_id)

        updates = data.model_dump(exclude_unset=True)
        password = updates.pop("password", None)
        if updates.get("email"):
            updates["email"] = updates["email"].lower()
        # required profile fields are never cleared through an update
        for name in ("role", "email", "matricule", "display_name", "phone_number"):
            if name in updates and updates[name] is None:
                raise ValidationError(f"{name} cannot be empty", field=name)

        changes = self.changed_fields(user, updates)
        changed_names = set(changes) | ({"password"} if password else set())
        self.authorize(actor, Action.UPDATE, user, changed_names,
                       message="Only admins can change user roles" if "role" in changes
                       else "Not authorized to update this user")

        self._check_unique(changes.get("email"), changes.get("matricule"), exclude_id=user.id)
        if changes.get("department_id") is not None:
            self.validator.require_department(changes["department_id"], "department_id")

        with self.transaction("Email or matricule already in use"):
            for name, value in changes.items():
                setattr(user, name, value)
            if password:
                user.password_hash = hash_password(password)
        self.db.refresh(user)
        logger.info(f"User {user.id} updated by {actor.id}: {sorted(changed_names)}")
        return user

    def delete_user(self, actor: Actor, user_id: str) -> None:
        self.authorize(actor, Action.DELETE, message="Only admins can delete users")
        user = self.get_or_404(self.store.users, user_id)
        if user.id == actor.id:
            raise ValidationError("You cannot delete your own account")
        if self.store.users.count_required_references(user.id):
            raise ConflictError("User still manages projects or owns tasks; reassign them first")

        with self.transaction():
            self.store.users.clear_optional_references(user.id)
            self.store.users.delete(user)
        logger.info(f"User {user_id} deleted by {actor.id}")
