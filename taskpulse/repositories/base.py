# taskpulse/repositories/base.py
from typing import Generic, Iterable, List, Optional, Set, Type, TypeVar

from sqlalchemy import Table, and_, delete, exists, insert, literal, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskpulse.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """CRUD helpers shared by the four entity repositories.

    Repositories never commit: the calling service owns the transaction.
    """

    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: str) -> Optional[ModelT]:
        if not entity_id:
            return None
        return self.db.get(self.model, entity_id)

    def find_many(self, ids: Iterable[str]) -> List[ModelT]:
        ids = list(ids)
        if not ids:
            return []
        return self.db.query(self.model).filter(self.model.id.in_(ids)).all()

    def missing_ids(self, ids: Iterable[str]) -> Set[str]:
        wanted = set(ids)
        found = {entity.id for entity in self.find_many(wanted)}
        return wanted - found

    def add(self, entity: ModelT) -> ModelT:
        self.db.add(entity)
        self.db.flush()
        return entity

    def delete(self, entity: ModelT) -> None:
        # collections may be stale after a bulk detach; reload them before the unit of work
        self.db.expire(entity)
        self.db.delete(entity)
        self.db.flush()

    # ---- membership sets ----

    def _add_membership(self, table: Table, owner_column: str, member_column: str,
                        owner_id: str, member_id: str) -> bool:
        """Append-if-absent in one statement. Returns False when already a member."""
        owner_col = table.c[owner_column]
        member_col = table.c[member_column]
        already = exists().where(and_(owner_col == owner_id, member_col == member_id))
        stmt = insert(table).from_select(
            [owner_column, member_column],
            select(literal(owner_id), literal(member_id)).where(~already),
        )
        try:
            result = self.db.execute(stmt)
        except IntegrityError:
            # a concurrent insert of the same pair won the race
            self.db.rollback()
            return False
        return result.rowcount == 1

    def _remove_membership(self, table: Table, owner_column: str, member_column: str,
                           owner_id: str, member_id: str) -> bool:
        """Returns False when the pair was not a member."""
        stmt = delete(table).where(and_(table.c[owner_column] == owner_id,
                                        table.c[member_column] == member_id))
        return self.db.execute(stmt).rowcount > 0

