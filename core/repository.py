"""Repository helpers for database operations.

Provides common persistence shortcuts plus the set-membership and counter
primitives used by the social graph. Counters are only ever adjusted by a
single `UPDATE ... SET col = col + delta` statement issued in the same
transaction as the membership change that justified it, so two concurrent
requests cannot both apply a delta for the same logical add or remove.
"""

from contextlib import contextmanager
from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from typing import TypeVar, Generic, Type, List, Any
from database.models import Base

T = TypeVar('T', bound=Base)


class BaseRepository(Generic[T]):
    """Generic repository for common database operations.

    Attributes:
        model: SQLAlchemy model class to operate on.
        session: Database session for executing queries.
    """

    def __init__(self, model: Type[T], session: Session):
        self.model = model
        self.session = session

    def page(self, query, page: int, limit: int) -> List[T]:
        """Apply 1-based page/limit pagination to a query and return rows."""
        skip = (max(page, 1) - 1) * limit
        return query.offset(skip).limit(limit).all()


def save(session: Session, obj: Base) -> Base:
    """Convenience function to add, commit and refresh an object.

    Args:
        session: Database session.
        obj: Model instance to persist.

    Returns:
        The persisted object with refreshed attributes.
    """
    session.add(obj)
    session.commit()
    session.refresh(obj)
    return obj


def has_member(session: Session, model: Type[Base], **keys) -> bool:
    """Return True if an association row with the given key columns exists."""
    stmt = select(func.count()).select_from(model).filter_by(**keys)
    return session.execute(stmt).scalar_one() > 0


def add_member(session: Session, model: Type[Base], **keys) -> bool:
    """Insert an association row; return whether the set actually changed.

    The composite primary key of `model` makes the insert fail when the row
    is already present (for example a concurrent request added it first).
    In that case the transaction is rolled back and False is returned, so
    callers must not have uncommitted work pending on the session.
    """
    try:
        session.execute(insert(model).values(**keys))
        session.flush()
    except IntegrityError:
        session.rollback()
        return False
    return True


def remove_member(session: Session, model: Type[Base], **keys) -> bool:
    """Delete an association row; return whether the set actually changed."""
    result = session.execute(delete(model).filter_by(**keys))
    return result.rowcount > 0


def adjust_counter(session: Session, model: Type[Base], id: Any, field: str, delta: int) -> None:
    """Atomically add `delta` to a numeric column of the row with primary key `id`."""
    column = getattr(model, field)
    session.execute(
        update(model)
        .where(model.id == id)
        .values({field: column + delta})
        .execution_options(synchronize_session=False)
    )


def count(session: Session, model: Type[Base], **filters) -> int:
    """Count rows of `model` matching equality filters."""
    stmt = select(func.count()).select_from(model).filter_by(**filters)
    return session.execute(stmt).scalar_one()


def read_column(session: Session, model: Type[Base], id: Any, field: str) -> Any:
    """Read one column straight from the store, bypassing the identity map."""
    return session.execute(select(getattr(model, field)).where(model.id == id)).scalar_one_or_none()


@contextmanager
def atomic(session: Session):
    """Commit the enclosed statements together, rolling back on any error."""
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
