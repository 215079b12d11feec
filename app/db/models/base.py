from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import DeclarativeBase, Session


class Base(DeclarativeBase):
    pass


class AppendOnlyMixin:
    """Rows are written once; the ORM refuses to flush updates or deletes.

    The database enforces the same rule with a BEFORE UPDATE OR DELETE trigger.
    """


@event.listens_for(Session, "before_flush")
def _reject_append_only_mutations(session: Session, flush_context, instances) -> None:
    for instance in session.deleted:
        if isinstance(instance, AppendOnlyMixin):
            raise ValueError(f"{instance.__tablename__} is append-only")
    for instance in session.dirty:
        if isinstance(instance, AppendOnlyMixin) and session.is_modified(instance):
            raise ValueError(f"{instance.__tablename__} is append-only")
