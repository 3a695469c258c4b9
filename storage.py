"""
Repositories over the SQLAlchemy session, one per entity kind.

Ids come from the database (autoincrement), so they are monotonic per table
and never handed out twice, even when several requests create rows at once.
"""
from datetime import datetime, timezone
from typing import Generic, List, Optional, Type, TypeVar

from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from database import get_db
from models import ADRReport, CalendarEvent, ChatMessage, User, utcnow

T = TypeVar("T")


class Repository(Generic[T]):
    model: Type[T]

    def __init__(self, db: Session):
        self.db = db

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise

    def create(self, **fields) -> T:
        record = self.model(**fields)
        record.created_at = utcnow()
        self.db.add(record)
        self._commit()
        self.db.refresh(record)
        return record

    def get(self, record_id: int) -> Optional[T]:
        return self.db.get(self.model, record_id)

    def get_all(self) -> List[T]:
        return self.db.query(self.model).order_by(self.model.id).all()

    def delete(self, record_id: int) -> bool:
        record = self.get(record_id)
        if record is None:
            return False
        self.db.delete(record)
        self._commit()
        return True


class UserRepository(Repository[User]):
    model = User

    def get_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()


class ADRReportRepository(Repository[ADRReport]):
    model = ADRReport


class ChatMessageRepository(Repository[ChatMessage]):
    model = ChatMessage


class CalendarRepository(Repository[CalendarEvent]):
    model = CalendarEvent

    def get_upcoming(self, limit: int = 10, now: Optional[datetime] = None) -> List[CalendarEvent]:
        """Events dated at or after `now`, soonest first, at most `limit` of them."""
        if now is None:
            now = utcnow()
        elif now.tzinfo is not None:
            now = now.astimezone(timezone.utc).replace(tzinfo=None)
        return (
            self.db.query(CalendarEvent)
            .filter(CalendarEvent.event_date >= now)
            .order_by(CalendarEvent.event_date, CalendarEvent.id)
            .limit(limit)
            .all()
        )

    def count(self) -> int:
        return self.db.query(CalendarEvent).count()


class Storage:
    """All repositories sharing one session."""

    def __init__(self, db: Session):
        self.users = UserRepository(db)
        self.reports = ADRReportRepository(db)
        self.chat_messages = ChatMessageRepository(db)
        self.calendar = CalendarRepository(db)


def get_storage(db: Session = Depends(get_db)) -> Storage:
    return Storage(db)
