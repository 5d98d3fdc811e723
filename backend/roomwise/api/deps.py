from collections.abc import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from roomwise.db.session import SessionLocal
from roomwise.services.sql_store import SqlAlchemySchedulingStore
from roomwise.services.store import SchedulingStore


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_scheduling_store(db: Session = Depends(get_db)) -> SchedulingStore:
    return SqlAlchemySchedulingStore(db)
