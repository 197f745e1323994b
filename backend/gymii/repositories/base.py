# gymii/repositories/base.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

T = TypeVar("T")  # SQLAlchemy model type

@dataclass(slots=True)
class Page(Generic[T]):
    items: list[T]
    total: int
    limit: int
    offset: int

class BaseRepository(Generic[T]):
    """Lightweight base for repositories using SQLAlchemy 2.0 style."""
    model: type[T]

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: int) -> Optional[T]:
        return self.db.get(self.model, entity_id)

    def page_from_stmt(self, stmt: Select, *, limit: int = 50, offset: int = 0) -> Page[T]:
        # one query for items and one for the count
        items = list(self.db.execute(stmt.limit(limit).offset(offset)).scalars().all())
        total = self.db.execute(
            select(func.count()).select_from(stmt.order_by(None).subquery())
        ).scalar_one()
        return Page(items=items, total=total, limit=limit, offset=offset)

    def save(self, entity: T) -> T:
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: T) -> None:
        self.db.delete(entity)
        self.db.commit()
