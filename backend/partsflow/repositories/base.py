"""
Base Repository — Repository Pattern (GoF)

Generic CRUD over a single SQLAlchemy model. Concrete repositories add the
queries their services need.
"""
from typing import Any, Generic, List, Optional, Tuple, Type, TypeVar

from sqlalchemy.orm import Session

from partsflow.database import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):

    def __init__(self, model: Type[ModelT], db: Session):
        self.model = model
        self.db = db

    def get_by_id(self, entity_id: Any) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def get_all(self) -> List[ModelT]:
        return self.db.query(self.model).all()

    def list_paginated(self, page: int = 1, page_size: int = 20, **filters) -> Tuple[List[ModelT], int]:
        q = self.db.query(self.model)
        for key, value in filters.items():
            if value is not None and hasattr(self.model, key):
                q = q.filter(getattr(self.model, key) == value)
        total = q.count()
        items = q.offset((page - 1) * page_size).limit(page_size).all()
        return items, total

    def create(self, entity: ModelT, commit: bool = True) -> ModelT:
        self.db.add(entity)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def update(self, entity: ModelT, updates: dict, commit: bool = True) -> ModelT:
        for key, value in updates.items():
            setattr(entity, key, value)
        if commit:
            self.db.commit()
            self.db.refresh(entity)
        else:
            self.db.flush()
        return entity

    def delete(self, entity: ModelT, commit: bool = True) -> None:
        self.db.delete(entity)
        if commit:
            self.db.commit()
        else:
            self.db.flush()
