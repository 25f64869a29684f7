import logging
from typing import Any, Dict, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFoundError, StorageError, ValidationError
from app.db.base import Base

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic data-access boundary for one entity collection.

    list/get/insert/update/delete; writes commit unless ``commit=False`` is
    passed, in which case the caller owns the transaction.
    """

    model: Type[ModelT]
    entity_name = "Record"

    def __init__(self, db: Session):
        self.db = db

    def _order_by(self):
        return []

    def list(self, **filters: Any) -> List[ModelT]:
        query = self.db.query(self.model)
        for column, value in filters.items():
            query = query.filter(getattr(self.model, column) == value)
        order = self._order_by()
        if order:
            query = query.order_by(*order)
        return query.all()

    def get(self, entity_id: str) -> Optional[ModelT]:
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def get_or_raise(self, entity_id: str) -> ModelT:
        entity = self.get(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} not found")
        return entity

    def insert(self, fields: Dict[str, Any], commit: bool = True) -> ModelT:
        entity = self.model(**fields)
        self.db.add(entity)
        self._write(commit, f"insert {self.model.__tablename__}")
        return entity

    def update(self, entity_id: str, fields: Dict[str, Any], commit: bool = True) -> ModelT:
        entity = self.get_or_raise(entity_id)
        return self.apply(entity, fields, commit=commit)

    def apply(self, entity: ModelT, fields: Dict[str, Any], commit: bool = True) -> ModelT:
        for key, value in fields.items():
            setattr(entity, key, value)
        self._write(commit, f"update {self.model.__tablename__}")
        return entity

    def delete(self, entity_id: str, commit: bool = True) -> None:
        entity = self.get_or_raise(entity_id)
        self.remove(entity, commit=commit)

    def remove(self, entity: ModelT, commit: bool = True) -> None:
        self.db.delete(entity)
        self._write(commit, f"delete {self.model.__tablename__}")

    def _write(self, commit: bool, action: str) -> None:
        try:
            if commit:
                self.db.commit()
            else:
                self.db.flush()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"Integrity error on {action}: {e.orig}")
            raise ValidationError(f"{self.entity_name} violates a storage constraint")
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Storage error on {action}: {str(e)}")
            raise StorageError(f"Failed to {action}")
