from typing import Generic, TypeVar, Type, Optional, List, Any, Dict, Sequence
from sqlalchemy.orm import Session
from app.db import Base

ModelType = TypeVar("ModelType", bound=Base)

class BaseRepository(Generic[ModelType]):
    """Base repository with common CRUD operations.

    Every write commits immediately so a caller looping over rows gets
    per-row durability; a failed commit is rolled back before re-raising.
    """

    def __init__(self, model: Type[ModelType], db: Session):
        self.model = model
        self.db = db

    def get(self, id: Any) -> Optional[ModelType]:
        """Get by ID"""
        return self.db.query(self.model).filter(self.model.id == id).first()

    def create(self, obj_in: Dict[str, Any]) -> ModelType:
        """Create new object"""
        db_obj = self.model(**obj_in)
        self.db.add(db_obj)
        self._commit()
        self.db.refresh(db_obj)
        return db_obj

    def update(self, db_obj: ModelType, obj_in: Dict[str, Any]) -> ModelType:
        """Update only the given fields"""
        for field, value in obj_in.items():
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)
        self._commit()
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, db_obj: ModelType) -> None:
        """Delete a loaded object"""
        self.db.delete(db_obj)
        self._commit()

    def delete_by(self, **kwargs) -> int:
        """Bulk delete rows matching the filters, returns the row count"""
        deleted = self.db.query(self.model).filter_by(**kwargs).delete(synchronize_session=False)
        self._commit()
        return deleted

    def filter_by(self, order_by: Sequence[Any] = (), **kwargs) -> List[ModelType]:
        """Filter by multiple conditions"""
        query = self.db.query(self.model).filter_by(**kwargs)
        if order_by:
            query = query.order_by(*order_by)
        return query.all()

    def filter_one_by(self, **kwargs) -> Optional[ModelType]:
        """Filter by multiple conditions and return first"""
        return self.db.query(self.model).filter_by(**kwargs).first()

    def exists(self, **kwargs) -> bool:
        """Check if object exists"""
        return self.db.query(self.model).filter_by(**kwargs).first() is not None

    def _commit(self) -> None:
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
