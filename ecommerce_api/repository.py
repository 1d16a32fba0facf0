import logging
import threading
from typing import Any, Generic, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel
from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session, sessionmaker

from .database import Base
from .models import Product, User
from .schemas import ProductOut, UserOut

logger = logging.getLogger("ecommerce.api")

ModelT = TypeVar("ModelT", bound=Base)
RecordT = TypeVar("RecordT", bound=BaseModel)


class SqlRepository(Generic[ModelT, RecordT]):
    """
    list / get_by_id / insert / update / delete over one table.
    Records leave the repository as pydantic models, detached from any session.
    Every call holds ``_lock``: handlers run in a thread pool and share one connection.
    """

    model: Type[ModelT]
    record: Type[RecordT]
    fields: tuple[str, ...] = ()

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def _to_record(self, row: ModelT) -> RecordT:
        return self.record.model_validate(row)

    def _query(self, stmt: Select) -> list[RecordT]:
        with self._lock, self._session_factory() as session:
            return [self._to_record(row) for row in session.scalars(stmt)]

    def list(self) -> list[RecordT]:
        return self._query(select(self.model).order_by(self.model.id))

    def count(self) -> int:
        with self._lock, self._session_factory() as session:
            return session.scalar(select(func.count()).select_from(self.model)) or 0

    def get_by_id(self, record_id: int) -> Optional[RecordT]:
        with self._lock, self._session_factory() as session:
            row = session.get(self.model, record_id)
            return self._to_record(row) if row is not None else None

    def insert(self, values: Mapping[str, Any]) -> RecordT:
        with self._lock, self._session_factory() as session:
            row = self.model(**{name: values[name] for name in self.fields})
            session.add(row)
            session.commit()
            session.refresh(row)
            logger.info("Inserted %s %s", self.model.__tablename__, row.id)
            return self._to_record(row)

    def update(self, record_id: int, values: Mapping[str, Any]) -> Optional[RecordT]:
        with self._lock, self._session_factory() as session:
            row = session.get(self.model, record_id)
            if row is None:
                return None
            for name in self.fields:
                if name in values:
                    setattr(row, name, values[name])
            session.commit()
            session.refresh(row)
            return self._to_record(row)

    def delete(self, record_id: int) -> Optional[RecordT]:
        with self._lock, self._session_factory() as session:
            row = session.get(self.model, record_id)
            if row is None:
                return None
            snapshot = self._to_record(row)
            session.delete(row)
            session.commit()
            logger.info("Deleted %s %s", self.model.__tablename__, record_id)
            return snapshot


class ProductRepository(SqlRepository[Product, ProductOut]):
    model = Product
    record = ProductOut
    fields = ("name", "description", "price")

    def search(self, name: Optional[str] = None, max_price: Optional[float] = None) -> list[ProductOut]:
        stmt = select(Product).order_by(Product.id)
        if name:
            stmt = stmt.where(Product.name.icontains(name, autoescape=True))
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        return self._query(stmt)


class UserRepository(SqlRepository[User, UserOut]):
    model = User
    record = UserOut
    fields = ("name", "email", "status", "role")

    def search(self, name: Optional[str] = None) -> list[UserOut]:
        stmt = select(User).order_by(User.id)
        if name:
            stmt = stmt.where(User.name.icontains(name, autoescape=True))
        return self._query(stmt)
