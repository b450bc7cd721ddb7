"""
Document store client

The only channel through which projects, success stories and admin
credentials are read and written. Records travel as plain dicts.

Two bindings:
- SqlDocumentStore: SQLAlchemy over any SQL database
- OfflineStore: "no backend" mode when the store is missing or misconfigured
"""
import logging
from typing import Any, Dict, List, Optional, Type

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from apps.shared.database import (
    Base,
    check_db_connection,
    is_configured,
    make_session_factory,
    try_build_engine,
)
from apps.portfolio.models import ProjectRecord, SuccessStoryRecord, AdminRecord

logger = logging.getLogger(__name__)

PROJECTS = "projects"
SUCCESS_STORIES = "success_stories"
ADMINS = "admins"

COLLECTIONS: Dict[str, Type[Base]] = {
    PROJECTS: ProjectRecord,
    SUCCESS_STORIES: SuccessStoryRecord,
    ADMINS: AdminRecord,
}

# Assigned by the store, never written by callers
READ_ONLY_FIELDS = {"id", "created_at"}


class StoreError(Exception):
    """Any failure talking to the store."""


class StoreUnavailable(StoreError):
    """The store is not configured or not reachable."""


class RecordNotFound(StoreError):
    """No record matched a strict lookup, update or delete."""


def _model_for(collection: str) -> Type[Base]:
    try:
        return COLLECTIONS[collection]
    except KeyError:
        raise StoreError(f"Unknown collection '{collection}'")


def _writable_columns(model: Type[Base]) -> set:
    return {c.key for c in model.__table__.columns} - READ_ONLY_FIELDS


class SqlDocumentStore:
    """Collection operations backed by SQLAlchemy."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.SessionLocal = make_session_factory(engine)

    def create_tables(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    def ping(self) -> bool:
        return check_db_connection(self.engine)

    def select_all(self, collection: str) -> List[dict]:
        """All records, newest first."""
        model = _model_for(collection)
        db = self.SessionLocal()
        try:
            rows = db.query(model).order_by(model.created_at.desc()).all()
            return [row.to_dict() for row in rows]
        except SQLAlchemyError as e:
            raise StoreError(f"select from {collection} failed: {e}") from e
        finally:
            db.close()

    def insert(self, collection: str, document: Dict[str, Any]) -> dict:
        """Insert one record. The store assigns id and created_at."""
        model = _model_for(collection)
        columns = _writable_columns(model)
        unknown = set(document) - columns - READ_ONLY_FIELDS
        if unknown:
            raise StoreError(f"Unknown fields for {collection}: {', '.join(sorted(unknown))}")

        db = self.SessionLocal()
        try:
            record = model(**{k: v for k, v in document.items() if k in columns})
            db.add(record)
            db.commit()
            db.refresh(record)
            return record.to_dict()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"insert into {collection} failed: {e}") from e
        finally:
            db.close()

    def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> dict:
        """Partial update by id. Only the supplied fields are written."""
        model = _model_for(collection)
        columns = _writable_columns(model)
        unknown = set(fields) - columns - READ_ONLY_FIELDS
        if unknown:
            raise StoreError(f"Unknown fields for {collection}: {', '.join(sorted(unknown))}")

        db = self.SessionLocal()
        try:
            record = db.query(model).filter(model.id == record_id).first()
            if record is None:
                raise RecordNotFound(f"No record '{record_id}' in {collection}")
            for key, value in fields.items():
                if key in columns:
                    setattr(record, key, value)
            db.commit()
            db.refresh(record)
            return record.to_dict()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"update of {collection} failed: {e}") from e
        finally:
            db.close()

    def delete(self, collection: str, record_id: str) -> None:
        """Permanent delete by id."""
        model = _model_for(collection)
        db = self.SessionLocal()
        try:
            deleted = db.query(model).filter(model.id == record_id).delete()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StoreError(f"delete from {collection} failed: {e}") from e
        finally:
            db.close()

        if deleted == 0:
            raise RecordNotFound(f"No record '{record_id}' in {collection}")

    def find_one(self, collection: str, field: str, value: Any, strict: bool = False) -> Optional[dict]:
        """
        Equality lookup of a single record.

        Tolerant lookups return None when nothing matches; strict lookups raise RecordNotFound.
        """
        model = _model_for(collection)
        if not hasattr(model, field):
            raise StoreError(f"Collection {collection} has no field '{field}'")

        db = self.SessionLocal()
        try:
            record = db.query(model).filter(getattr(model, field) == value).first()
            found = record.to_dict() if record is not None else None
        except SQLAlchemyError as e:
            raise StoreError(f"lookup in {collection} failed: {e}") from e
        finally:
            db.close()

        if found is None and strict:
            raise RecordNotFound(f"No record in {collection} with {field}={value!r}")
        return found


class OfflineStore:
    """
    "No backend" mode.

    Reads come back empty; writes and strict lookups raise StoreUnavailable.
    """

    def __init__(self, reason: str = "store not configured"):
        self.reason = reason

    def create_tables(self) -> None:
        pass

    def ping(self) -> bool:
        return False

    def select_all(self, collection: str) -> List[dict]:
        _model_for(collection)
        return []

    def insert(self, collection: str, document: Dict[str, Any]) -> dict:
        raise StoreUnavailable(f"Cannot insert into {collection}: {self.reason}")

    def update(self, collection: str, record_id: str, fields: Dict[str, Any]) -> dict:
        raise StoreUnavailable(f"Cannot update {collection}: {self.reason}")

    def delete(self, collection: str, record_id: str) -> None:
        raise StoreUnavailable(f"Cannot delete from {collection}: {self.reason}")

    def find_one(self, collection: str, field: str, value: Any, strict: bool = False) -> Optional[dict]:
        if strict:
            raise StoreUnavailable(f"Cannot look up {collection}: {self.reason}")
        return None


def connect_store(url: Optional[str], key: Optional[str] = None):
    """
    Build the store client for a URL and make sure its tables exist.

    Falls back to OfflineStore (logged once, here) when the URL is missing,
    a placeholder, or the database cannot be reached.
    """
    if not is_configured(url):
        logger.warning("DATABASE_URL not configured. Running in no-backend mode with empty data.")
        return OfflineStore("DATABASE_URL not configured")

    engine = try_build_engine(url, key)
    if engine is None:
        logger.warning("Database engine could not be created. Running in no-backend mode with empty data.")
        return OfflineStore("database engine could not be created")

    store = SqlDocumentStore(engine)
    try:
        store.create_tables()
    except SQLAlchemyError as e:
        logger.warning(f"Database unreachable ({type(e).__name__}). Running in no-backend mode with empty data.")
        return OfflineStore("database unreachable")

    logger.info(f"Connected to {engine.url.get_backend_name()} store")
    return store
