# foodexpress/data/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from foodexpress.domain.errors import OrderNumberConflict, PersistenceFailure
from foodexpress.utils.settings import DATABASE_URL
from foodexpress.utils.logging import get_logger

logger = get_logger(__name__)

engine = create_engine(DATABASE_URL, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=True)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session, conflict_on: tuple = ()):
    """One atomic unit: commit on success, full rollback on any error.

    SQLAlchemy errors leave as PersistenceFailure. An IntegrityError whose
    message names one of `conflict_on` becomes OrderNumberConflict so the
    caller can retry the whole unit.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if any(marker in str(e.orig) for marker in conflict_on):
            logger.warning(f"Integrity conflict, transaction rolled back: {e.orig}")
            raise OrderNumberConflict("Order number already taken") from e
        logger.error(f"Integrity error, transaction rolled back: {e.orig}")
        raise PersistenceFailure("Could not save changes") from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Database error, transaction rolled back: {e}")
        raise PersistenceFailure("Could not save changes") from e
    except BaseException:
        db.rollback()
        raise
