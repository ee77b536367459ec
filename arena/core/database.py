"""Database engine, session factory and the commit helper every service uses."""

from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from arena.core.config import settings
from arena.core.exceptions import ConcurrentModification, InvalidInput, StorageError
from arena.core.logging_config import get_logger

logger = get_logger(__name__)

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None) -> None:
    # Import models so they register with Base before create_all
    import arena.models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def is_unique_violation(error: IntegrityError) -> bool:
    # sqlite: "UNIQUE constraint failed"; postgres: SQLSTATE 23505
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()


def commit_or_raise(db: Session, operation: str) -> None:
    """Commit the current unit of work.

    Any driver or ORM failure rolls the session back and surfaces as
    StorageError so callers see a single collaborator-failure type. A
    unique-constraint violation means another writer got there between our
    read and this commit, and is reported as ConcurrentModification. Other
    integrity violations (NOT NULL, foreign key) are bad input and retrying
    will not help, so they surface as InvalidInput.
    """
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if is_unique_violation(e):
            logger.warning("storage_integrity_conflict", operation=operation, error=str(e.orig))
            raise ConcurrentModification(f"Conflicting write during {operation}") from e
        logger.warning("storage_integrity_rejected", operation=operation, error=str(e.orig))
        raise InvalidInput(f"Rejected by a database constraint during {operation}", {"error": str(e.orig)}) from e
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("storage_commit_failed", operation=operation, error=str(e))
        raise StorageError(f"Storage failure during {operation}") from e
