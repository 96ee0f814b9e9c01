from contextlib import contextmanager

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import StorageError
from ..logging_config import logger


def commit(db: Session, action: str) -> None:
    """Commit the session; on failure roll back and raise ``StorageError``."""
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database error while {action}")
        raise StorageError(f"Database error while {action}: {e}") from e


@contextmanager
def storage_errors(db: Session, action: str):
    """Wrap reads/flushes so driver failures come out as ``StorageError``."""
    try:
        yield
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Database error while {action}")
        raise StorageError(f"Database error while {action}: {e}") from e
