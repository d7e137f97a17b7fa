"""
Base service with transaction helpers shared by every domain service.

Collaborator services only flush; the service that owns a workflow commits
once at the end so a failure anywhere leaves nothing behind.
"""

import logging
from typing import Optional, Any, Callable, Dict
from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, IntegrityError

from app.core.exceptions import DatabaseError, ResourceAlreadyExistsError

logger = logging.getLogger(__name__)


class BaseService:
    def __init__(self, db: Session):
        self.db = db

    def _guarded(self, write: Callable[[], None], stage: str, error_message: str):
        try:
            write()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Integrity error during {stage}: {e.orig}")
            raise ResourceAlreadyExistsError(
                resource_type="Record",
                error_data={"original_error": str(e.orig)}
            )
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error during {stage}: {e}")
            raise DatabaseError(
                detail=error_message,
                operation=stage,
                error_data={"original_error": str(e)}
            )

    def safe_commit(self, error_message: str = "Database operation failed"):
        """Commit the unit of work, rolling back and translating database errors."""
        self._guarded(self.db.commit, "commit", error_message)

    def safe_flush(self, error_message: str = "Database operation failed"):
        """Flush so generated ids are available, without committing."""
        self._guarded(self.db.flush, "flush", error_message)

    def safe_rollback(self):
        try:
            self.db.rollback()
        except SQLAlchemyError as e:
            logger.error(f"Error during rollback: {e}")

    def apply_changes(self, instance, changes: Dict[str, Any]) -> Dict[str, Any]:
        """Copy the non-null values of ``changes`` onto a model instance."""
        applied = {}
        for field, value in changes.items():
            if value is None:
                continue
            setattr(instance, field, value)
            applied[field] = value
        return applied

    def log_service_action(
        self,
        action: str,
        resource_type: str = None,
        resource_id: Optional[Any] = None,
        extra_data: Dict[str, Any] = None
    ):
        """Audit log line for a completed write."""
        log_data = {"action": action, "service": self.__class__.__name__}

        if resource_type:
            log_data["resource_type"] = resource_type
        if resource_id is not None:
            log_data["resource_id"] = str(resource_id)
        if extra_data:
            log_data.update(extra_data)

        logger.info(f"{self.__class__.__name__}: {action} {resource_type or ''} {resource_id or ''}".strip(), extra=log_data)
