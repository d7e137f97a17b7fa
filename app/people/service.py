import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session
from app.core.constants import Status
from app.core.service_base import BaseService
from app.people.models import Person

logger = logging.getLogger(__name__)


class PersonService(BaseService):
    """CRUD access to people. Writes are flushed, the caller commits."""

    def __init__(self, db: Session):
        super().__init__(db)

    def get_person(self, dni: int) -> Optional[Person]:
        """Get an active person by dni."""
        return self.db.query(Person).filter(
            Person.dni == dni,
            Person.status == Status.ACTIVE
        ).first()

    def create_person(self, person: Person) -> Person:
        self.db.add(person)
        self.safe_flush("Error creating person")
        self.log_service_action("create_person", "Person", person.id)
        return person

    def update_person(self, person_id: int, changes: Dict[str, Any]) -> Optional[Person]:
        """Apply non-null changes to a person. Returns None when it does not exist."""
        person = self.db.get(Person, person_id) if person_id is not None else None
        if not person:
            logger.warning(f"Person {person_id} not found, update skipped")
            return None

        applied = self.apply_changes(person, changes)
        self.safe_flush("Error updating person")
        self.log_service_action("update_person", "Person", person.id, {"fields": sorted(applied)})
        return person
