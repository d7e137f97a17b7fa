import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from app.core.constants import Status
from app.vaccines.models import Vaccine

logger = logging.getLogger(__name__)


class VaccineService:
    def __init__(self, db: Session):
        self.db = db

    def get_vaccines(self) -> List[Vaccine]:
        """Get active vaccines ordered by type."""
        vaccines = self.db.query(Vaccine).filter(
            Vaccine.status == Status.ACTIVE
        ).order_by(Vaccine.vaccine_type.asc()).all()

        logger.debug(f"Found {len(vaccines)} active vaccines")
        return vaccines

    def get_vaccine(self, vaccine_id: int) -> Optional[Vaccine]:
        """Get an active vaccine by ID."""
        return self.db.query(Vaccine).filter(
            Vaccine.id == vaccine_id,
            Vaccine.status == Status.ACTIVE
        ).first()
