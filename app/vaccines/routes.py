from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List
from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.auth.models import User
from app.vaccines.schemas import VaccineResponse
from app.vaccines.service import VaccineService

router = APIRouter(prefix="/vaccines", tags=["vaccines"])


@router.get("/", response_model=List[VaccineResponse])
async def get_vaccines(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List active vaccines ordered by type."""
    vaccine_service = VaccineService(db)
    return vaccine_service.get_vaccines()
