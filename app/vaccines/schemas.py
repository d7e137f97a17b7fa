from pydantic import BaseModel
from app.core.constants import Status


class VaccineResponse(BaseModel):
    id: int
    vaccine_type: str
    status: Status

    class Config:
        from_attributes = True
