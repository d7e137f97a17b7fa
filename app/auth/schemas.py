from pydantic import BaseModel
from typing import List, Optional


class UserLogin(BaseModel):
    username: str
    password: str


class UserResponse(BaseModel):
    id: int
    username: str
    employee_id: Optional[int] = None
    roles: List[str] = []


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
