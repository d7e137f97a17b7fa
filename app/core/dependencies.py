from typing import List, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.core.constants import RoleName
from app.core.database import get_db
from app.core.exceptions import InsufficientPermissionsError, InvalidTokenError
from app.core.security import get_user_id_from_token
from app.auth.service import UserService, UserRoleService
from app.auth.models import User

# Security scheme
security = HTTPBearer()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: Session = Depends(get_db)
) -> User:
    """Get current authenticated user."""
    user_id = get_user_id_from_token(credentials.credentials)

    user = UserService(db).get_user_by_id(user_id)
    if not user:
        raise InvalidTokenError(detail="User not found or inactive")

    return user


def get_current_roles(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> List[str]:
    """Names of the roles held by the current user."""
    return UserRoleService(db).get_role_names(current_user)


def get_current_role(roles: List[str] = Depends(get_current_roles)) -> Optional[str]:
    """The role the current user acts with; administrators act as administrators."""
    if RoleName.ADMINISTRATOR.value in roles:
        return RoleName.ADMINISTRATOR.value
    return roles[0] if roles else None


def get_current_admin_user(
    current_user: User = Depends(get_current_user),
    roles: List[str] = Depends(get_current_roles)
) -> User:
    """Get current authenticated administrator."""
    if RoleName.ADMINISTRATOR.value not in roles:
        raise InsufficientPermissionsError(
            detail="Administrator role required",
            error_data={"required_roles": [RoleName.ADMINISTRATOR.value], "user_roles": roles}
        )
    return current_user
