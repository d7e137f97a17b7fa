from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from app.auth.models import User, Role, UserRole
from app.auth.schemas import UserLogin
from app.core.constants import Status
from app.core.security import verify_password, create_access_token
from app.core.service_base import BaseService
from app.core.exceptions import AuthenticationError, ResourceInactiveError


class UserService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(
            User.id == user_id,
            User.status == Status.ACTIVE
        ).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, user: User) -> User:
        """Add a user; the password must already be hashed."""
        self.db.add(user)
        self.safe_flush("Error creating user")
        self.log_service_action("create_user", "User", user.id)
        return user

    def update_user(self, user_id: int, changes: Dict[str, Any]) -> Optional[User]:
        user = self.db.get(User, user_id) if user_id is not None else None
        if not user:
            return None

        applied = self.apply_changes(user, changes)
        self.safe_flush("Error updating user")
        # Never log the password hash itself
        self.log_service_action("update_user", "User", user.id, {"fields": sorted(applied)})
        return user


class RoleService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def get_role(self, name: str) -> Optional[Role]:
        """Get an active role by name."""
        if not name:
            return None
        return self.db.query(Role).filter(
            Role.name == name.upper(),
            Role.status == Status.ACTIVE
        ).first()


class UserRoleService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)

    def create_user_role(self, user_role: UserRole) -> UserRole:
        self.db.add(user_role)
        self.safe_flush("Error assigning role")
        self.log_service_action(
            "create_user_role", "UserRole", user_role.id,
            {"user_id": user_role.user_id, "role_id": user_role.role_id}
        )
        return user_role

    def get_role_names(self, user: User) -> List[str]:
        """Names of the active roles held through active assignments."""
        return [
            user_role.role.name
            for user_role in user.user_roles
            if user_role.status == Status.ACTIVE
            and user_role.role is not None
            and user_role.role.status == Status.ACTIVE
        ]


class AuthService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.user_service = UserService(db)

    def authenticate_user(self, login_data: UserLogin) -> User:
        """Authenticate user with username and password."""
        user = self.user_service.get_user_by_username(login_data.username)

        if not user:
            self.log_service_action("failed_login_attempt", extra_data={"username": login_data.username, "reason": "user_not_found"})
            raise AuthenticationError("Invalid username or password")

        if user.status != Status.ACTIVE:
            self.log_service_action("failed_login_attempt", extra_data={"username": login_data.username, "reason": "user_inactive"})
            raise ResourceInactiveError("User", str(user.id))

        if not verify_password(login_data.password, user.password):
            self.log_service_action("failed_login_attempt", extra_data={"username": login_data.username, "reason": "invalid_password"})
            raise AuthenticationError("Invalid username or password")

        self.log_service_action("successful_login", "User", user.id)
        return user

    def create_tokens(self, user: User) -> dict:
        """Create an access token carrying the user's roles."""
        roles = UserRoleService(self.db).get_role_names(user)
        access_token = create_access_token(data={"sub": str(user.id), "roles": roles})

        return {
            "access_token": access_token,
            "token_type": "bearer"
        }
