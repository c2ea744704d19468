import logging
from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from materials_api.auth import jwt_handler
from materials_api.core.errors import forbidden, unauthorized
from materials_api.database import get_db
from materials_api.models.user import User, UserRole, UserStatus
from materials_api.repositories import user_repository

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller, handed explicitly from the auth layer to handlers."""

    user: User

    @property
    def user_id(self) -> int:
        return self.user.id

    @property
    def role(self) -> UserRole:
        return UserRole(self.user.role)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin

    def owns(self, owner_id: int) -> bool:
        return owner_id == self.user.id


def protect(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> AuthContext:
    if credentials is None or not credentials.credentials:
        raise unauthorized()

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.PyJWTError as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise unauthorized() from exc

    user_id = payload.get("id")
    if not isinstance(user_id, int):
        raise unauthorized()

    user = user_repository.get_user(db, user_id)
    if user is None:
        raise unauthorized("User not found")
    if UserStatus(user.status) != UserStatus.active:
        raise unauthorized("Account is not active")
    return AuthContext(user=user)


def authorize(*roles: UserRole):
    allowed = {UserRole(role) for role in roles}

    def check_role(context: AuthContext = Depends(protect)) -> AuthContext:
        if context.role not in allowed:
            raise forbidden(f"User role {context.role.value} is not authorized to access this route")
        return context

    return check_role
