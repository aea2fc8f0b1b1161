from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from medbook.auth import jwt_handler
from medbook.core.errors import Forbidden, Unauthorized
from medbook.database import get_db
from medbook.models.user import User

ADMIN_ROLE = "admin"

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Identity:
    """The authenticated caller, resolved once at the auth boundary."""

    user_id: int
    email: str
    name: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    @property
    def display_name(self) -> str:
        return self.name or self.email


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: Session = Depends(get_db),
) -> Identity:
    if credentials is None or not credentials.credentials:
        raise Unauthorized("Access denied. No token provided.")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token expired. Please login again.") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token.") from exc

    email = str(payload.get("sub") or "").strip().lower()
    if not email:
        raise Unauthorized("Invalid token subject.")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise Unauthorized("Invalid token. User not found.")

    return Identity(
        user_id=user.id,
        email=user.email,
        name=user.name or "",
        role=user.role or "user",
    )


def require_patient(identity: Identity = Depends(get_current_identity)) -> Identity:
    if identity.is_admin:
        raise Forbidden("Only patients can manage their own appointments.")
    return identity


def require_admin(identity: Identity = Depends(get_current_identity)) -> Identity:
    if not identity.is_admin:
        raise Forbidden("Access denied. Admin privileges required.")
    return identity
