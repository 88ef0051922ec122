# cinebook/auth.py

from datetime import datetime, timedelta, timezone
from typing import NamedTuple, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt

from cinebook.core.config import Settings
from cinebook.core.config import settings as default_settings
from cinebook.exceptions import ForbiddenError, UnauthorizedError

# Tokens are issued by the identity service; this module only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


class CurrentUser(NamedTuple):
    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


# =====================================
# ✅ JWT Helpers
# =====================================
def create_access_token(data: dict, settings: Optional[Settings] = None,
                        expires_minutes: Optional[int] = None) -> str:
    """Create a signed token carrying `user_id` and `role` claims (dev/test issuance)."""
    settings = settings or default_settings
    to_encode = data.copy()
    minutes = expires_minutes if expires_minutes is not None else settings.ACCESS_TOKEN_EXPIRE_MINUTES
    to_encode.update({"exp": datetime.now(timezone.utc) + timedelta(minutes=minutes)})
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def authenticate(token: str, settings: Optional[Settings] = None) -> Tuple[int, str]:
    """Verify a bearer token and return (user_id, role)."""
    settings = settings or default_settings
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")

    user_id = payload.get("user_id")
    role = payload.get("role")
    if user_id is None or not role:
        raise UnauthorizedError("Invalid token claims")
    try:
        return int(user_id), str(role)
    except (TypeError, ValueError):
        raise UnauthorizedError("Invalid token claims")


# =====================================
# ✅ Current User Fetcher
# =====================================
def get_current_user(request: Request, token: Optional[str] = Depends(oauth2_scheme)) -> CurrentUser:
    if not token:
        raise UnauthorizedError("Authorization header required")
    user_id, role = authenticate(token, request.app.state.settings)
    return CurrentUser(user_id=user_id, role=role)


# =====================================
# ✅ Role-based Access Control
# =====================================
def require_role(required_role: str):
    """Dependency to restrict access to users with a given role."""
    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role != required_role:
            raise ForbiddenError(f"Access forbidden: {required_role} role required")
        return current_user
    return checker
