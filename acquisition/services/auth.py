import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from acquisition.core.config import settings
from acquisition.core.errors import Forbidden, Unauthenticated
from acquisition.core.security import decode_access_token

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Actor:
    id: uuid.UUID
    role: str  # "user" | "admin"


async def get_actor(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Actor:
    # Bearer header wins over the cookie set at sign-in.
    token = credentials.credentials if credentials else request.cookies.get(settings.auth_cookie_name)
    if not token:
        raise Unauthenticated("Authentication required")

    claims = decode_access_token(token)
    if claims is None:
        raise Unauthenticated("Invalid or expired token")

    return Actor(id=claims.user_id, role=claims.role)


def require_admin(actor: Actor = Depends(get_actor)) -> Actor:
    if actor.role != "admin":
        raise Forbidden("Admin role required")
    return actor
