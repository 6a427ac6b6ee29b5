"""Bearer token verification.

Tokens are issued by an external identity provider and signed with a shared
secret. The ``id`` claim is the id of the User (and of the user's Cart), the
``role`` claim is ``customer`` or ``admin``.
"""

import os
from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from marketplace.errors import AuthenticationError, ForbiddenError
from marketplace.identity.user import Role

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value


def _secret() -> str:
    secret = os.environ.get("JWT_SECRET")
    if not secret:
        raise AuthenticationError("Token verification is not configured")
    return secret


def _algorithm() -> str:
    return os.environ.get("JWT_ALGORITHM", "HS256")


def decode_token(token: str) -> Principal:
    try:
        claims = jwt.decode(token, _secret(), algorithms=[_algorithm()])
    except jwt.ExpiredSignatureError as exc:
        raise AuthenticationError("Token has expired") from exc
    except jwt.InvalidTokenError as exc:
        raise AuthenticationError("Token is not valid") from exc

    user_id = claims.get("id")
    if not user_id:
        raise AuthenticationError("Token is not valid")
    role = claims.get("role") or Role.CUSTOMER.value
    if role not in (Role.CUSTOMER.value, Role.ADMIN.value):
        raise AuthenticationError("Token is not valid")
    return Principal(id=str(user_id), role=role)


def current_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("No token, authorization denied")
    return decode_token(credentials.credentials)


def optional_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Principal | None:
    if credentials is None or not credentials.credentials:
        return None
    return decode_token(credentials.credentials)


def require_admin(principal: Principal = Depends(current_user)) -> Principal:
    if not principal.is_admin:
        raise ForbiddenError("Admin access required")
    return principal
