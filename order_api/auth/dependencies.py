from dataclasses import dataclass

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from order_api.auth import jwt_handler
from order_api.core.errors import UnauthorizedError

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    """Identity carried by a verified access token."""

    email: str
    role: str
    subject_id: str


def principal_from_claims(payload: dict) -> Principal:
    email = payload.get("email")
    role = payload.get("role")
    subject_id = payload.get("sub")
    if not email or not role or not subject_id:
        raise UnauthorizedError("Invalid token claims")
    return Principal(email=email, role=role, subject_id=str(subject_id))


def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise UnauthorizedError("Missing bearer token")

    try:
        payload = jwt_handler.decode_access_token(credentials.credentials)
    except jwt.ExpiredSignatureError as exc:
        raise UnauthorizedError("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise UnauthorizedError("Invalid token") from exc

    return principal_from_claims(payload)
