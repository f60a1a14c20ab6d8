"""
Admin session tokens.

Tokens are stateless HS256 JWTs carrying the admin id, valid for 24 hours.
They travel in the ``adminToken`` cookie; API clients that cannot keep
cookies send the same token as ``Authorization: Bearer <token>``. Logging out
only clears the cookie, a copied token stays valid until it expires.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request, Response

from .errors import unauthorized


COOKIE_NAME = "adminToken"
TOKEN_TTL = timedelta(hours=24)
ALGORITHM = "HS256"


def issue_token(admin_id: int, secret: str,
                now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {"adminId": admin_id, "iat": now, "exp": now + TOKEN_TTL}
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def read_token(token: str, secret: str) -> Optional[int]:
    try:
        data = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        return None
    admin_id = data.get("adminId")
    return admin_id if isinstance(admin_id, int) else None


def token_from_request(request: Request) -> Optional[str]:
    token = request.cookies.get(COOKIE_NAME)
    if token:
        return token
    header = request.headers.get("authorization", "")
    scheme, _, value = header.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None


def set_session(response: Response, token: str) -> None:
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=int(TOKEN_TTL.total_seconds()),
        path="/",
        httponly=True,
        secure=True,
        samesite="none",
    )
    response.headers["Authorization"] = f"Bearer {token}"


def clear_session(response: Response) -> None:
    response.delete_cookie(
        COOKIE_NAME, path="/", httponly=True, secure=True, samesite="none"
    )


# ----------------------------
# Dependency
# ----------------------------
def require_admin(request: Request) -> int:
    token = token_from_request(request)
    if not token:
        raise unauthorized("No token provided")
    admin_id = read_token(token, request.app.state.settings.jwt_secret)
    if admin_id is None:
        raise unauthorized("Invalid token")
    request.state.admin_id = admin_id
    return admin_id
