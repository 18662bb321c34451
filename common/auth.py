from typing import Any, Dict

import jwt
from fastapi import Depends, Header, HTTPException, status

from .secrets import get_secret


def require_token(authorization: str | None = Header(None)) -> Dict[str, Any]:
    """Validate Bearer token via per-user tokens or JWT and return its claims."""

    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")

    # Check for JWT (three segments separated by '.')
    if token.count(".") == 2:
        secret = get_secret("JWT_SECRET")
        if not secret:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden"
            )
        try:
            payload = jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.PyJWTError as exc:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden"
            ) from exc
        return payload

    # Fallback to static per-user tokens
    tokens: Dict[str, str] = get_secret("API_TOKENS", {})
    for user, expected in tokens.items():
        if token == expected:
            return {"sub": user}
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")


def current_username(claims: Dict[str, Any] = Depends(require_token)) -> str:
    """Resolve the ledger party (username) the caller is acting as."""

    username = claims.get("sub")
    if not isinstance(username, str) or not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized"
        )
    return username


def require_admin(claims: Dict[str, Any] = Depends(require_token)) -> str:
    """Allow only configured administrators; returns the admin's username."""

    username = current_username(claims)
    admins = get_secret("ADMIN_USERS", [])
    if claims.get("is_admin") is True or username in admins:
        return username
    raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
