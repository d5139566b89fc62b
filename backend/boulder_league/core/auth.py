from typing import Optional

import jwt
from boulder_league.core.config import settings
from fastapi import Header, HTTPException, status


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def decode_access_token(token: str) -> dict:
    """
    Decode a Supabase access token.

    The signature is checked only when SUPABASE_JWT_SECRET is configured;
    otherwise Supabase is trusted to have issued the token.
    """
    if settings.SUPABASE_JWT_SECRET:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience="authenticated",
        )
    return jwt.decode(
        token,
        options={"verify_signature": False},
        algorithms=["HS256"],
    )


def get_current_user_id(authorization: str = Header(None)) -> str:
    """Return the acting climber's id from the "Bearer <token>" header."""
    if not authorization:
        raise _unauthorized("Authorization header required")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise _unauthorized("Invalid authorization header format")

    try:
        payload = decode_access_token(parts[1])
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        raise _unauthorized(f"Invalid token: {str(e)}")

    user_id = payload.get("sub")
    if not user_id:
        raise _unauthorized("Invalid token: no user ID")

    return user_id


def get_optional_user_id(authorization: str = Header(None)) -> Optional[str]:
    """Like get_current_user_id but anonymous callers get None."""
    if not authorization:
        return None

    try:
        return get_current_user_id(authorization)
    except HTTPException:
        return None
