from jose import jwt, JWTError
from datetime import datetime, timedelta
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session
from arthub.config import settings
from arthub.database import get_session
from arthub.models.user import User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()

    expire = datetime.utcnow() + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire})

    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _load_user(token: Optional[str], session: Session) -> User:
    """Resolve a bearer token to its user or raise 401."""
    payload = decode_access_token(token) if token else None
    if payload is None:
        raise _unauthorized("Could not validate credentials")

    # tokens carry user_id; "sub" kept for tokens issued by other clients
    user_id = payload.get("user_id") or payload.get("sub")
    if user_id is None:
        raise _unauthorized("Invalid token payload")

    try:
        user_id = int(user_id)
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token payload")

    user = session.get(User, user_id)
    if user is None:
        raise _unauthorized("User not found")

    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session)
) -> User:
    user = _load_user(token, session)

    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled"
        )

    return user


def get_optional_user(
    token: Optional[str] = Depends(optional_oauth2_scheme),
    session: Session = Depends(get_session)
) -> Optional[User]:
    """Anonymous visitors, bad tokens and disabled accounts all yield None."""
    if not token:
        return None

    try:
        user = _load_user(token, session)
    except HTTPException:
        return None

    return user if user.is_active else None
