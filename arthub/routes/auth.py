import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select

from arthub.database import get_session
from arthub.models.user import User
from arthub.schemas.user_schemas import AuthResponse, Token, UserLogin, UserRegister
from arthub.utils.hash import hash_password, verify_password
from arthub.utils.token import create_access_token, get_current_user
from arthub.utils.user_utils import private_user

logger = logging.getLogger(__name__)

router = APIRouter()


# -------- AUTH ROUTES --------

@router.post("/register", response_model=AuthResponse, status_code=201)
def register_user(payload: UserRegister, session: Session = Depends(get_session)):
    email = payload.email.lower()

    existing_user = session.exec(select(User).where(User.email == email)).first()
    if existing_user:
        raise HTTPException(400, "Email already registered")

    specializations = None
    if payload.specializations:
        specializations = ",".join(s.strip() for s in payload.specializations if s.strip())

    user = User(
        name=payload.name,
        email=email,
        password=hash_password(payload.password),
        role=payload.role,
        bio=payload.bio,
        location=payload.location,
        specializations=specializations,
    )

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"Registered {user.role} user {user.id}")

    token = create_access_token({"user_id": user.id})
    return {
        "message": "User registered successfully",
        "user": private_user(user),
        "token": token,
    }


@router.post("/login", response_model=Token)
def login(payload: UserLogin, session: Session = Depends(get_session)):
    user = session.exec(select(User).where(User.email == payload.email.lower())).first()

    if not user or not verify_password(payload.password, user.password):
        raise HTTPException(401, "Invalid email or password")

    if not user.is_active:
        raise HTTPException(401, "Account is deactivated")

    user.last_login = datetime.utcnow()
    session.add(user)
    session.commit()

    token = create_access_token({"user_id": user.id})
    return Token(access_token=token, token_type="bearer")


@router.get("/me")
def me(current_user: User = Depends(get_current_user)):
    return private_user(current_user)
