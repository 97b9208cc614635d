# yaytravel/api/routes_auth.py

from fastapi import APIRouter, Depends, HTTPException, Header, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Optional

from yaytravel.db.sqlite_store import SQLiteStore, get_db
from yaytravel.core.logger import logger
from yaytravel.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    decode_token,
)
from yaytravel.models.user_models import CreateUserIn, TokenOut, UserOut, user_out

router = APIRouter(tags=["auth"])


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# --------------------------
# UTILS
# --------------------------
def get_current_user_id(
    authorization: Optional[str] = Header(None),
    db: SQLiteStore = Depends(get_db),
) -> int:
    if not authorization or not authorization.startswith("Bearer "):
        raise _unauthorized("Not authenticated")

    payload = decode_token(authorization.split(" ", 1)[1])
    if not payload or "sub" not in payload:
        raise _unauthorized("Invalid token")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _unauthorized("Invalid token")

    if not db.get_user_by_id(user_id):
        raise _unauthorized("Invalid token")
    return user_id


# --------------------------
# REGISTER
# --------------------------
@router.post("/users/", response_model=UserOut, status_code=201)
def create_user(data: CreateUserIn, db: SQLiteStore = Depends(get_db)):
    if db.get_user_by_email(data.email):
        raise HTTPException(400, "Email already registered")

    user_id = db.create_user(
        email=data.email,
        hashed_password=get_password_hash(data.password),
        first_name=data.FirstName,
        last_name=data.LastName,
        phone_number=data.phoneNumber,
        country=data.country,
        city=data.city,
    )
    logger.info(f"Registered user {user_id}")
    return user_out(db.get_user_by_id(user_id))


# --------------------------
# LOGIN (OAuth2 password form)
# --------------------------
@router.post("/token", response_model=TokenOut)
def login(form: OAuth2PasswordRequestForm = Depends(), db: SQLiteStore = Depends(get_db)):
    user = db.get_user_by_email(form.username)
    if not user or not verify_password(form.password, user["hashed_password"]):
        logger.info("Failed login attempt")
        raise _unauthorized("Incorrect email or password")

    token = create_access_token(subject=str(user["id"]))
    return {"access_token": token, "token_type": "bearer"}


# --------------------------
# ME
# --------------------------
@router.get("/users/me", response_model=UserOut)
def me(user_id: int = Depends(get_current_user_id), db: SQLiteStore = Depends(get_db)):
    user = db.get_user_by_id(user_id)
    if not user:
        raise HTTPException(404, "User not found")
    return user_out(user)
