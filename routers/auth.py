import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import get_db
from models import Users
from schemas.auth import (
    SignupSchema,
    LoginSchema,
    LoginResponseSchema,
    MessageSchema,
    UserSchema,
)
from utils.errors import AuthError, DuplicateError, InvalidCredentialsError
from utils.security import create_user_token, decode_access_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/signup",
    response_model=MessageSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new user account",
)
def signup(data: SignupSchema, db: Session = Depends(get_db)):
    # 1) Prevent duplicate usernames
    if db.query(Users).filter_by(username=data.username).first():
        raise DuplicateError("Username already exists")

    # 2) Hash password and persist
    new_user = Users(username=data.username, password=hash_password(data.password))
    db.add(new_user)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError("Username already exists") from e

    logger.info("Created user %s", data.username)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED,
        content={"message": "User created successfully"},
    )


@router.post(
    "/login",
    response_model=LoginResponseSchema,
    summary="User login to receive access token",
)
def login(data: LoginSchema, db: Session = Depends(get_db)):
    """
    Authenticate by username and password. The returned token is valid for
    one hour and cannot be refreshed.
    """
    user = db.query(Users).filter_by(username=data.username).first()
    if not user or not verify_password(data.password, user.password):
        logger.warning("Failed login for %s", data.username)
        raise InvalidCredentialsError()

    logger.info("User %s logged in", user.username)
    return {
        "token": create_user_token(user),
        "user": {"id": user.id, "username": user.username},
    }


def get_current_user(
    x_auth_token: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> Users:
    """
    Validate the x-auth-token header and return the user it names.
    """
    if not x_auth_token:
        raise AuthError("No token, authorization denied")

    payload = decode_access_token(x_auth_token)
    if not payload or "sub" not in payload:
        logger.warning("Rejected invalid or expired token")
        raise AuthError("Token is not valid")

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise AuthError("Token is not valid")

    user = db.get(Users, user_id)
    if not user:
        raise AuthError("Token is not valid")
    return user


@router.get(
    "/user",
    response_model=UserSchema,
    summary="Return the authenticated user without the password",
)
def read_current_user(current_user: Users = Depends(get_current_user)):
    return current_user
