"""
Registration and login endpoints.
"""
from fastapi import APIRouter, Depends, Request, status
from passlib.exc import PasswordSizeError
from typing import Optional, Tuple
import logging

from ..auth import hash_password, verify_password, create_access_token
from ..config import Settings
from ..directory import DirectoryError, UserDirectory, UserNotFound, UsernameTaken
from ..errors import BadRequest, Conflict, InternalError
from ..schemas import (
    AuthenticatedUser,
    LoginResponse,
    RegisteredUser,
    RegistrationResponse,
    UserCredentials,
)

router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)


def get_directory(request: Request) -> UserDirectory:
    return request.app.state.directory


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def require_credentials(credentials: Optional[UserCredentials]) -> Tuple[str, str]:
    if credentials is None or not credentials.username or not credentials.password:
        raise BadRequest("Username and password are required")
    return credentials.username, credentials.password


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=RegistrationResponse,
)
def register(
    credentials: Optional[UserCredentials] = None,
    directory: UserDirectory = Depends(get_directory),
):
    username, password = require_credentials(credentials)

    # No existence pre-check: the directory's unique constraint decides
    try:
        hashed_pw = hash_password(password)
        new_user = directory.insert(username, hashed_pw)
    except PasswordSizeError as e:
        raise BadRequest("Password is too long") from e
    except UsernameTaken as e:
        logger.info("Registration rejected, username taken: username=%s", username)
        raise Conflict("Username already exists") from e
    except DirectoryError as e:
        logger.error("Registration error: username=%s code=%s message=%s", username, e.code, e.message)
        raise InternalError(f"Internal server error: {e.message}") from e
    except Exception as e:
        logger.exception("Registration error: username=%s", username)
        raise InternalError(f"Internal server error: {e}") from e

    logger.info("Registered user: user_id=%s, username=%s", new_user.id, new_user.username)
    return RegistrationResponse(
        user=RegisteredUser(
            id=new_user.id,
            username=new_user.username,
            created_at=new_user.created_at,
        )
    )


@router.post("/login", response_model=LoginResponse)
def login(
    credentials: Optional[UserCredentials] = None,
    directory: UserDirectory = Depends(get_directory),
    settings: Settings = Depends(get_settings),
):
    username, password = require_credentials(credentials)

    try:
        user = directory.find_by_username(username)
    except UserNotFound as e:
        raise BadRequest("User not found") from e
    except DirectoryError as e:
        logger.error("Login error: username=%s code=%s message=%s", username, e.code, e.message)
        raise InternalError("Internal server error") from e

    try:
        valid_password = verify_password(password, user.password)
    except ValueError as e:
        # Stored digest is not one passlib recognises
        logger.error("Login error: unreadable password digest for user_id=%s", user.id)
        raise InternalError("Internal server error") from e

    if not valid_password:
        raise BadRequest("Invalid password")

    try:
        token = create_access_token(user.id, user.username, settings)
    except Exception as e:
        logger.exception("Login error: could not sign token for user_id=%s", user.id)
        raise InternalError("Internal server error") from e

    logger.info("Successful login: user_id=%s, username=%s", user.id, user.username)
    return LoginResponse(
        token=token,
        user=AuthenticatedUser(id=user.id, username=user.username),
    )
