"""User routes: connect, disconnect, sign-up, me."""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, Response, status

from files_manager.auth.dependencies import (
    UNAUTHORIZED,
    get_auth_service,
    get_current_user,
    get_user_directory,
    token_header,
)
from files_manager.auth.service import AuthService, Unauthorized
from files_manager.limiter import limiter
from files_manager.users.directory import UserDirectory, UserExistsError
from files_manager.users.models import TokenResponse, User, UserCreate, UserResponse

router = APIRouter(tags=["users"])
log = logging.getLogger(__name__)


@router.get("/connect", response_model=TokenResponse)
@limiter.limit("10/minute")
async def connect(
    request: Request,
    auth: Annotated[AuthService, Depends(get_auth_service)],
    authorization: Annotated[Optional[str], Header()] = None,
) -> TokenResponse:
    """Sign in with Basic auth (base64 of email:password); returns a session token valid 24h."""
    try:
        token = await auth.sign_in(authorization)
    except Unauthorized as e:
        log.warning("connect rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)
    return TokenResponse(token=token)


@router.get("/disconnect", status_code=status.HTTP_204_NO_CONTENT)
async def disconnect(
    auth: Annotated[AuthService, Depends(get_auth_service)],
    token: Annotated[Optional[str], Depends(token_header)],
) -> Response:
    """Sign out: delete the session behind X-Token."""
    try:
        await auth.sign_out(token)
    except Unauthorized:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=UNAUTHORIZED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=UserResponse)
@limiter.limit("10/minute")
async def create_user(
    request: Request,
    payload: UserCreate,
    users: Annotated[UserDirectory, Depends(get_user_directory)],
) -> UserResponse:
    """Create an account from email and password."""
    if not payload.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing email")
    if not payload.password:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing password")
    try:
        user = await users.create_user(payload.email, payload.password)
    except UserExistsError:
        log.warning("Sign-up rejected, email taken: %s", payload.email)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Already exist")
    return UserResponse.model_validate(user)


@router.get("/users/me", response_model=UserResponse)
async def me(
    current_user: Annotated[User, Depends(get_current_user)],
) -> UserResponse:
    """Return current authenticated user."""
    return UserResponse.model_validate(current_user)
