"""
Users router for account registration, login and profiles.

Provides REST API endpoints for:
- Account creation and login (public)
- Current user profile and profile edit (authenticated)
- User lookup by id (authenticated)

Responses carry the service envelope: business rejections come back
with ``ok: false`` and a message, not as HTTP errors.
"""

import structlog
from fastapi import APIRouter, Depends, status

from podcast_api.models.common import CoreResponse
from podcast_api.models.users import (
    User, CreateAccountInput, LoginInput, EditProfileInput,
    LoginResponse, UserProfileResponse
)
from podcast_api.services.users_service import UsersService
from podcast_api.dependencies import get_current_user, get_users_service

logger = structlog.get_logger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        422: {"description": "Validation Error"}
    }
)


@router.post(
    "",
    response_model=CoreResponse,
    status_code=status.HTTP_200_OK,
    summary="Create Account",
    description="""
    Register a new account.

    **Authentication:** Not required (public endpoint)

    **Failure messages:**
    - "There is a user with that email already"
    - "Could not create account"
    """
)
async def create_account(
    data: CreateAccountInput,
    users_service: UsersService = Depends(get_users_service)
) -> CoreResponse:
    output = await users_service.create_account(data)
    return CoreResponse.model_validate(output, from_attributes=True)


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Login",
    description="""
    Authenticate with email and password.

    Returns an identity token to send as `Authorization: Bearer <token>`.

    **Authentication:** Not required (public endpoint)

    **Failure messages:**
    - "User not found"
    - "Wrong password"
    - "Login is fail."
    """
)
async def login(
    data: LoginInput,
    users_service: UsersService = Depends(get_users_service)
) -> LoginResponse:
    output = await users_service.login(data)
    return LoginResponse.model_validate(output, from_attributes=True)


@router.get(
    "/me",
    response_model=UserProfileResponse,
    summary="Current User"
)
async def me(
    current_user: User = Depends(get_current_user)
) -> UserProfileResponse:
    return UserProfileResponse.model_validate(
        {"ok": True, "user": current_user},
        from_attributes=True
    )


@router.patch(
    "/me",
    response_model=CoreResponse,
    summary="Edit Profile",
    description="""
    Change the email and/or password of the authenticated user.

    Fields left out of the body are not changed.

    **Failure messages:**
    - "user not found"
    - "Could not update profile"
    """
)
async def edit_profile(
    data: EditProfileInput,
    current_user: User = Depends(get_current_user),
    users_service: UsersService = Depends(get_users_service)
) -> CoreResponse:
    logger.info("profile_update_attempt", user_id=current_user.id)
    output = await users_service.edit_profile(current_user.id, data)
    return CoreResponse.model_validate(output, from_attributes=True)


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="User Profile",
    description="""
    Look up a user by id.

    **Failure messages:**
    - "User Not Found"
    """
)
async def user_profile(
    user_id: int,
    current_user: User = Depends(get_current_user),
    users_service: UsersService = Depends(get_users_service)
) -> UserProfileResponse:
    output = await users_service.find_by_id(user_id)
    return UserProfileResponse.model_validate(output, from_attributes=True)
