"""
Account service: registration, login and profile management.

Every operation returns a result envelope. Expected rejections carry a
specific message; unexpected errors are logged and reported with a
generic, operation-specific message.
"""

import structlog

from podcast_api.models.users import (
    User, CreateAccountInput, CreateAccountOutput, LoginInput, LoginOutput,
    UserProfileOutput, EditProfileInput, EditProfileOutput
)
from podcast_api.repositories.base import Repository
from podcast_api.services.jwt_service import JwtService
from podcast_api.services.password_hasher import PasswordHasher

logger = structlog.get_logger(__name__)


class UsersService:
    """Service for user account operations."""

    def __init__(
        self,
        users: Repository[User],
        jwt_service: JwtService,
        password_hasher: PasswordHasher
    ):
        """
        Initialize users service.

        Args:
            users: User repository
            jwt_service: Token service used at login
            password_hasher: Hasher applied to passwords before saving
        """
        self.users = users
        self.jwt_service = jwt_service
        self.password_hasher = password_hasher

    async def create_account(self, data: CreateAccountInput) -> CreateAccountOutput:
        """
        Register a new account unless the email is taken.

        Args:
            data: Email, password and role

        Returns:
            Result envelope
        """
        try:
            exists = await self.users.find_one({"email": data.email})
            if exists:
                logger.warning("account_create_email_taken", email=data.email)
                return CreateAccountOutput(ok=False, error="There is a user with that email already")

            user = self.users.create(
                email=data.email,
                password=self.password_hasher.hash(data.password),
                role=data.role
            )
            await self.users.save(user)

            logger.info("account_created", email=data.email, role=data.role.value)
            return CreateAccountOutput(ok=True)

        except Exception as e:
            logger.error("account_create_failed", error=str(e), email=data.email)
            return CreateAccountOutput(ok=False, error="Could not create account")

    async def login(self, data: LoginInput) -> LoginOutput:
        """
        Check credentials and issue a token.

        Args:
            data: Email and password

        Returns:
            Result envelope with the token on success
        """
        try:
            user = await self.users.find_one({"email": data.email})
            if not user:
                logger.warning("login_failed_user_not_found", email=data.email)
                return LoginOutput(ok=False, error="User not found")

            if not user.check_password(data.password, self.password_hasher):
                logger.warning("login_failed_wrong_password", user_id=user.id)
                return LoginOutput(ok=False, error="Wrong password")

            token = self.jwt_service.sign(user.id)

            logger.info("login_success", user_id=user.id)
            return LoginOutput(ok=True, token=token)

        except Exception as e:
            logger.error("login_error", error=str(e), email=data.email)
            return LoginOutput(ok=False, error="Login is fail.")

    async def find_by_id(self, user_id: int) -> UserProfileOutput:
        """
        Look up a user by id.

        Args:
            user_id: User ID

        Returns:
            Result envelope with the user on success
        """
        try:
            user = await self.users.find_one_or_fail({"id": user_id})
            return UserProfileOutput(ok=True, user=user)

        except Exception as e:
            logger.warning("user_lookup_failed", error=str(e), user_id=user_id)
            return UserProfileOutput(ok=False, error="User Not Found")

    async def edit_profile(self, user_id: int, data: EditProfileInput) -> EditProfileOutput:
        """
        Update the email and/or password of a user.

        Only fields present in ``data`` are changed. A new password is
        hashed before the user is saved.

        Args:
            user_id: User ID
            data: Fields to change

        Returns:
            Result envelope
        """
        try:
            user = await self.users.find_one({"id": user_id})
            if not user:
                logger.warning("profile_update_user_not_found", user_id=user_id)
                return EditProfileOutput(ok=False, error="user not found")

            if data.email:
                user.email = data.email
            if data.password:
                user.password = self.password_hasher.hash(data.password)

            await self.users.save(user)

            logger.info(
                "profile_updated",
                user_id=user_id,
                email_changed=bool(data.email),
                password_changed=bool(data.password)
            )
            return EditProfileOutput(ok=True)

        except Exception as e:
            logger.error("profile_update_failed", error=str(e), user_id=user_id)
            return EditProfileOutput(ok=False, error="Could not update profile")
