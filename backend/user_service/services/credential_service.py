"""Credential Service - registration, login, and every write that touches a password.

Invariants:
    - A password reaches the repository only as a bcrypt hash
    - Duplicate email is detected by the store's unique constraint alone
    - Unknown email and wrong password raise the same AuthenticationError
    - bcrypt runs in the threadpool so the event loop is never blocked
"""

import logging
from typing import TypeVar

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from user_service.core.errors import AuthenticationError, ValidationError
from user_service.infrastructure.security import PasswordHasher, TokenIssuer
from user_service.models.user import User
from user_service.schemas.user import LoginRequest, UserCreate, UserUpdate
from user_service.services.user_repository import UserRepository

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


def parse_payload(model: type[M], payload: M | dict) -> M:
    """Coerce a raw dict into `model`, mapping Pydantic failures to ValidationError."""
    if isinstance(payload, model):
        return payload
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first["loc"]) or None
        raise ValidationError(
            f"{field}: {first['msg']}" if field else first["msg"], field=field,
        ) from e


class CredentialService:
    """Hashes, verifies and issues tokens on top of a UserRepository."""

    def __init__(
        self,
        repository: UserRepository,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
    ):
        self._repository = repository
        self._hasher = hasher
        self._tokens = tokens

    async def create_user(self, payload: UserCreate | dict) -> User:
        """Validate, hash and persist a new user."""
        data = parse_payload(UserCreate, payload)
        password_hash = await run_in_threadpool(self._hasher.hash, data.password)
        return await self._repository.create(data.name, data.email, password_hash)

    async def register(self, payload: UserCreate | dict) -> str:
        """Create the account and return a bearer token for it."""
        user = await self.create_user(payload)
        logger.info("User registered", extra={"user_id": user.id})
        return self._tokens.issue(user.id)

    async def login(self, credentials: LoginRequest | dict) -> str:
        data = parse_payload(LoginRequest, credentials)
        user = await self._repository.get_by_email(data.email)
        if user is None:
            await run_in_threadpool(self._hasher.dummy_verify)
            logger.info("Login failed: unknown account")
            raise AuthenticationError()

        matches = await run_in_threadpool(
            self._hasher.verify, data.password, user.password,
        )
        if not matches:
            logger.info("Login failed: bad password", extra={"user_id": user.id})
            raise AuthenticationError()

        return self._tokens.issue(user.id)

    async def update_user(self, user_id: int, payload: UserUpdate | dict) -> User:
        """Partial update; a new password is re-hashed before it is stored."""
        changes = parse_payload(UserUpdate, payload).changes()
        if "password" in changes:
            changes["password"] = await run_in_threadpool(
                self._hasher.hash, changes["password"],
            )
        return await self._repository.update(user_id, changes)
