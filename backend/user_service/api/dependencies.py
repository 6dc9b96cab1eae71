"""FastAPI dependency providers - wire settings, sessions and services per request."""

from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from user_service.config import Settings, get_settings
from user_service.infrastructure.database import get_db
from user_service.infrastructure.security import PasswordHasher, TokenIssuer
from user_service.services.credential_service import CredentialService
from user_service.services.user_repository import UserRepository


@lru_cache
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


def get_token_issuer(settings: Settings = Depends(get_settings)) -> TokenIssuer:
    return TokenIssuer.from_settings(settings)


def get_user_repository(db: AsyncSession = Depends(get_db)) -> UserRepository:
    return UserRepository(db)


def get_credential_service(
    repository: UserRepository = Depends(get_user_repository),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer),
) -> CredentialService:
    return CredentialService(repository, hasher, tokens)
