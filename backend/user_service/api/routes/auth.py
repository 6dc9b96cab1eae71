"""Authentication Routes - signup and login, both answering with a bearer token."""

from fastapi import APIRouter, Depends

from user_service.api.dependencies import get_credential_service
from user_service.schemas.user import LoginRequest, TokenResponse, UserCreate
from user_service.services.credential_service import CredentialService

router = APIRouter(tags=["auth"])


@router.post("/signup", response_model=TokenResponse)
async def signup(
    body: UserCreate,
    credentials: CredentialService = Depends(get_credential_service),
):
    """Register a new account and return its token."""
    return TokenResponse(token=await credentials.register(body))


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    credentials: CredentialService = Depends(get_credential_service),
):
    return TokenResponse(token=await credentials.login(body))
