"""User CRUD - list, create, fetch, partial update, delete.

Invariants:
    - Bodies are validated by Pydantic before reaching the handler
    - Handlers raise domain errors; api/error_handlers.py turns them into responses
    - Passwords never appear in responses
"""

from fastapi import APIRouter, Depends, Query, status

from user_service.api.dependencies import get_credential_service, get_user_repository
from user_service.core.domain_types import UserFilters
from user_service.core.pagination import PageWindow
from user_service.schemas.user import (
    MessageResponse,
    PaginationInfo,
    UserCreate,
    UserEnvelope,
    UserListResponse,
    UserMutationResponse,
    UserResponse,
    UserUpdate,
)
from user_service.services.credential_service import CredentialService
from user_service.services.user_repository import UserRepository

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListResponse)
async def list_users(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    name: str | None = Query(None, max_length=100),
    email: str | None = Query(None, max_length=255),
    repository: UserRepository = Depends(get_user_repository),
):
    """List users with substring filters and page-based pagination."""
    result = await repository.list(
        UserFilters(name=name, email=email), PageWindow(page, page_size),
    )
    return UserListResponse(
        users=[UserResponse.model_validate(u) for u in result.items],
        pagination=PaginationInfo(
            current_page=page,
            page_size=page_size,
            total_pages=result.total_pages,
            total_items=result.total_items,
        ),
    )


@router.post(
    "", response_model=UserMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_user(
    body: UserCreate,
    credentials: CredentialService = Depends(get_credential_service),
):
    user = await credentials.create_user(body)
    return UserMutationResponse(
        message="User created successfully",
        user=UserResponse.model_validate(user),
    )


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: int, repository: UserRepository = Depends(get_user_repository),
):
    user = await repository.get_by_id(user_id)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.put("/{user_id}", response_model=UserMutationResponse)
async def update_user(
    user_id: int,
    body: UserUpdate,
    credentials: CredentialService = Depends(get_credential_service),
):
    """Partial update: omitted fields keep their stored values."""
    user = await credentials.update_user(user_id, body)
    return UserMutationResponse(
        message="User updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: int, repository: UserRepository = Depends(get_user_repository),
):
    await repository.delete(user_id)
    return MessageResponse(message="User deleted successfully")
