"""User Repository - filtering, pagination, partial updates and not-found handling.

Invariants:
    - page_size=10, page=2 on 25 rows returns rows 11-20 and total_pages == 3
    - Filters are case-insensitive substrings and treat % and _ literally
    - Update/delete on a missing id raise NotFoundError and write nothing
    - Duplicate email raises ConflictError
    - Driver failures surface as StorageError and roll back the write
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from user_service.core.domain_types import UserFilters
from user_service.core.errors import (
    ConflictError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from user_service.core.pagination import PageWindow
from user_service.models.user import User
from user_service.services.user_repository import MAX_USER_ID, UserRepository


@pytest.fixture
def repository(test_db):
    return UserRepository(test_db)


async def _count_users(session_factory) -> int:
    async with session_factory() as session:
        return (await session.execute(select(func.count()).select_from(User))).scalar_one()


async def test_second_page_of_25_returns_records_11_to_20(repository, seed_users):
    ids = await seed_users(25)

    page = await repository.list(UserFilters(), PageWindow(page=2, page_size=10))

    assert [u.id for u in page.items] == ids[10:20]
    assert page.total_items == 25
    assert page.total_pages == 3


async def test_last_page_is_partial(repository, seed_users):
    await seed_users(25)
    page = await repository.list(UserFilters(), PageWindow(page=3, page_size=10))
    assert len(page.items) == 5


async def test_page_past_the_end_is_empty(repository, seed_users):
    await seed_users(3)
    page = await repository.list(UserFilters(), PageWindow(page=5, page_size=10))
    assert page.items == []
    assert page.total_items == 3
    assert page.total_pages == 1


async def test_name_filter_is_case_insensitive_substring(repository, seed_users):
    await seed_users(rows=[
        ("Alice Smith", "alice@example.com"),
        ("Bob Jones", "bob@example.com"),
        ("alicia keys", "ak@example.com"),
    ])

    page = await repository.list(UserFilters(name="ALIC"), PageWindow(1, 10))

    assert sorted(u.name for u in page.items) == ["Alice Smith", "alicia keys"]
    assert page.total_items == 2


async def test_name_and_email_filters_combine(repository, seed_users):
    await seed_users(rows=[
        ("Alice Smith", "alice@corp.io"),
        ("Alice Other", "alice@example.com"),
    ])

    page = await repository.list(
        UserFilters(name="alice", email="CORP"), PageWindow(1, 10),
    )

    assert [u.email for u in page.items] == ["alice@corp.io"]


async def test_like_wildcards_are_literal(repository, seed_users):
    await seed_users(rows=[
        ("100% real", "real@example.com"),
        ("100 fake", "fake@example.com"),
    ])

    page = await repository.list(UserFilters(name="100%"), PageWindow(1, 10))

    assert [u.name for u in page.items] == ["100% real"]


async def test_create_then_get_round_trip(repository, test_session_factory):
    created = await repository.create("Dana", "Dana@Example.com ", "hashed-value")

    async with test_session_factory() as other:
        fetched = await UserRepository(other).get_by_id(created.id)

    assert fetched.name == "Dana"
    assert fetched.email == "dana@example.com"
    assert fetched.password == "hashed-value"
    assert fetched.created_at is not None


async def test_duplicate_email_raises_conflict(repository, seed_users, test_session_factory):
    await seed_users(rows=[("Eve", "eve@example.com")])

    with pytest.raises(ConflictError):
        await repository.create("Eve Again", "eve@example.com", "hash")

    assert await _count_users(test_session_factory) == 1


async def test_get_missing_user_raises_not_found(repository):
    with pytest.raises(NotFoundError):
        await repository.get_by_id(999)


async def test_get_by_email_normalizes_input(repository, seed_users):
    await seed_users(rows=[("Finn", "finn@example.com")])
    user = await repository.get_by_email("  FINN@example.com")
    assert user is not None and user.name == "Finn"


async def test_get_by_email_returns_none_when_absent(repository):
    assert await repository.get_by_email("nobody@example.com") is None


async def test_update_merges_only_given_fields(repository, seed_users):
    [user_id] = await seed_users(rows=[("Gina", "gina@example.com")])

    updated = await repository.update(user_id, {"name": "Gina Lee"})

    assert updated.name == "Gina Lee"
    assert updated.email == "gina@example.com"
    assert updated.password == "not-a-real-hash"


async def test_update_missing_user_raises_and_writes_nothing(
    repository, seed_users, test_session_factory,
):
    [existing] = await seed_users(rows=[("Lou", "lou@example.com")])
    async with test_session_factory() as session:
        before = await session.get(User, existing)

    with pytest.raises(NotFoundError):
        await repository.update(existing + 1, {"name": "Nobody", "email": "lou@example.com"})

    async with test_session_factory() as session:
        after = await session.get(User, existing)
    assert (after.name, after.email, after.updated_at) == (
        before.name, before.email, before.updated_at,
    )
    assert await _count_users(test_session_factory) == 1


async def test_update_to_taken_email_raises_conflict(repository, seed_users):
    first, _ = await seed_users(rows=[
        ("Hank", "hank@example.com"), ("Ivy", "ivy@example.com"),
    ])
    with pytest.raises(ConflictError):
        await repository.update(first, {"email": "ivy@example.com"})


async def test_update_rejects_unknown_fields(repository, seed_users):
    [user_id] = await seed_users(rows=[("Jack", "jack@example.com")])
    with pytest.raises(ValidationError) as exc_info:
        await repository.update(user_id, {"id": 77})
    assert exc_info.value.http_status == 400


async def test_delete_removes_row(repository, seed_users, test_session_factory):
    [user_id] = await seed_users(rows=[("Kim", "kim@example.com")])

    await repository.delete(user_id)

    assert await _count_users(test_session_factory) == 0


async def test_delete_missing_user_raises_not_found(repository):
    with pytest.raises(NotFoundError):
        await repository.delete(12345)


@pytest.mark.parametrize("user_id", [0, -1, MAX_USER_ID + 1, 2**63])
async def test_ids_outside_key_range_are_not_found(repository, user_id):
    with pytest.raises(NotFoundError):
        await repository.get_by_id(user_id)
    with pytest.raises(NotFoundError):
        await repository.update(user_id, {"name": "X"})
    with pytest.raises(NotFoundError):
        await repository.delete(user_id)


# ─── Storage failures ──────────────────────────────────────────

async def _failing(*args, **kwargs):
    raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))


async def test_list_failure_raises_storage_error(repository, test_db, monkeypatch):
    monkeypatch.setattr(test_db, "execute", _failing)

    with pytest.raises(StorageError) as exc_info:
        await repository.list(UserFilters(), PageWindow(1, 10))

    assert exc_info.value.message == "Database list failed: Failed to fetch users"
    assert exc_info.value.http_status == 500


async def test_get_failure_raises_storage_error(repository, test_db, monkeypatch):
    monkeypatch.setattr(test_db, "get", _failing)
    with pytest.raises(StorageError):
        await repository.get_by_id(1)


async def test_create_commit_failure_leaves_no_row(
    repository, test_db, test_session_factory, monkeypatch,
):
    monkeypatch.setattr(test_db, "commit", _failing)

    with pytest.raises(StorageError):
        await repository.create("Mia", "mia@example.com", "hash")

    assert await _count_users(test_session_factory) == 0


async def test_update_commit_failure_keeps_stored_values(
    repository, test_db, seed_users, test_session_factory, monkeypatch,
):
    [user_id] = await seed_users(rows=[("Ned", "ned@example.com")])
    monkeypatch.setattr(test_db, "commit", _failing)

    with pytest.raises(StorageError):
        await repository.update(user_id, {"name": "Ned Stark"})

    async with test_session_factory() as session:
        assert (await session.get(User, user_id)).name == "Ned"


async def test_delete_commit_failure_keeps_row(
    repository, test_db, seed_users, test_session_factory, monkeypatch,
):
    [user_id] = await seed_users(rows=[("Oma", "oma@example.com")])
    monkeypatch.setattr(test_db, "commit", _failing)

    with pytest.raises(StorageError):
        await repository.delete(user_id)

    assert await _count_users(test_session_factory) == 1
