"""ORM Models - imported here so Base.metadata is populated before create_all/alembic."""

from user_service.models.user import User  # noqa: F401
