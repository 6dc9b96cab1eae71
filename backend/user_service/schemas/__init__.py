"""Pydantic Schemas - request/response contracts, separate from ORM models."""
