"""Declarative base shared by all SQLAlchemy models."""

from __future__ import annotations

from uuid import uuid4

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    """Return a new document-style identifier."""

    return uuid4().hex


__all__ = ["Base", "new_id"]
