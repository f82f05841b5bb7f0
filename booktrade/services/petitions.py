"""Petition register: who wants which ISBN, and how badly."""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from booktrade.errors import DatabaseError, ValidationError
from booktrade.models import Petition
from booktrade.repository import ListingRepository

logger = logging.getLogger(__name__)


class PetitionRegister:
    def __init__(self, repo: ListingRepository):
        self.repo = repo

    def set(self, user_id: int, isbn: str, level: int) -> Petition:
        """Create or overwrite the petition of ``user_id`` for ``isbn``."""
        isbn = (isbn or "").strip()
        if not isbn:
            raise ValidationError("isbn is required")
        try:
            petition = self.repo.upsert_petition(user_id, isbn, level)
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Saving petition of user {user_id} for {isbn} failed: {e}")
            raise DatabaseError("Database error") from e
        logger.info(f"User {user_id} petition for {isbn} set to level {level}")
        return petition

    def for_user(self, user_id: int) -> list[dict[str, Any]]:
        return [self.as_dict(p) for p in self.repo.petitions_of_user(user_id)]

    def for_isbn(self, isbn: str) -> list[dict[str, Any]]:
        return [self.as_dict(p) for p in self.repo.petitions_for_isbn(isbn)]

    @staticmethod
    def as_dict(petition: Petition) -> dict[str, Any]:
        return {
            "id": petition.id,
            "user_id": petition.user_id,
            "isbn": petition.isbn,
            "level": petition.level,
            "active": petition.active,
            "updated_at": petition.updated_at.isoformat() if petition.updated_at else None,
        }
