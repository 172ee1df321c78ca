"""Repository for user accounts."""

from __future__ import annotations

import sqlite3
from dataclasses import replace
from typing import List, Optional

from forklift_rental.domain.models import User
from forklift_rental.logging_config import get_logger
from forklift_rental.repositories.mappers import user_from_row
from forklift_rental.repositories.records import new_id


class UserRepo:
    """CRUD operations for user accounts."""

    def __init__(self, connection: sqlite3.Connection) -> None:
        self._connection = connection
        self._connection.row_factory = sqlite3.Row
        self._logger = get_logger(self.__class__.__name__)

    def create(self, user: User) -> User:
        stored = replace(user, id=user.id or new_id("user"))
        try:
            self._connection.execute(
                """
                INSERT INTO users (id, email, name, role, rental_company_id)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    stored.id,
                    stored.email,
                    stored.name,
                    stored.role.value,
                    stored.rental_company_id,
                ),
            )
        except Exception:
            self._logger.exception("Failed to create user email=%s", user.email)
            raise
        return stored

    def delete(self, user_id: str) -> bool:
        try:
            cursor = self._connection.execute(
                "DELETE FROM users WHERE id = ?",
                (user_id,),
            )
        except Exception:
            self._logger.exception("Failed to delete user id=%s", user_id)
            raise
        return cursor.rowcount > 0

    def get_by_id(self, user_id: str) -> Optional[User]:
        try:
            row = self._connection.execute(
                "SELECT * FROM users WHERE id = ?",
                (user_id,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch user id=%s", user_id)
            raise
        return user_from_row(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        try:
            row = self._connection.execute(
                "SELECT * FROM users WHERE email = ? COLLATE NOCASE",
                (email,),
            ).fetchone()
        except Exception:
            self._logger.exception("Failed to fetch user email=%s", email)
            raise
        return user_from_row(row) if row else None

    def list_all(self) -> List[User]:
        try:
            rows = self._connection.execute(
                "SELECT * FROM users ORDER BY rowid"
            ).fetchall()
        except Exception:
            self._logger.exception("Failed to list users")
            raise
        return [user_from_row(row) for row in rows]
