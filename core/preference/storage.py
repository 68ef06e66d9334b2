"""Backends that persist language preference records.

`MemoryPreferenceStorage` keeps records in a dict; `SQLitePreferenceStorage` keeps them in an SQLite3 file so
that preferences survive a restart.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, Self

from models.preference_models import PreferenceKey, UserLanguage
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    import logging

    from config.loader import Config


__all__: list[str] = [
    "MemoryPreferenceStorage",
    "PreferenceStorage",
    "SQLitePreferenceStorage",
    "create_preference_storage",
]

logger: logging.Logger = LoggerUtils.get_logger(__name__)


class PreferenceStorage(ABC):
    """Key-value persistence for `UserLanguage` records, keyed by (user_id, chat_id).

    Implementations are synchronous; callers rely on each operation completing without suspension.
    """

    @abstractmethod
    def get(self, key: PreferenceKey) -> UserLanguage | None:
        """Return the record stored under exactly this key, or None."""
        raise NotImplementedError

    @abstractmethod
    def put(self, record: UserLanguage) -> None:
        """Insert the record, replacing any record with the same key."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: PreferenceKey) -> bool:
        """Delete the record under the key.

        Returns:
            bool: True if a record was removed.
        """
        raise NotImplementedError

    @abstractmethod
    def items(self) -> list[UserLanguage]:
        """Return every stored record."""
        raise NotImplementedError

    def close(self) -> None:  # noqa: B027
        """Release resources held by the backend."""


class MemoryPreferenceStorage(PreferenceStorage):
    """Dictionary-backed storage. Records are lost when the process exits."""

    def __init__(self) -> None:
        self._records: dict[PreferenceKey, UserLanguage] = {}

    def get(self, key: PreferenceKey) -> UserLanguage | None:
        return self._records.get(key)

    def put(self, record: UserLanguage) -> None:
        self._records[record.key] = record

    def delete(self, key: PreferenceKey) -> bool:
        return self._records.pop(key, None) is not None

    def items(self) -> list[UserLanguage]:
        return list(self._records.values())


class SQLitePreferenceStorage(PreferenceStorage):
    """SQLite3-based storage for language preferences.

    Attributes:
        db_path (Path): Path to the SQLite database file.
    """

    def __init__(self, db_path: str | Path) -> None:
        """Initialize the storage with the path to the database file.

        Args:
            db_path (str | Path): Path to the SQLite database file.

        Raises:
            RuntimeError: If the database path is empty.
        """
        logger.debug("Initializing %s", self.__class__.__name__)

        if str(db_path).strip() == "":
            msg: str = "The database path is empty."
            raise RuntimeError(msg)

        self.db_path: Path = Path(db_path)
        self._connection: sqlite3.Connection | None = None
        logger.debug("Database path set to: %s", self.db_path)

    def __enter__(self) -> Self:
        """Enter context manager; initialize database connection."""
        self._initialize_database()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager; close database connection."""
        _ = exc_type, exc_val, exc_tb
        self.close()

    def _initialize_database(self) -> None:
        """Open the connection and create the table if it does not exist."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._connection = sqlite3.connect(
            str(self.db_path),
            check_same_thread=False,
            isolation_level=None,  # Autocommit mode
        )
        self._connection.row_factory = sqlite3.Row

        # chat_id is NULL for the user's fallback record. UNIQUE does not treat NULLs as equal, so
        # uniqueness per (user_id, chat_id) is kept by put() instead of a table constraint.
        self._connection.execute(
            """
            CREATE TABLE IF NOT EXISTS user_languages (
                user_id INTEGER NOT NULL,
                chat_id INTEGER,
                target_language TEXT NOT NULL,
                source_language TEXT
            )
            """
        )
        self._connection.execute(
            "CREATE INDEX IF NOT EXISTS idx_user_languages_key ON user_languages (user_id, chat_id)"
        )
        logger.debug("Database initialized successfully")

    @property
    def connection(self) -> sqlite3.Connection:
        """Get the active database connection, opening it on first use."""
        if self._connection is None:
            self._initialize_database()
        if self._connection is None:
            msg = "Database connection is not initialized."
            raise RuntimeError(msg)
        return self._connection

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> UserLanguage:
        return UserLanguage(
            user_id=row["user_id"],
            chat_id=row["chat_id"],
            target_language=row["target_language"],
            source_language=row["source_language"],
        )

    def get(self, key: PreferenceKey) -> UserLanguage | None:
        cursor: sqlite3.Cursor = self.connection.execute(
            "SELECT * FROM user_languages WHERE user_id = ? AND chat_id IS ?",
            (key.user_id, key.chat_id),
        )
        row = cursor.fetchone()
        if row is None:
            logger.debug("No preference found for key: %s", key)
            return None
        return self._row_to_record(row)

    def put(self, record: UserLanguage) -> None:
        conn: sqlite3.Connection = self.connection
        conn.execute("BEGIN")
        try:
            conn.execute(
                "DELETE FROM user_languages WHERE user_id = ? AND chat_id IS ?",
                (record.user_id, record.chat_id),
            )
            conn.execute(
                """
                INSERT INTO user_languages (user_id, chat_id, target_language, source_language)
                VALUES (?, ?, ?, ?)
                """,
                (record.user_id, record.chat_id, record.target_language, record.source_language),
            )
        except sqlite3.Error:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
        logger.debug("Saved preference for key: %s", record.key)

    def delete(self, key: PreferenceKey) -> bool:
        cursor: sqlite3.Cursor = self.connection.execute(
            "DELETE FROM user_languages WHERE user_id = ? AND chat_id IS ?",
            (key.user_id, key.chat_id),
        )
        logger.debug("Deleted %d preference(s) for key: %s", cursor.rowcount, key)
        return cursor.rowcount > 0

    def items(self) -> list[UserLanguage]:
        cursor: sqlite3.Cursor = self.connection.execute("SELECT * FROM user_languages ORDER BY user_id, chat_id")
        return [self._row_to_record(row) for row in cursor.fetchall()]

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None
            logger.debug("Database connection closed")


def create_preference_storage(config: Config) -> PreferenceStorage:
    """Select the backend from `[PREFERENCE] DB_PATH`; an empty path keeps preferences in memory."""
    db_path: str = config.PREFERENCE.DB_PATH.strip()
    if not db_path:
        logger.info("Preferences are kept in memory")
        return MemoryPreferenceStorage()
    logger.info("Preferences are stored in: %s", db_path)
    return SQLitePreferenceStorage(db_path)
