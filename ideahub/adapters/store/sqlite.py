"""SQLite store adapter.

Implements the idea, reviewer, user-access and attachment store ports
using SQLite with aiosqlite for async access. Provides ACID guarantees
with zero operational overhead.

Grant uniqueness is enforced here: user_access carries a UNIQUE
(user_id, access_level) constraint and inserts are upserts, so two
concurrent grants of the same entitlement converge on one row.
"""

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ideahub.core.models import (
    AppConfig,
    Idea,
    IdeaAttachment,
    IdeaReview,
    IdeaStatus,
    ReviewGroup,
    ReviewGroupReviewer,
    UserAccess,
    UserInfo,
)
from ideahub.core.ports import (
    AttachmentStorePort,
    IdeaStorePort,
    ReviewerStorePort,
    UserAccessStorePort,
)

logger = logging.getLogger(__name__)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS idea_statuses (
        id INTEGER PRIMARY KEY,
        group_id INTEGER NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS ideas (
        id INTEGER PRIMARY KEY,
        owner_user_id TEXT NOT NULL,
        idea_status_id INTEGER NOT NULL,
        secondary_contact_user_id TEXT
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS review_groups (
        id INTEGER PRIMARY KEY,
        name TEXT NOT NULL DEFAULT '',
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS idea_reviews (
        idea_id INTEGER NOT NULL,
        review_group_id INTEGER NOT NULL,
        PRIMARY KEY (idea_id, review_group_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS review_group_reviewers (
        group_id INTEGER NOT NULL,
        user_id TEXT NOT NULL,
        PRIMARY KEY (group_id, user_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        account_name TEXT NOT NULL DEFAULT '',
        is_active INTEGER NOT NULL DEFAULT 1,
        is_initialized INTEGER NOT NULL DEFAULT 1
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS user_access (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        access_level INTEGER NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1,
        updated_by TEXT,
        updated_at TIMESTAMP,
        UNIQUE (user_id, access_level)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS idea_attachments (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        idea_id INTEGER NOT NULL,
        attachment_name TEXT NOT NULL,
        attachment_size INTEGER NOT NULL DEFAULT 0,
        is_active INTEGER NOT NULL DEFAULT 1,
        updated_by TEXT,
        updated_at TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS app_config (
        code TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        is_active INTEGER NOT NULL DEFAULT 1
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_user_access_user ON user_access(user_id)",
    "CREATE INDEX IF NOT EXISTS idx_attachments_idea ON idea_attachments(idea_id)",
)

_USER_ACCESS_COLUMNS = "id, user_id, access_level, is_active, updated_by, updated_at"
_ATTACHMENT_COLUMNS = (
    "id, idea_id, attachment_name, attachment_size, is_active, updated_by, updated_at"
)


class SQLiteStore(
    IdeaStorePort, ReviewerStorePort, UserAccessStorePort, AttachmentStorePort
):
    """SQLite-backed store with connection pooling and async access."""

    def __init__(self, db_path: str, pool_size: int = 5):
        """Initialize SQLite store with connection pooling.

        Args:
            db_path: Path to SQLite database file.
            pool_size: Number of connections to maintain in the pool.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._pool: list[aiosqlite.Connection] = []
        self._pool_lock = asyncio.Lock()
        self._schema_lock = asyncio.Lock()
        self._pool_size = pool_size
        self._schema_initialized = False

    async def _get_connection(self) -> aiosqlite.Connection:
        """Get a connection from the pool or create a new one."""
        async with self._pool_lock:
            if self._pool:
                return self._pool.pop()
        return await aiosqlite.connect(str(self.db_path))

    async def _return_connection(self, conn: aiosqlite.Connection) -> None:
        """Return a connection to the pool."""
        async with self._pool_lock:
            if len(self._pool) < self._pool_size:
                self._pool.append(conn)
                return
        await conn.close()

    async def close_pool(self) -> None:
        """Close all pooled connections."""
        async with self._pool_lock:
            for conn in self._pool:
                await conn.close()
            self._pool.clear()

    async def _init_schema(self) -> None:
        """Initialize database schema on first use.

        Only runs once per instance. Subsequent calls are no-ops.
        """
        if self._schema_initialized:
            return

        async with self._schema_lock:
            # Check again after acquiring lock to prevent race
            if self._schema_initialized:
                return

            conn = await self._get_connection()
            try:
                for statement in _SCHEMA:
                    await conn.execute(statement)
                await conn.commit()
                self._schema_initialized = True
            finally:
                await self._return_connection(conn)

    async def _fetchone(self, sql: str, params: tuple[Any, ...] = ()) -> tuple[Any, ...] | None:
        await self._init_schema()
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, params)
            return await cursor.fetchone()
        finally:
            await self._return_connection(conn)

    async def _fetchall(self, sql: str, params: tuple[Any, ...] = ()) -> list[tuple[Any, ...]]:
        await self._init_schema()
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, params)
            return list(await cursor.fetchall())
        finally:
            await self._return_connection(conn)

    async def _execute(self, sql: str, params: tuple[Any, ...] = ()) -> int:
        """Run a write statement and return the affected row count."""
        await self._init_schema()
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(sql, params)
            await conn.commit()
            return cursor.rowcount
        finally:
            await self._return_connection(conn)

    # ------------------------------------------------------------------
    # IdeaStorePort
    # ------------------------------------------------------------------

    async def get_idea(self, idea_id: int) -> Idea | None:
        """Look up an idea by its ID."""
        row = await self._fetchone(
            "SELECT id, owner_user_id, idea_status_id, secondary_contact_user_id "
            "FROM ideas WHERE id = ?",
            (idea_id,),
        )
        if row is None:
            return None
        idea_pk, owner, status_id, secondary = row
        return Idea(
            id=idea_pk,
            owner_user_id=owner,
            idea_status_id=status_id,
            secondary_contact_user_id=secondary,
        )

    async def get_idea_status(self, idea_status_id: int) -> IdeaStatus | None:
        """Look up an active idea status row by its ID."""
        row = await self._fetchone(
            "SELECT id, group_id, is_active FROM idea_statuses "
            "WHERE id = ? AND is_active = 1",
            (idea_status_id,),
        )
        if row is None:
            return None
        status_pk, group_id, is_active = row
        return IdeaStatus(id=status_pk, group_id=group_id, is_active=bool(is_active))

    async def ping(self) -> bool:
        row = await self._fetchone("SELECT 1")
        return row is not None and row[0] == 1

    # ------------------------------------------------------------------
    # ReviewerStorePort
    # ------------------------------------------------------------------

    async def get_idea_reviews(self, idea_id: int) -> list[IdeaReview]:
        rows = await self._fetchall(
            "SELECT idea_id, review_group_id FROM idea_reviews "
            "WHERE idea_id = ? ORDER BY review_group_id",
            (idea_id,),
        )
        return [IdeaReview(idea_id=row[0], review_group_id=row[1]) for row in rows]

    async def get_group_reviewers(
        self, group_ids: Iterable[int]
    ) -> list[ReviewGroupReviewer]:
        """Members of the given groups, skipping inactive or unknown groups."""
        ids = sorted(set(group_ids))
        if not ids:
            return []

        placeholders = ", ".join("?" for _ in ids)
        rows = await self._fetchall(
            f"""
            SELECT r.group_id, r.user_id
            FROM review_group_reviewers r
            JOIN review_groups g ON g.id = r.group_id
            WHERE g.is_active = 1 AND r.group_id IN ({placeholders})
            ORDER BY r.group_id, r.user_id
            """,
            tuple(ids),
        )
        return [ReviewGroupReviewer(group_id=row[0], user_id=row[1]) for row in rows]

    # ------------------------------------------------------------------
    # UserAccessStorePort
    # ------------------------------------------------------------------

    async def get_user(self, user_id: str) -> UserInfo | None:
        row = await self._fetchone(
            "SELECT id, account_name, is_active, is_initialized FROM users WHERE id = ?",
            (user_id,),
        )
        if row is None:
            return None
        uid, account_name, is_active, is_initialized = row
        return UserInfo(
            id=uid,
            account_name=account_name,
            is_active=bool(is_active),
            is_initialized=bool(is_initialized),
        )

    async def get_user_access(
        self, user_id: str, access_level: int
    ) -> UserAccess | None:
        row = await self._fetchone(
            f"SELECT {_USER_ACCESS_COLUMNS} FROM user_access "
            "WHERE user_id = ? AND access_level = ?",
            (user_id, int(access_level)),
        )
        if row is None:
            return None
        return self._row_to_user_access(row)

    async def list_user_access(
        self, user_ids: Iterable[str] | None = None, active_only: bool = True
    ) -> list[UserAccess]:
        clauses: list[str] = []
        params: list[Any] = []
        if user_ids is not None:
            ids = sorted(set(user_ids))
            if not ids:
                return []
            clauses.append(f"user_id IN ({', '.join('?' for _ in ids)})")
            params.extend(ids)
        if active_only:
            clauses.append("is_active = 1")

        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = await self._fetchall(
            f"SELECT {_USER_ACCESS_COLUMNS} FROM user_access {where} "
            "ORDER BY user_id, access_level",
            tuple(params),
        )
        return [self._row_to_user_access(row) for row in rows]

    async def insert_user_access(
        self, acting_user: str, access: UserAccess
    ) -> UserAccess:
        """Insert a grant, or overwrite the existing row for the same pair."""
        await self._execute(
            """
            INSERT INTO user_access
                (user_id, access_level, is_active, updated_by, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT (user_id, access_level) DO UPDATE SET
                is_active = excluded.is_active,
                updated_by = excluded.updated_by,
                updated_at = excluded.updated_at
            """,
            (
                access.user_id,
                int(access.access_level),
                int(access.is_active),
                acting_user,
                self._format_ts(access.updated_at),
            ),
        )
        stored = await self.get_user_access(access.user_id, access.access_level)
        if stored is None:
            raise ValueError(
                f"Grant for {access.user_id} at level {access.access_level} was not stored"
            )
        return stored

    async def update_user_access(
        self, access: UserAccess, acting_user: str
    ) -> UserAccess:
        if access.id is not None:
            where, key = "id = ?", (access.id,)
        else:
            where, key = "user_id = ? AND access_level = ?", (
                access.user_id,
                int(access.access_level),
            )

        updated = await self._execute(
            f"UPDATE user_access SET is_active = ?, updated_by = ?, updated_at = ? "
            f"WHERE {where}",
            (int(access.is_active), acting_user, self._format_ts(access.updated_at), *key),
        )
        if updated == 0:
            raise ValueError(
                f"Grant for {access.user_id} at level {access.access_level} not found"
            )
        access.updated_by = acting_user
        return access

    # ------------------------------------------------------------------
    # AttachmentStorePort
    # ------------------------------------------------------------------

    async def get_attachment(self, attachment_id: int) -> IdeaAttachment | None:
        row = await self._fetchone(
            f"SELECT {_ATTACHMENT_COLUMNS} FROM idea_attachments WHERE id = ?",
            (attachment_id,),
        )
        return self._row_to_attachment(row) if row is not None else None

    async def find_active_attachment(
        self, idea_id: int, attachment_name: str
    ) -> IdeaAttachment | None:
        row = await self._fetchone(
            f"SELECT {_ATTACHMENT_COLUMNS} FROM idea_attachments "
            "WHERE idea_id = ? AND attachment_name = ? AND is_active = 1 "
            "ORDER BY id LIMIT 1",
            (idea_id, attachment_name),
        )
        return self._row_to_attachment(row) if row is not None else None

    async def list_idea_attachments(
        self, idea_id: int, active_only: bool = True
    ) -> list[IdeaAttachment]:
        sql = f"SELECT {_ATTACHMENT_COLUMNS} FROM idea_attachments WHERE idea_id = ?"
        if active_only:
            sql += " AND is_active = 1"
        rows = await self._fetchall(sql + " ORDER BY id", (idea_id,))
        return [self._row_to_attachment(row) for row in rows]

    async def insert_attachment(
        self, acting_user: str, attachment: IdeaAttachment
    ) -> IdeaAttachment:
        await self._init_schema()
        conn = await self._get_connection()
        try:
            cursor = await conn.execute(
                """
                INSERT INTO idea_attachments
                    (idea_id, attachment_name, attachment_size, is_active,
                     updated_by, updated_at)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    attachment.idea_id,
                    attachment.attachment_name,
                    attachment.attachment_size,
                    int(attachment.is_active),
                    acting_user,
                    self._format_ts(attachment.updated_at),
                ),
            )
            await conn.commit()
            attachment.id = cursor.lastrowid
        finally:
            await self._return_connection(conn)

        attachment.updated_by = acting_user
        return attachment

    async def update_attachment(
        self, attachment: IdeaAttachment, acting_user: str
    ) -> IdeaAttachment:
        if attachment.id is None:
            raise ValueError("Cannot update an attachment without an id")

        updated = await self._execute(
            """
            UPDATE idea_attachments
            SET attachment_name = ?, attachment_size = ?, is_active = ?,
                updated_by = ?, updated_at = ?
            WHERE id = ?
            """,
            (
                attachment.attachment_name,
                attachment.attachment_size,
                int(attachment.is_active),
                acting_user,
                self._format_ts(attachment.updated_at),
                attachment.id,
            ),
        )
        if updated == 0:
            raise ValueError(f"Attachment {attachment.id} not found")
        attachment.updated_by = acting_user
        return attachment

    async def deactivate_attachment(self, acting_user: str, attachment_id: int) -> bool:
        updated = await self._execute(
            "UPDATE idea_attachments SET is_active = 0, updated_by = ?, "
            "updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (acting_user, attachment_id),
        )
        return updated > 0

    async def get_app_config(self, code: str) -> AppConfig | None:
        row = await self._fetchone(
            "SELECT code, value, is_active FROM app_config WHERE code = ? AND is_active = 1",
            (code,),
        )
        if row is None:
            return None
        return AppConfig(code=row[0], value=row[1], is_active=bool(row[2]))

    # ------------------------------------------------------------------
    # Reference data maintenance (used by seeding and tests)
    # ------------------------------------------------------------------

    async def save_idea_status(self, status: IdeaStatus) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO idea_statuses (id, group_id, is_active) VALUES (?, ?, ?)",
            (status.id, int(status.group_id), int(status.is_active)),
        )

    async def save_idea(self, idea: Idea) -> None:
        await self._execute(
            """
            INSERT OR REPLACE INTO ideas
                (id, owner_user_id, idea_status_id, secondary_contact_user_id)
            VALUES (?, ?, ?, ?)
            """,
            (
                idea.id,
                idea.owner_user_id,
                idea.idea_status_id,
                idea.secondary_contact_user_id,
            ),
        )

    async def save_review_group(self, group: ReviewGroup) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO review_groups (id, name, is_active) VALUES (?, ?, ?)",
            (group.id, group.name, int(group.is_active)),
        )

    async def add_idea_review(self, review: IdeaReview) -> None:
        await self._execute(
            "INSERT OR IGNORE INTO idea_reviews (idea_id, review_group_id) VALUES (?, ?)",
            (review.idea_id, review.review_group_id),
        )

    async def add_group_reviewer(self, member: ReviewGroupReviewer) -> None:
        await self._execute(
            "INSERT OR IGNORE INTO review_group_reviewers (group_id, user_id) VALUES (?, ?)",
            (member.group_id, member.user_id),
        )

    async def save_user(self, user: UserInfo) -> None:
        await self._execute(
            """
            INSERT OR REPLACE INTO users (id, account_name, is_active, is_initialized)
            VALUES (?, ?, ?, ?)
            """,
            (user.id, user.account_name, int(user.is_active), int(user.is_initialized)),
        )

    async def save_app_config(self, config: AppConfig) -> None:
        await self._execute(
            "INSERT OR REPLACE INTO app_config (code, value, is_active) VALUES (?, ?, ?)",
            (config.code, config.value, int(config.is_active)),
        )

    # ------------------------------------------------------------------
    # Row conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _format_ts(value: datetime | None) -> str | None:
        return value.isoformat() if value is not None else None

    @staticmethod
    def _parse_ts(value: str | None) -> datetime | None:
        """Parse a stored timestamp, tolerating SQLite's CURRENT_TIMESTAMP format."""
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except (ValueError, TypeError) as e:
            logger.warning(f"Unparseable timestamp {value!r}: {e}")
            return None

    def _row_to_user_access(self, row: tuple[Any, ...]) -> UserAccess:
        access_id, user_id, access_level, is_active, updated_by, updated_at = row
        return UserAccess(
            id=access_id,
            user_id=user_id,
            access_level=access_level,
            is_active=bool(is_active),
            updated_by=updated_by,
            updated_at=self._parse_ts(updated_at),
        )

    def _row_to_attachment(self, row: tuple[Any, ...]) -> IdeaAttachment:
        """Convert a database row to an IdeaAttachment.

        Raises:
            ValueError: If row is malformed or contains invalid data.
        """
        try:
            (
                attachment_id,
                idea_id,
                name,
                size,
                is_active,
                updated_by,
                updated_at,
            ) = row
            return IdeaAttachment(
                id=attachment_id,
                idea_id=idea_id,
                attachment_name=name,
                attachment_size=size,
                is_active=bool(is_active),
                updated_by=updated_by,
                updated_at=self._parse_ts(updated_at),
            )
        except ValueError as e:
            logger.error(f"Failed to parse attachment row: {e}")
            raise
