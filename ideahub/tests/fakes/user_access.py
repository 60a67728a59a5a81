"""Fake UserAccessStorePort implementation for testing."""

from collections.abc import Iterable
from dataclasses import replace

from ideahub.core.models import UserAccess, UserInfo
from ideahub.core.ports import UserAccessStorePort


class FakeUserAccessStorePort(UserAccessStorePort):
    """In-memory accounts and grants for testing.

    Grants are keyed by (user_id, access_level) like the SQLite unique
    constraint, and the store hands out copies so callers cannot change
    stored rows without going through update_user_access.
    """

    def __init__(self):
        """Initialize with no users and no grants."""
        self.users: dict[str, UserInfo] = {}
        self.grants: dict[tuple[str, int], UserAccess] = {}
        self.inserted: list[tuple[str, UserAccess]] = []
        self.updated: list[tuple[UserAccess, str]] = []
        self._next_id = 1

    def add_user(
        self,
        user_id: str,
        account_name: str | None = None,
        is_active: bool = True,
        is_initialized: bool = True,
    ) -> UserInfo:
        user = UserInfo(
            id=user_id,
            account_name=account_name if account_name is not None else user_id,
            is_active=is_active,
            is_initialized=is_initialized,
        )
        self.users[user_id] = user
        return user

    def add_grant(self, user_id: str, access_level: int, is_active: bool = True) -> UserAccess:
        """Seed a grant directly, bypassing call tracking."""
        access = UserAccess(
            id=self._next_id,
            user_id=user_id,
            access_level=int(access_level),
            is_active=is_active,
            updated_by="seed",
        )
        self._next_id += 1
        self.grants[(user_id, int(access_level))] = access
        return replace(access)

    async def get_user(self, user_id: str) -> UserInfo | None:
        return self.users.get(user_id)

    async def get_user_access(
        self, user_id: str, access_level: int
    ) -> UserAccess | None:
        access = self.grants.get((user_id, int(access_level)))
        return replace(access) if access is not None else None

    async def list_user_access(
        self, user_ids: Iterable[str] | None = None, active_only: bool = True
    ) -> list[UserAccess]:
        wanted = set(user_ids) if user_ids is not None else None
        return [
            replace(access)
            for (user_id, _level), access in sorted(self.grants.items())
            if (wanted is None or user_id in wanted)
            and (access.is_active or not active_only)
        ]

    async def insert_user_access(
        self, acting_user: str, access: UserAccess
    ) -> UserAccess:
        key = (access.user_id, int(access.access_level))
        existing = self.grants.get(key)
        stored = replace(
            access,
            id=existing.id if existing is not None else self._next_id,
            updated_by=acting_user,
        )
        if existing is None:
            self._next_id += 1
        self.grants[key] = stored
        self.inserted.append((acting_user, replace(stored)))
        return replace(stored)

    async def update_user_access(
        self, access: UserAccess, acting_user: str
    ) -> UserAccess:
        key = (access.user_id, int(access.access_level))
        if key not in self.grants:
            raise ValueError(f"Grant for {access.user_id} at level {access.access_level} not found")
        stored = replace(access, id=self.grants[key].id, updated_by=acting_user)
        self.grants[key] = stored
        self.updated.append((replace(stored), acting_user))
        return replace(stored)
