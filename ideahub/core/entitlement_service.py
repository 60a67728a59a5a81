"""Entitlement service: implements EntitlementPort.

Manages access-level grants (UserAccess rows) for the static entitlement
catalog. Grants are soft-deleted: revoking deactivates the row and
granting again reactivates it, so a user never holds two rows for the
same access level.

All grant changes are attributed to the acting user and logged for
audit.
"""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from .models import (
    ENTITLEMENT_CATALOG,
    AccessLevel,
    Entitlement,
    EntitlementErrorKind,
    EntitlementResult,
    UserAccess,
    UserInfo,
)
from .ports import EntitlementPort, UserAccessStorePort

logger = logging.getLogger(__name__)


class EntitlementService(EntitlementPort):
    """Core implementation of EntitlementPort."""

    def __init__(
        self,
        store: UserAccessStorePort,
        catalog: Iterable[Entitlement] = ENTITLEMENT_CATALOG,
    ):
        """Initialize the entitlement service.

        Args:
            store: UserAccessStorePort for accounts and grants.
            catalog: Entitlement catalog; defaults to ENTITLEMENT_CATALOG.
        """
        self.store = store
        self.catalog: tuple[Entitlement, ...] = tuple(catalog)
        self._by_name = {e.name: e for e in self.catalog}
        self._by_level = {int(e.access_level): e for e in self.catalog}

    def list_entitlements(self) -> list[Entitlement]:
        """Return the entitlement catalog in catalog order."""
        return list(self.catalog)

    async def get_entitlements_for_users(
        self, users: Iterable[UserInfo]
    ) -> dict[UserInfo, set[str]]:
        """Map each user to the names of their active entitlements.

        Users holding nothing map to an empty set.
        """
        users = list(users)
        if not users:
            return {}

        grants = await self.store.list_user_access(
            user_ids={user.id for user in users}, active_only=True
        )
        names_by_user_id: dict[str, set[str]] = {}
        for grant in grants:
            entitlement = self._by_level.get(grant.access_level)
            if entitlement is not None:
                names_by_user_id.setdefault(grant.user_id, set()).add(entitlement.name)

        return {user: set(names_by_user_id.get(user.id, set())) for user in users}

    async def add_entitlement(
        self, user: UserInfo, entitlement_name: str, acting_user: str
    ) -> EntitlementResult:
        """Grant an entitlement to a user.

        Inserts a new grant, or reactivates a deactivated one. Fails
        without touching the store when the entitlement is unknown, the
        account is missing, or the grant is already active.
        """
        entitlement = self._by_name.get(entitlement_name)
        if entitlement is None:
            return self._entitlement_not_found(entitlement_name)

        if not user.exists:
            return EntitlementResult.failure(
                EntitlementErrorKind.USER_ACCOUNT_MISSING,
                f"User Account does not exist or is inactive: {user.id}",
            )

        now = datetime.now(timezone.utc)
        existing = await self.store.get_user_access(user.id, int(entitlement.access_level))

        if existing is None:
            access = UserAccess(
                user_id=user.id,
                access_level=int(entitlement.access_level),
                is_active=True,
                updated_by=acting_user,
                updated_at=now,
            )
            await self.store.insert_user_access(acting_user, access)
            action = "granted"
        elif not existing.is_active:
            existing.activate(acting_user, now)
            await self.store.update_user_access(existing, acting_user)
            action = "reactivated"
        else:
            return EntitlementResult.failure(
                EntitlementErrorKind.ALREADY_EXISTS,
                f"Entitlement ({entitlement_name}) Already exists for {user.account_name}",
            )

        logger.info(
            f"Entitlement {entitlement_name} {action} for {user.id}",
            extra={
                "user_id": user.id,
                "entitlement": entitlement_name,
                "acting_user": acting_user,
            },
        )
        return EntitlementResult.success()

    async def remove_entitlement(
        self, user: UserInfo, entitlement_name: str, acting_user: str
    ) -> EntitlementResult:
        """Revoke an entitlement by deactivating the user's grant."""
        entitlement = self._by_name.get(entitlement_name)
        if entitlement is None:
            return self._entitlement_not_found(entitlement_name)

        existing = await self.store.get_user_access(user.id, int(entitlement.access_level))
        if existing is None or not existing.is_active:
            return EntitlementResult.failure(
                EntitlementErrorKind.NOT_HELD,
                f"user does not have entitlement ({entitlement_name})",
            )

        existing.deactivate(acting_user, datetime.now(timezone.utc))
        await self.store.update_user_access(existing, acting_user)

        logger.info(
            f"Entitlement {entitlement_name} removed from {user.id}",
            extra={
                "user_id": user.id,
                "entitlement": entitlement_name,
                "acting_user": acting_user,
            },
        )
        return EntitlementResult.success()

    async def list_grants(self) -> list[tuple[str, str]]:
        """Return (user id, entitlement name) for every active catalog grant."""
        grants = await self.store.list_user_access(active_only=True)
        return [
            (grant.user_id, self._by_level[grant.access_level].name)
            for grant in grants
            if grant.access_level in self._by_level
        ]

    async def get_user_entitlements(self, user: UserInfo) -> list[str]:
        """Return the user's active entitlement names in catalog order."""
        grants = await self.store.list_user_access(user_ids=[user.id], active_only=True)
        held = {grant.access_level for grant in grants}
        return [e.name for e in self.catalog if int(e.access_level) in held]

    async def user_has_access_level(
        self, user_id: str | None, access_level: AccessLevel
    ) -> bool:
        """Whether the user holds an active grant at the access level."""
        if not user_id:
            return False
        access = await self.store.get_user_access(user_id, int(access_level))
        return access is not None and access.is_active

    async def get_user(self, user_id: str) -> UserInfo | None:
        return await self.store.get_user(user_id)

    @staticmethod
    def _entitlement_not_found(entitlement_name: str) -> EntitlementResult:
        logger.debug(f"Unknown entitlement requested: {entitlement_name}")
        return EntitlementResult.failure(
            EntitlementErrorKind.ENTITLEMENT_NOT_FOUND,
            f"SailPoint.EntitlementNotFound: Entitlement ({entitlement_name}) not found",
        )
