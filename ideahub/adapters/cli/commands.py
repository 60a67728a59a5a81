"""CLI command implementations for IdeaHub operations.

Provides human-initiated actions through command-line interface.

This adapter maps CLI commands to IdeaAccessPort, EntitlementPort and
AttachmentPort operations. It handles CLI-specific formatting and error
reporting.
"""

import logging
from typing import Any

from ideahub.core.health import HealthService
from ideahub.core.models import EntitlementResult, UserInfo
from ideahub.core.ports import AttachmentPort, EntitlementPort, IdeaAccessPort

logger = logging.getLogger(__name__)


class CLICommandHandler:
    """Handles CLI commands by delegating to the driving ports.

    Every handler returns a dictionary with a "status" of "success" or
    "error" and the name of the operation performed.
    """

    def __init__(
        self,
        access: IdeaAccessPort,
        entitlements: EntitlementPort,
        attachments: AttachmentPort,
        health: HealthService,
    ):
        """Initialize the CLI command handler.

        Args:
            access: IdeaAccessPort for authorization queries.
            entitlements: EntitlementPort for grant management.
            attachments: AttachmentPort for attachment listings.
            health: HealthService for liveness and readiness.
        """
        self.access = access
        self.entitlements = entitlements
        self.attachments = attachments
        self.health = health

    async def can_edit(self, idea_id: int, user_id: str) -> dict[str, Any]:
        """Report whether a user may edit an idea."""
        allowed = await self.access.can_edit_idea(idea_id, user_id)
        return {
            "status": "success",
            "operation": "can_edit",
            "idea_id": idea_id,
            "user_id": user_id,
            "allowed": allowed,
        }

    async def submitted(self, idea_id: int) -> dict[str, Any]:
        """Report whether an idea is in the Submitted group."""
        return {
            "status": "success",
            "operation": "submitted",
            "idea_id": idea_id,
            "submitted": await self.access.is_submitted_idea(idea_id),
        }

    async def list_entitlements(
        self, user_ids: list[str] | None = None
    ) -> dict[str, Any]:
        """List the entitlement catalog, or the holdings of specific users.

        Args:
            user_ids: Optional user ids. When given, each known user is
                mapped to the sorted names of their active entitlements.

        Returns:
            Dictionary with status and data.
        """
        if not user_ids:
            catalog = [
                {
                    "id": e.id,
                    "name": e.name,
                    "description": e.description,
                    "access_level": int(e.access_level),
                }
                for e in self.entitlements.list_entitlements()
            ]
            return {"status": "success", "operation": "entitlements", "data": catalog}

        users = []
        unknown = []
        for user_id in user_ids:
            user = await self.entitlements.get_user(user_id)
            if user is None:
                unknown.append(user_id)
            else:
                users.append(user)

        holdings = await self.entitlements.get_entitlements_for_users(users)
        result: dict[str, Any] = {
            "status": "success",
            "operation": "entitlements",
            "data": {user.id: sorted(names) for user, names in holdings.items()},
        }
        if unknown:
            result["unknown_users"] = unknown
        return result

    async def user_entitlements(self, user_id: str) -> dict[str, Any]:
        """List the active entitlements of one user."""
        user = await self.entitlements.get_user(user_id)
        if user is None:
            return {
                "status": "error",
                "operation": "user_entitlements",
                "user_id": user_id,
                "message": f"User {user_id} not found",
            }
        return {
            "status": "success",
            "operation": "user_entitlements",
            "user_id": user_id,
            "data": await self.entitlements.get_user_entitlements(user),
        }

    async def list_grants(self) -> dict[str, Any]:
        grants = await self.entitlements.list_grants()
        return {
            "status": "success",
            "operation": "grants",
            "count": len(grants),
            "data": [
                {"user_id": user_id, "entitlement": name} for user_id, name in grants
            ],
        }

    async def grant(
        self, user_id: str, entitlement: str, acting_user: str
    ) -> dict[str, Any]:
        """Grant an entitlement via CLI.

        An unknown user id is passed on as a missing account so the
        service reports the failure.
        """
        user = await self._resolve_user(user_id)
        result = await self.entitlements.add_entitlement(user, entitlement, acting_user)
        return self._entitlement_response("grant", user_id, entitlement, result)

    async def revoke(
        self, user_id: str, entitlement: str, acting_user: str
    ) -> dict[str, Any]:
        user = await self._resolve_user(user_id)
        result = await self.entitlements.remove_entitlement(
            user, entitlement, acting_user
        )
        return self._entitlement_response("revoke", user_id, entitlement, result)

    async def list_files(self, idea_id: int) -> dict[str, Any]:
        try:
            files = await self.attachments.list_idea_files(idea_id)
        except ValueError as e:
            logger.error(f"Failed to list files: {e}")
            return {
                "status": "error",
                "operation": "files",
                "idea_id": idea_id,
                "message": str(e),
            }
        return {
            "status": "success",
            "operation": "files",
            "idea_id": idea_id,
            "data": [{"id": f.id, "name": f.name} for f in files],
        }

    async def check_health(self) -> dict[str, Any]:
        """Run liveness and readiness checks."""
        live = self.health.liveness()
        ready = await self.health.readiness()
        return {
            "status": "success" if live.healthy and ready.healthy else "error",
            "operation": "health",
            "data": {
                report.name: {"healthy": report.healthy, "detail": report.detail}
                for report in (live, ready)
            },
        }

    async def _resolve_user(self, user_id: str) -> UserInfo:
        user = await self.entitlements.get_user(user_id)
        if user is None:
            return UserInfo(id=user_id, is_active=False, is_initialized=False)
        return user

    @staticmethod
    def _entitlement_response(
        operation: str, user_id: str, entitlement: str, result: EntitlementResult
    ) -> dict[str, Any]:
        if result.ok:
            verb = "granted to" if operation == "grant" else "revoked from"
            return {
                "status": "success",
                "operation": operation,
                "user_id": user_id,
                "entitlement": entitlement,
                "message": f"Entitlement {entitlement} {verb} {user_id}",
            }

        logger.error(f"Failed to {operation} entitlement: {result.message}")
        return {
            "status": "error",
            "operation": operation,
            "user_id": user_id,
            "entitlement": entitlement,
            "error": result.error.value,
            "message": result.message,
        }
