"""Idea status classification.

Maps fine-grained idea status ids to the coarse lifecycle groups the
authorization rules are written against.
"""

import logging

from .models import CLOSED_STATUS_GROUPS, IdeaStatusGroup
from .ports import IdeaStorePort

logger = logging.getLogger(__name__)


class StatusClassifier:
    """Translates status ids into IdeaStatusGroup values.

    Pure lookup translation with no side effects.
    """

    def __init__(self, store: IdeaStorePort):
        self.store = store

    async def classify(self, idea_status_id: int) -> IdeaStatusGroup | None:
        """Return the group of a status, or None if it cannot be determined.

        None covers both a missing status row and a row whose group id
        is outside IdeaStatusGroup. Callers treat None as "no group
        constraint applies".
        """
        status = await self.store.get_idea_status(idea_status_id)
        if status is None:
            logger.debug(f"No status row for idea status {idea_status_id}")
            return None

        try:
            return IdeaStatusGroup(status.group_id)
        except ValueError:
            logger.warning(
                f"Idea status {idea_status_id} has unknown group id {status.group_id}",
                extra={"idea_status_id": idea_status_id, "group_id": status.group_id},
            )
            return None

    @staticmethod
    def is_closed(group: IdeaStatusGroup | None) -> bool:
        """Approved, rejected and cancelled ideas are closed."""
        return group in CLOSED_STATUS_GROUPS

    async def is_pending_review(self, idea_status_id: int) -> bool:
        return await self.classify(idea_status_id) == IdeaStatusGroup.PENDING_APPROVAL

    async def is_in_process(self, idea_status_id: int) -> bool:
        return await self.classify(idea_status_id) == IdeaStatusGroup.IN_PROCESS
