"""Fake IdeaStorePort and ReviewerStorePort implementation for testing."""

from collections.abc import Iterable

from ideahub.core.models import (
    Idea,
    IdeaReview,
    IdeaStatus,
    IdeaStatusGroup,
    ReviewGroup,
    ReviewGroupReviewer,
)
from ideahub.core.ports import IdeaStorePort, ReviewerStorePort


class FakeIdeaStorePort(IdeaStorePort, ReviewerStorePort):
    """In-memory idea and reviewer store for testing.

    Tracks lookups for assertions and can be told to fail every call
    through `error`.
    """

    def __init__(self):
        """Initialize with an empty store."""
        self.ideas: dict[int, Idea] = {}
        self.statuses: dict[int, IdeaStatus] = {}
        self.groups: dict[int, ReviewGroup] = {}
        self.reviews: list[IdeaReview] = []
        self.members: list[ReviewGroupReviewer] = []
        self.get_idea_calls: list[int] = []
        self.get_idea_status_calls: list[int] = []
        self.get_group_reviewers_calls: list[set[int]] = []
        self.ping_result = True
        self.error: Exception | None = None

    # Seeding helpers

    def add_status(self, status_id: int, group: int) -> IdeaStatus:
        status = IdeaStatus(id=status_id, group_id=int(group))
        self.statuses[status_id] = status
        return status

    def add_idea(
        self,
        idea_id: int,
        owner: str,
        group: IdeaStatusGroup | None = IdeaStatusGroup.IN_PROCESS,
        secondary: str | None = None,
        status_id: int | None = None,
    ) -> Idea:
        """Add an idea, creating a status row for its group when given."""
        if status_id is None:
            status_id = 100 + idea_id
        if group is not None:
            self.add_status(status_id, group)
        idea = Idea(
            id=idea_id,
            owner_user_id=owner,
            idea_status_id=status_id,
            secondary_contact_user_id=secondary,
        )
        self.ideas[idea_id] = idea
        return idea

    def assign_review(self, idea_id: int, group_id: int, *user_ids: str) -> None:
        """Assign a review group to an idea and add members to the group."""
        self.groups.setdefault(group_id, ReviewGroup(id=group_id, name=f"group-{group_id}"))
        self.reviews.append(IdeaReview(idea_id=idea_id, review_group_id=group_id))
        for user_id in user_ids:
            self.members.append(ReviewGroupReviewer(group_id=group_id, user_id=user_id))

    def _maybe_fail(self) -> None:
        if self.error is not None:
            raise self.error

    # IdeaStorePort

    async def get_idea(self, idea_id: int) -> Idea | None:
        self._maybe_fail()
        self.get_idea_calls.append(idea_id)
        return self.ideas.get(idea_id)

    async def get_idea_status(self, idea_status_id: int) -> IdeaStatus | None:
        self._maybe_fail()
        self.get_idea_status_calls.append(idea_status_id)
        status = self.statuses.get(idea_status_id)
        if status is None or not status.is_active:
            return None
        return status

    async def ping(self) -> bool:
        self._maybe_fail()
        return self.ping_result

    # ReviewerStorePort

    async def get_idea_reviews(self, idea_id: int) -> list[IdeaReview]:
        self._maybe_fail()
        return [r for r in self.reviews if r.idea_id == idea_id]

    async def get_group_reviewers(
        self, group_ids: Iterable[int]
    ) -> list[ReviewGroupReviewer]:
        """Members of the requested groups that exist and are active."""
        self._maybe_fail()
        ids = set(group_ids)
        self.get_group_reviewers_calls.append(ids)
        active = {gid for gid, group in self.groups.items() if group.is_active}
        return [m for m in self.members if m.group_id in ids and m.group_id in active]
