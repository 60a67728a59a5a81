"""Review authorization: implements IdeaAccessPort.

Decides whether a user may edit an idea by combining the idea's
lifecycle group, the user's contact role on the idea, and the user's
membership in the review groups assigned to it.

Decision order for can_edit_idea:
1. Missing idea: allowed (fail-open, logged)
2. Closed status group (approved/rejected/cancelled): denied
3. Owner or secondary contact: allowed
4. Member of a review group assigned to the idea: allowed
5. Anything else: denied
"""

import logging

from .contacts import ContactChecker
from .models import Idea, IdeaNotFoundError, IdeaStatusGroup
from .ports import IdeaAccessPort, IdeaStorePort, ReviewerStorePort
from .status import StatusClassifier

logger = logging.getLogger(__name__)


class ReviewAuthorizationService(IdeaAccessPort):
    """Core implementation of IdeaAccessPort.

    The status classifier and contact checker are collaborators so they
    can be replaced independently of the decision logic.
    """

    def __init__(
        self,
        ideas: IdeaStorePort,
        reviewers: ReviewerStorePort,
        classifier: StatusClassifier | None = None,
        contacts: ContactChecker | None = None,
    ):
        """Initialize the authorization service.

        Args:
            ideas: IdeaStorePort for ideas and status rows.
            reviewers: ReviewerStorePort for review assignments.
            classifier: StatusClassifier; built on ideas when omitted.
            contacts: ContactChecker; built on ideas when omitted.
        """
        self.ideas = ideas
        self.reviewers = reviewers
        self.classifier = classifier or StatusClassifier(ideas)
        self.contacts = contacts or ContactChecker(ideas)

    async def get_idea(self, idea_id: int, raise_if_missing: bool = False) -> Idea | None:
        """Fetch an idea.

        Raises:
            IdeaNotFoundError: If the idea is missing and raise_if_missing is set.
        """
        idea = await self.ideas.get_idea(idea_id)
        if idea is None and raise_if_missing:
            raise IdeaNotFoundError(idea_id)
        return idea

    async def can_edit_idea(self, idea_id: int, user_id: str) -> bool:
        """Decide whether the user may edit the idea."""
        idea = await self.get_idea(idea_id)
        if idea is None:
            # Missing ideas fail open.
            logger.warning(
                f"Idea {idea_id} not found; allowing edit",
                extra={"idea_id": idea_id, "user_id": user_id},
            )
            return True

        group = await self.classifier.classify(idea.idea_status_id)
        if self.classifier.is_closed(group):
            logger.debug(
                f"Edit denied on closed idea {idea_id}",
                extra={"idea_id": idea_id, "user_id": user_id, "group": group},
            )
            return False

        if user_id and user_id in idea.contact_user_ids():
            return True

        if await self.is_valid_reviewer(idea_id, user_id):
            return True

        logger.debug(
            f"Edit denied on idea {idea_id} for {user_id}",
            extra={"idea_id": idea_id, "user_id": user_id},
        )
        return False

    async def is_valid_reviewer(self, idea_id: int, user_id: str) -> bool:
        """Whether the user reviews the idea through one of its review groups.

        Contacts are never valid reviewers of their own idea, even when
        they also appear in an assigned review group.
        """
        if not user_id:
            return False

        if await self.contacts.is_contact(user_id, idea_id):
            return False

        reviews = await self.reviewers.get_idea_reviews(idea_id)
        group_ids = {review.review_group_id for review in reviews}
        if not group_ids:
            return False

        members = await self.reviewers.get_group_reviewers(group_ids)
        return any(
            member.user_id == user_id and member.group_id in group_ids
            for member in members
        )

    async def is_submitted_idea(self, idea_id: int) -> bool:
        """Whether the idea exists and sits in the Submitted group.

        Store failures are logged and reported as "not submitted".
        """
        try:
            idea = await self.get_idea(idea_id)
            if idea is None:
                return False
            group = await self.classifier.classify(idea.idea_status_id)
        except Exception as e:
            logger.error(
                f"Failed to determine submission state of idea {idea_id}: {e}",
                exc_info=True,
            )
            return False

        return group == IdeaStatusGroup.SUBMITTED

    async def is_contact(
        self, user_id: str, idea_id: int, idea: Idea | None = None
    ) -> bool:
        """Whether the user is the idea's owner or secondary contact."""
        return await self.contacts.is_contact(user_id, idea_id, idea)
