"""Contact checks: is a user the owner or secondary contact of an idea."""

from .models import Idea
from .ports import IdeaStorePort


class ContactChecker:
    """Answers whether a user is one of an idea's contacts."""

    def __init__(self, store: IdeaStorePort):
        self.store = store

    async def is_contact(
        self, user_id: str, idea_id: int, idea: Idea | None = None
    ) -> bool:
        """Check the supplied idea, or fetch it when none is given.

        Returns False for a missing idea or an empty user id.
        """
        if not user_id:
            return False

        if idea is None:
            idea = await self.store.get_idea(idea_id)
            if idea is None:
                return False

        return user_id in idea.contact_user_ids()
