"""Port interfaces for the IdeaHub review-access system.

These abstract base classes define the boundaries between core
domain logic and external adapters. Implementations live in the
adapters/ package.

Port Interface Categories:

1. **Driven Ports** (core calls out to adapters)
   - IdeaStorePort: Ideas and idea statuses
   - ReviewerStorePort: Idea reviews and review group membership
   - UserAccessStorePort: User accounts and access-level grants
   - AttachmentStorePort: Attachment metadata and runtime configuration
   - BlobStoragePort: Attachment bodies

2. **Driving Ports** (adapters/external systems call into core)
   - IdeaAccessPort: Edit authorization and idea state queries
   - EntitlementPort: Entitlement catalog, grants and revocations
   - AttachmentPort: Upload, download, delete and list attachments

Store ports report absence as None or an empty list, never by raising.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .models import (
    AccessLevel,
    AppConfig,
    AttachedFile,
    Entitlement,
    EntitlementResult,
    Idea,
    IdeaAttachment,
    IdeaReview,
    IdeaStatus,
    ReviewGroupReviewer,
    UserAccess,
    UserInfo,
)


# ============================================================================
# DRIVEN PORTS (Core calls out to adapters)
# ============================================================================


class IdeaStorePort(ABC):
    """Port for reading ideas and their status rows.

    The core only reads through this port; ideas are created and
    transitioned by other parts of the application.
    """

    @abstractmethod
    async def get_idea(self, idea_id: int) -> Idea | None:
        """Retrieve an idea by ID.

        Args:
            idea_id: Primary key of the idea.

        Returns:
            Idea if found, None otherwise.

        Raises:
            Exception: If the backing store is unavailable.
        """

    @abstractmethod
    async def get_idea_status(self, idea_status_id: int) -> IdeaStatus | None:
        """Retrieve an idea status row by ID.

        Args:
            idea_status_id: Primary key of the status.

        Returns:
            IdeaStatus if found, None otherwise.

        Raises:
            Exception: If the backing store is unavailable.
        """

    @abstractmethod
    async def ping(self) -> bool:
        """Check that the backing store answers queries.

        Returns:
            True if the store is reachable.

        Raises:
            Exception: If the backing store is unavailable.
        """


class ReviewerStorePort(ABC):
    """Port for review assignments and review group membership."""

    @abstractmethod
    async def get_idea_reviews(self, idea_id: int) -> list[IdeaReview]:
        """Retrieve the review links for an idea.

        Args:
            idea_id: Primary key of the idea.

        Returns:
            IdeaReview rows for the idea. Empty list if none.

        Raises:
            Exception: If the backing store is unavailable.
        """

    @abstractmethod
    async def get_group_reviewers(
        self, group_ids: Iterable[int]
    ) -> list[ReviewGroupReviewer]:
        """Retrieve memberships of the given active review groups.

        Args:
            group_ids: Review group IDs to look up. Inactive or unknown
                groups contribute no rows.

        Returns:
            Membership rows for the groups. Empty list if none.

        Raises:
            Exception: If the backing store is unavailable.
        """


class UserAccessStorePort(ABC):
    """Port for user accounts and access-level grants.

    Implementations should keep at most one grant row per
    (user_id, access_level) pair.
    """

    @abstractmethod
    async def get_user(self, user_id: str) -> UserInfo | None:
        """Retrieve a user account by ID.

        Returns:
            UserInfo if found, None otherwise.
        """

    @abstractmethod
    async def get_user_access(
        self, user_id: str, access_level: int
    ) -> UserAccess | None:
        """Retrieve the grant row for a user and access level, active or not.

        Returns:
            UserAccess if a row exists, None otherwise.
        """

    @abstractmethod
    async def list_user_access(
        self, user_ids: Iterable[str] | None = None, active_only: bool = True
    ) -> list[UserAccess]:
        """List grant rows.

        Args:
            user_ids: Restrict to these users. None means all users.
            active_only: Skip deactivated grants when True.

        Returns:
            Matching UserAccess rows ordered by user_id, access_level.
        """

    @abstractmethod
    async def insert_user_access(
        self, acting_user: str, access: UserAccess
    ) -> UserAccess:
        """Persist a new grant attributed to acting_user.

        Returns:
            The stored grant, with id populated.
        """

    @abstractmethod
    async def update_user_access(
        self, access: UserAccess, acting_user: str
    ) -> UserAccess:
        """Persist changes to an existing grant attributed to acting_user.

        Returns:
            The stored grant.

        Raises:
            ValueError: If the grant does not exist.
        """


class AttachmentStorePort(ABC):
    """Port for attachment metadata and runtime configuration rows."""

    @abstractmethod
    async def get_attachment(self, attachment_id: int) -> IdeaAttachment | None:
        """Retrieve an attachment by ID, active or not."""

    @abstractmethod
    async def find_active_attachment(
        self, idea_id: int, attachment_name: str
    ) -> IdeaAttachment | None:
        """Retrieve the active attachment with this name on the idea."""

    @abstractmethod
    async def list_idea_attachments(
        self, idea_id: int, active_only: bool = True
    ) -> list[IdeaAttachment]:
        """List attachments of an idea ordered by ID."""

    @abstractmethod
    async def insert_attachment(
        self, acting_user: str, attachment: IdeaAttachment
    ) -> IdeaAttachment:
        """Persist a new attachment row.

        Returns:
            The stored attachment, with id populated.
        """

    @abstractmethod
    async def update_attachment(
        self, attachment: IdeaAttachment, acting_user: str
    ) -> IdeaAttachment:
        """Persist changes to an existing attachment row.

        Raises:
            ValueError: If the attachment does not exist.
        """

    @abstractmethod
    async def deactivate_attachment(self, acting_user: str, attachment_id: int) -> bool:
        """Deactivate an attachment row.

        Returns:
            True if a row was deactivated, False if it did not exist.
        """

    @abstractmethod
    async def get_app_config(self, code: str) -> AppConfig | None:
        """Retrieve the active configuration row for a code."""


class BlobStoragePort(ABC):
    """Port for storing attachment bodies.

    Implementations must handle:
    - Blob names containing spaces and parentheses
    - Timeouts and transient failures of remote containers
    """

    @abstractmethod
    async def upload(self, blob_name: str, content: bytes) -> str:
        """Store a blob, replacing any existing blob of the same name.

        Returns:
            URI of the stored blob. Empty string if the upload was refused.

        Raises:
            Exception: If the storage backend is unreachable.
        """

    @abstractmethod
    async def download(self, blob_name: str) -> bytes | None:
        """Fetch a blob.

        Returns:
            Blob content, or None if the blob does not exist.
        """

    @abstractmethod
    async def delete(self, blob_name: str) -> bool:
        """Delete a blob.

        Returns:
            True if the blob existed and was deleted.
        """


# ============================================================================
# DRIVING PORTS (Adapters/external systems call into core)
# ============================================================================


class IdeaAccessPort(ABC):
    """Port for idea edit authorization and idea state queries.

    Implementations of this port live in the core (authorization.py).
    """

    @abstractmethod
    async def can_edit_idea(self, idea_id: int, user_id: str) -> bool:
        """Decide whether the user may edit the idea."""

    @abstractmethod
    async def is_valid_reviewer(self, idea_id: int, user_id: str) -> bool:
        """Decide whether the user reviews the idea without being a contact."""

    @abstractmethod
    async def is_submitted_idea(self, idea_id: int) -> bool:
        """Whether the idea exists and is in the Submitted group."""

    @abstractmethod
    async def is_contact(
        self, user_id: str, idea_id: int, idea: Idea | None = None
    ) -> bool:
        """Whether the user is the idea's owner or secondary contact."""


class EntitlementPort(ABC):
    """Port for entitlement management.

    Implementations of this port live in the core (entitlement_service.py).
    """

    @abstractmethod
    def list_entitlements(self) -> list[Entitlement]:
        """Return the entitlement catalog in catalog order."""

    @abstractmethod
    async def get_entitlements_for_users(
        self, users: Iterable[UserInfo]
    ) -> dict[UserInfo, set[str]]:
        """Map each user to the names of the entitlements they hold."""

    @abstractmethod
    async def add_entitlement(
        self, user: UserInfo, entitlement_name: str, acting_user: str
    ) -> EntitlementResult:
        """Grant an entitlement to a user."""

    @abstractmethod
    async def remove_entitlement(
        self, user: UserInfo, entitlement_name: str, acting_user: str
    ) -> EntitlementResult:
        """Revoke an entitlement from a user."""

    @abstractmethod
    async def list_grants(self) -> list[tuple[str, str]]:
        """Return (user id, entitlement name) for every active grant."""

    @abstractmethod
    async def get_user_entitlements(self, user: UserInfo) -> list[str]:
        """Return the names of the user's active entitlements."""

    @abstractmethod
    async def user_has_access_level(
        self, user_id: str | None, access_level: AccessLevel
    ) -> bool:
        """Whether the user holds an active grant at the access level."""

    @abstractmethod
    async def get_user(self, user_id: str) -> UserInfo | None:
        """Resolve a user account by ID."""


class AttachmentPort(ABC):
    """Port for idea attachment operations.

    Implementations of this port live in the core (attachment_service.py).
    """

    @abstractmethod
    async def upload_file(
        self, idea_id: int, file_name: str, content: bytes, acting_user: str
    ) -> IdeaAttachment:
        """Attach a file to an idea."""

    @abstractmethod
    async def download_file(self, attachment_id: int) -> bytes:
        """Fetch the body of an active attachment."""

    @abstractmethod
    async def delete_file(self, attachment_id: int, acting_user: str) -> bool:
        """Deactivate an attachment and delete its body."""

    @abstractmethod
    async def list_idea_files(self, idea_id: int) -> list[AttachedFile]:
        """List the active attachments of an idea."""
