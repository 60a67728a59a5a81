"""Domain models for the IdeaHub review-access system.

All models in this module use only Python standard library types,
ensuring zero external dependencies in the core domain.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class IdeaStatusGroup(IntEnum):
    """Coarse lifecycle buckets that fine-grained idea statuses map into.

    Values match the group ids stored on IdeaStatus rows.
    """

    IN_PROCESS = 1
    SUBMITTED = 2
    PENDING_APPROVAL = 3
    APPROVED = 4
    REJECTED = 5
    CANCELLED = 6


# An idea in one of these groups is never editable.
CLOSED_STATUS_GROUPS: frozenset[IdeaStatusGroup] = frozenset(
    {
        IdeaStatusGroup.APPROVED,
        IdeaStatusGroup.REJECTED,
        IdeaStatusGroup.CANCELLED,
    }
)


class AccessLevel(IntEnum):
    """Access levels a UserAccess grant can confer."""

    USER = 1
    REVIEWER = 2
    ADMIN = 3


@dataclass(frozen=True)
class Idea:
    """A submitted proposal going through the review workflow."""

    id: int
    owner_user_id: str
    idea_status_id: int
    secondary_contact_user_id: str | None = None

    def contact_user_ids(self) -> frozenset[str]:
        """Owner and secondary contact, skipping unset values."""
        return frozenset(
            uid
            for uid in (self.owner_user_id, self.secondary_contact_user_id)
            if uid
        )


@dataclass(frozen=True)
class IdeaStatus:
    """A fine-grained idea status and the lifecycle group it belongs to."""

    id: int
    group_id: int
    is_active: bool = True


@dataclass(frozen=True)
class ReviewGroup:
    """A named set of reviewers."""

    id: int
    name: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class IdeaReview:
    """Links an idea to a review group evaluating it."""

    idea_id: int
    review_group_id: int


@dataclass(frozen=True)
class ReviewGroupReviewer:
    """Membership of a user in a review group."""

    group_id: int
    user_id: str


@dataclass(frozen=True)
class UserInfo:
    """A user account as resolved by the identity layer.

    An account that is inactive or was never initialized is treated
    as missing by entitlement operations.
    """

    id: str
    account_name: str = ""
    is_active: bool = True
    is_initialized: bool = True

    @property
    def exists(self) -> bool:
        """True when the account is both active and initialized."""
        return self.is_active and self.is_initialized


@dataclass(frozen=True)
class Entitlement:
    """An entry in the static entitlement catalog."""

    id: int
    name: str
    description: str
    access_level: AccessLevel


ENTITLEMENT_CATALOG: tuple[Entitlement, ...] = (
    Entitlement(
        id=1,
        name="IPO_BASIC_USER_ACCESS",
        description="Submit and track ideas",
        access_level=AccessLevel.USER,
    ),
    Entitlement(
        id=2,
        name="IPO_REVIEWER_ACCESS",
        description="Review ideas assigned to the user's review groups",
        access_level=AccessLevel.REVIEWER,
    ),
    Entitlement(
        id=3,
        name="IPO_ADMIN_ACCESS",
        description="Administer ideas, review groups and entitlements",
        access_level=AccessLevel.ADMIN,
    ),
)


@dataclass
class UserAccess:
    """An access-level grant held by a user.

    Soft-deletable: revoking a grant deactivates the row instead of
    removing it, and granting again reactivates the same row.

    Note: This dataclass is intentionally mutable so services can flip
    is_active and attribution fields before handing it back to the store.
    """

    user_id: str
    access_level: int
    is_active: bool = True
    updated_by: str | None = None
    updated_at: datetime | None = None
    id: int | None = None

    def activate(self, acting_user: str, when: datetime) -> None:
        """Mark the grant active, attributed to acting_user."""
        self.is_active = True
        self.updated_by = acting_user
        self.updated_at = when

    def deactivate(self, acting_user: str, when: datetime) -> None:
        """Mark the grant inactive, attributed to acting_user."""
        self.is_active = False
        self.updated_by = acting_user
        self.updated_at = when


class EntitlementErrorKind(Enum):
    """Why an entitlement operation did not succeed."""

    ENTITLEMENT_NOT_FOUND = "entitlement_not_found"
    USER_ACCOUNT_MISSING = "user_account_missing"
    ALREADY_EXISTS = "already_exists"
    NOT_HELD = "not_held"


@dataclass(frozen=True)
class EntitlementResult:
    """Outcome of an add or remove entitlement operation.

    message is empty on success and carries a human-readable diagnostic
    otherwise. Callers branch on error, never on message text.
    """

    error: EntitlementErrorKind | None = None
    message: str = ""

    def __post_init__(self) -> None:
        """Validate that failures always carry a message."""
        if self.error is not None and not self.message:
            raise ValueError("failed EntitlementResult requires a message")
        if self.error is None and self.message:
            raise ValueError("successful EntitlementResult must not carry a message")

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls) -> "EntitlementResult":
        return cls()

    @classmethod
    def failure(cls, error: EntitlementErrorKind, message: str) -> "EntitlementResult":
        return cls(error=error, message=message)


@dataclass
class IdeaAttachment:
    """A file attached to an idea. Body lives in blob storage."""

    idea_id: int
    attachment_name: str
    attachment_size: int
    is_active: bool = True
    updated_by: str | None = None
    updated_at: datetime | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate attachment invariants on creation."""
        if not self.attachment_name or not self.attachment_name.strip():
            raise ValueError("attachment_name must be a non-empty string")
        if self.attachment_size < 0:
            raise ValueError(
                f"attachment_size must be non-negative, got {self.attachment_size}"
            )

    @property
    def blob_name(self) -> str:
        """Name under which the attachment body is stored."""
        return f"({self.idea_id}) ({self.id}) {self.attachment_name}"


@dataclass(frozen=True)
class AttachedFile:
    """Listing projection of an attachment."""

    id: int
    name: str


@dataclass(frozen=True)
class AppConfig:
    """A runtime configuration row."""

    code: str
    value: str
    is_active: bool = True


class AppConfigCodes:
    """Well-known AppConfig codes."""

    ALLOWED_FILE_TYPES = "AllowedFileTypes"


@dataclass(frozen=True)
class HealthReport:
    """Result of a single health check."""

    name: str
    healthy: bool
    detail: str = ""
    checked_at: datetime | None = field(default=None, compare=False)


class IdeaNotFoundError(LookupError):
    """Raised when an idea is required but does not exist."""

    def __init__(self, idea_id: int):
        super().__init__(f"Idea {idea_id} not found")
        self.idea_id = idea_id


class AttachmentMessages:
    """Messages carried by AttachmentError."""

    FILE_NOT_FOUND = "File not found."
    NOT_FOUND = "Not found."
    FILE_UPLOAD_DUPLICATE = "File upload duplicate."
    FILE_UPLOAD_UNSUPPORTED_EXTENSION = "File upload unsupported extension."
    FILE_UPLOAD_FAILED = "File upload failed."


class AttachmentError(ValueError):
    """Raised when an attachment upload, download or delete cannot proceed."""
