"""Core domain logic for the IdeaHub review-access system.

This package contains zero external dependencies and represents
the pure business logic of the application. All adapters and
external integrations are handled by the adapters package.
"""

from .models import (
    CLOSED_STATUS_GROUPS,
    ENTITLEMENT_CATALOG,
    AccessLevel,
    AppConfig,
    AttachedFile,
    AttachmentError,
    AttachmentMessages,
    Entitlement,
    EntitlementErrorKind,
    EntitlementResult,
    HealthReport,
    Idea,
    IdeaAttachment,
    IdeaNotFoundError,
    IdeaReview,
    IdeaStatus,
    IdeaStatusGroup,
    ReviewGroup,
    ReviewGroupReviewer,
    UserAccess,
    UserInfo,
)

__all__ = [
    "CLOSED_STATUS_GROUPS",
    "ENTITLEMENT_CATALOG",
    "AccessLevel",
    "AppConfig",
    "AttachedFile",
    "AttachmentError",
    "AttachmentMessages",
    "Entitlement",
    "EntitlementErrorKind",
    "EntitlementResult",
    "HealthReport",
    "Idea",
    "IdeaAttachment",
    "IdeaNotFoundError",
    "IdeaReview",
    "IdeaStatus",
    "IdeaStatusGroup",
    "ReviewGroup",
    "ReviewGroupReviewer",
    "UserAccess",
    "UserInfo",
]
