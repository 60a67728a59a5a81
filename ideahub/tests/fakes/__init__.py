"""Fake implementations of core ports for testing.

These in-memory implementations allow core domain logic to be tested
without external dependencies:

- FakeIdeaStorePort: In-memory ideas, statuses and review assignments
- FakeUserAccessStorePort: In-memory user accounts and grants
- FakeAttachmentStorePort: In-memory attachment rows and config
- FakeBlobStoragePort: In-memory blob bodies
"""

from .attachments import FakeAttachmentStorePort
from .blob import FakeBlobStoragePort
from .ideas import FakeIdeaStorePort
from .user_access import FakeUserAccessStorePort

__all__ = [
    "FakeAttachmentStorePort",
    "FakeBlobStoragePort",
    "FakeIdeaStorePort",
    "FakeUserAccessStorePort",
]
