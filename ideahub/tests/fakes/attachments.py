"""Fake AttachmentStorePort implementation for testing."""

from dataclasses import replace

from ideahub.core.models import AppConfig, AppConfigCodes, IdeaAttachment
from ideahub.core.ports import AttachmentStorePort


class FakeAttachmentStorePort(AttachmentStorePort):
    """In-memory attachment rows and configuration for testing."""

    def __init__(self, allowed_file_types: str | None = "pdf,docx,png"):
        """Initialize the store.

        Args:
            allowed_file_types: Value of the AllowedFileTypes row, or None
                to leave the row out.
        """
        self.attachments: dict[int, IdeaAttachment] = {}
        self.configs: dict[str, AppConfig] = {}
        self.deactivated: list[tuple[str, int]] = []
        self.updated: list[tuple[IdeaAttachment, str]] = []
        self._next_id = 1
        if allowed_file_types is not None:
            self.configs[AppConfigCodes.ALLOWED_FILE_TYPES] = AppConfig(
                code=AppConfigCodes.ALLOWED_FILE_TYPES, value=allowed_file_types
            )

    def add_attachment(
        self, idea_id: int, name: str, size: int = 10, is_active: bool = True
    ) -> IdeaAttachment:
        attachment = IdeaAttachment(
            id=self._next_id,
            idea_id=idea_id,
            attachment_name=name,
            attachment_size=size,
            is_active=is_active,
        )
        self._next_id += 1
        self.attachments[attachment.id] = attachment
        return replace(attachment)

    async def get_attachment(self, attachment_id: int) -> IdeaAttachment | None:
        attachment = self.attachments.get(attachment_id)
        return replace(attachment) if attachment is not None else None

    async def find_active_attachment(
        self, idea_id: int, attachment_name: str
    ) -> IdeaAttachment | None:
        for attachment in self.attachments.values():
            if (
                attachment.idea_id == idea_id
                and attachment.attachment_name == attachment_name
                and attachment.is_active
            ):
                return replace(attachment)
        return None

    async def list_idea_attachments(
        self, idea_id: int, active_only: bool = True
    ) -> list[IdeaAttachment]:
        return [
            replace(a)
            for a in self.attachments.values()
            if a.idea_id == idea_id and (a.is_active or not active_only)
        ]

    async def insert_attachment(
        self, acting_user: str, attachment: IdeaAttachment
    ) -> IdeaAttachment:
        stored = replace(attachment, id=self._next_id, updated_by=acting_user)
        self._next_id += 1
        self.attachments[stored.id] = stored
        return replace(stored)

    async def update_attachment(
        self, attachment: IdeaAttachment, acting_user: str
    ) -> IdeaAttachment:
        if attachment.id not in self.attachments:
            raise ValueError(f"Attachment {attachment.id} not found")
        stored = replace(attachment, updated_by=acting_user)
        self.attachments[stored.id] = stored
        self.updated.append((replace(stored), acting_user))
        return replace(stored)

    async def deactivate_attachment(self, acting_user: str, attachment_id: int) -> bool:
        attachment = self.attachments.get(attachment_id)
        if attachment is None:
            return False
        attachment.is_active = False
        attachment.updated_by = acting_user
        self.deactivated.append((acting_user, attachment_id))
        return True

    async def get_app_config(self, code: str) -> AppConfig | None:
        config = self.configs.get(code)
        if config is None or not config.is_active:
            return None
        return config
