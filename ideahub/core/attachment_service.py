"""Attachment service: implements AttachmentPort.

Orchestrates idea attachments across two stores: attachment metadata
rows (AttachmentStorePort) and attachment bodies (BlobStoragePort).
Metadata is written first; a failed body upload deactivates the row
again so no active attachment points at a missing blob.
"""

import logging
import mimetypes
from datetime import datetime, timezone
from pathlib import PurePath

from .models import (
    AppConfigCodes,
    AttachedFile,
    AttachmentError,
    AttachmentMessages,
    IdeaAttachment,
)
from .ports import AttachmentPort, AttachmentStorePort, BlobStoragePort

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


class AttachmentService(AttachmentPort):
    """Core implementation of AttachmentPort."""

    def __init__(self, store: AttachmentStorePort, blobs: BlobStoragePort):
        """Initialize the attachment service.

        Args:
            store: AttachmentStorePort for metadata and configuration rows.
            blobs: BlobStoragePort for attachment bodies.
        """
        self.store = store
        self.blobs = blobs

    async def upload_file(
        self, idea_id: int, file_name: str, content: bytes, acting_user: str
    ) -> IdeaAttachment:
        """Attach a file to an idea.

        Raises:
            AttachmentError: If an active attachment with the same name
                exists on the idea, the extension is not allowed, or the
                body could not be stored.
        """
        duplicate = await self.store.find_active_attachment(idea_id, file_name)
        if duplicate is not None:
            raise AttachmentError(AttachmentMessages.FILE_UPLOAD_DUPLICATE)

        if not await self.is_allowed_file_type(file_name):
            raise AttachmentError(AttachmentMessages.FILE_UPLOAD_UNSUPPORTED_EXTENSION)

        attachment = IdeaAttachment(
            idea_id=idea_id,
            attachment_name=file_name,
            attachment_size=len(content),
            is_active=True,
            updated_by=acting_user,
            updated_at=datetime.now(timezone.utc),
        )
        saved = await self.store.insert_attachment(acting_user, attachment)
        if saved is None or saved.id is None:
            raise AttachmentError(AttachmentMessages.FILE_UPLOAD_FAILED)

        try:
            uri = await self.blobs.upload(saved.blob_name, content)
        except Exception as e:
            await self.store.deactivate_attachment(acting_user, saved.id)
            logger.error(
                f"Blob upload failed for attachment {saved.id}: {e}",
                extra={"idea_id": idea_id, "attachment_id": saved.id},
                exc_info=True,
            )
            raise

        if not uri:
            await self.store.deactivate_attachment(acting_user, saved.id)
            logger.error(
                f"Blob upload returned no URI for attachment {saved.id}",
                extra={"idea_id": idea_id, "attachment_id": saved.id},
            )
            raise AttachmentError(AttachmentMessages.FILE_UPLOAD_FAILED)

        logger.info(
            f"Attachment {saved.id} uploaded to idea {idea_id}",
            extra={
                "idea_id": idea_id,
                "attachment_id": saved.id,
                "size": saved.attachment_size,
                "acting_user": acting_user,
            },
        )
        return saved

    async def download_file(self, attachment_id: int) -> bytes:
        """Fetch the body of an active attachment.

        Raises:
            AttachmentError: If the attachment or its body is missing.
        """
        attachment = await self.store.get_attachment(attachment_id)
        if attachment is None or not attachment.is_active:
            raise AttachmentError(AttachmentMessages.FILE_NOT_FOUND)

        content = await self.blobs.download(attachment.blob_name)
        if content is None:
            raise AttachmentError(AttachmentMessages.FILE_NOT_FOUND)

        return content

    async def delete_file(self, attachment_id: int, acting_user: str) -> bool:
        """Deactivate an attachment and delete its body.

        Raises:
            AttachmentError: If the attachment does not exist.
        """
        attachment = await self.store.get_attachment(attachment_id)
        if attachment is None:
            raise AttachmentError(AttachmentMessages.NOT_FOUND)

        attachment.is_active = False
        attachment.updated_by = acting_user
        attachment.updated_at = datetime.now(timezone.utc)
        await self.store.update_attachment(attachment, acting_user)

        if not await self.blobs.delete(attachment.blob_name):
            logger.warning(
                f"Blob for attachment {attachment_id} was already gone",
                extra={"attachment_id": attachment_id},
            )

        logger.info(
            f"Attachment {attachment_id} deleted",
            extra={"attachment_id": attachment_id, "acting_user": acting_user},
        )
        return True

    async def list_idea_files(self, idea_id: int) -> list[AttachedFile]:
        """List the active attachments of an idea."""
        attachments = await self.store.list_idea_attachments(idea_id, active_only=True)
        return [
            AttachedFile(id=a.id, name=a.attachment_name)
            for a in attachments
            if a.id is not None
        ]

    async def is_allowed_file_type(self, file_name: str) -> bool:
        """Check the file extension against the AllowedFileTypes config row.

        A missing config row allows nothing.
        """
        extension = PurePath(file_name).suffix.lstrip(".").lower()
        if not extension:
            return False

        config = await self.store.get_app_config(AppConfigCodes.ALLOWED_FILE_TYPES)
        if config is None or not config.value:
            return False

        allowed = {item.strip().lower() for item in config.value.split(",")}
        return extension in allowed

    @staticmethod
    def content_type(file_name: str) -> str:
        """Guess the MIME type of a file name."""
        guessed, _encoding = mimetypes.guess_type(file_name)
        return guessed or DEFAULT_CONTENT_TYPE
