"""Fake BlobStoragePort implementation for testing."""

from ideahub.core.ports import BlobStoragePort


class FakeBlobStoragePort(BlobStoragePort):
    """In-memory blob storage for testing.

    Set `refuse_uploads` to make upload return an empty URI, or
    `upload_error` to make it raise.
    """

    def __init__(self):
        self.blobs: dict[str, bytes] = {}
        self.upload_calls: list[str] = []
        self.delete_calls: list[str] = []
        self.refuse_uploads = False
        self.upload_error: Exception | None = None

    async def upload(self, blob_name: str, content: bytes) -> str:
        self.upload_calls.append(blob_name)
        if self.upload_error is not None:
            raise self.upload_error
        if self.refuse_uploads:
            return ""
        self.blobs[blob_name] = content
        return f"memory://blobs/{blob_name}"

    async def download(self, blob_name: str) -> bytes | None:
        return self.blobs.get(blob_name)

    async def delete(self, blob_name: str) -> bool:
        self.delete_calls.append(blob_name)
        return self.blobs.pop(blob_name, None) is not None
