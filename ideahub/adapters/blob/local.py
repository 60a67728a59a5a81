"""Local filesystem blob storage adapter.

Stores each attachment body as a file in a single directory. Suitable
for development and single-host deployments.
"""

import asyncio
import logging
from pathlib import Path

from ideahub.core.ports import BlobStoragePort

logger = logging.getLogger(__name__)


class LocalBlobStorageAdapter(BlobStoragePort):
    """Blob storage backed by a local directory."""

    def __init__(self, root_dir: str):
        """Initialize the adapter.

        Args:
            root_dir: Directory holding the blobs. Created if missing.
        """
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, blob_name: str) -> Path:
        """Resolve a blob name to a file inside root_dir.

        Raises:
            ValueError: If the name is empty or would escape root_dir.
        """
        if not blob_name or "/" in blob_name or "\\" in blob_name or blob_name in (".", ".."):
            raise ValueError(f"Invalid blob name: {blob_name!r}")
        return self.root_dir / blob_name

    async def upload(self, blob_name: str, content: bytes) -> str:
        path = self._path_for(blob_name)
        await asyncio.to_thread(path.write_bytes, content)
        logger.debug(f"Stored blob {blob_name} ({len(content)} bytes)")
        return path.resolve().as_uri()

    async def download(self, blob_name: str) -> bytes | None:
        path = self._path_for(blob_name)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except FileNotFoundError:
            logger.debug(f"Blob {blob_name} not found")
            return None

    async def delete(self, blob_name: str) -> bool:
        path = self._path_for(blob_name)
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        logger.debug(f"Deleted blob {blob_name}")
        return True
