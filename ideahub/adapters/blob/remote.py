"""HTTP blob storage adapter.

Implements BlobStoragePort against a blob container exposed over REST
(Azure Blob Storage style): blobs are addressed as
``<container_url>/<blob name>`` and every request carries a shared
access signature (SAS) token as its query string.
"""

import logging
from urllib.parse import quote

import httpx

from ideahub.core.ports import BlobStoragePort

logger = logging.getLogger(__name__)

BLOB_TYPE_HEADER = "x-ms-blob-type"
BLOCK_BLOB = "BlockBlob"


class HttpBlobStorageAdapter(BlobStoragePort):
    """Blob storage backed by a remote container reached over HTTP."""

    def __init__(
        self,
        container_url: str,
        sas_token: str = "",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize the adapter.

        Args:
            container_url: Base URL of the blob container.
            sas_token: Shared access signature, with or without leading "?".
            timeout: Request timeout in seconds.
            transport: Optional httpx transport, mainly for tests.
        """
        self.container_url = container_url.rstrip("/")
        self.sas_params = httpx.QueryParams(sas_token.lstrip("?"))
        self.client = httpx.AsyncClient(
            base_url=self.container_url,
            params=self.sas_params,
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.client.aclose()

    async def close(self) -> None:
        """Close the httpx client and clean up resources."""
        await self.client.aclose()

    @staticmethod
    def _blob_path(blob_name: str) -> str:
        return "/" + quote(blob_name, safe="")

    def blob_uri(self, blob_name: str) -> str:
        """Public URI of a blob, without the SAS token."""
        return f"{self.container_url}{self._blob_path(blob_name)}"

    async def upload(self, blob_name: str, content: bytes) -> str:
        """Upload a blob, returning its URI or "" if the service refused it."""
        try:
            response = await self.client.put(
                self._blob_path(blob_name),
                content=content,
                headers={
                    BLOB_TYPE_HEADER: BLOCK_BLOB,
                    "Content-Type": "application/octet-stream",
                },
            )
        except httpx.HTTPError as e:
            logger.error(f"Failed to upload blob {blob_name}: {e}")
            raise

        if response.is_success:
            return self.blob_uri(blob_name)

        logger.error(
            f"Blob service refused upload of {blob_name}: HTTP {response.status_code}",
            extra={"blob_name": blob_name, "status_code": response.status_code},
        )
        return ""

    async def download(self, blob_name: str) -> bytes | None:
        try:
            response = await self.client.get(self._blob_path(blob_name))
            if response.status_code == 404:
                return None
            response.raise_for_status()
            return response.content
        except httpx.HTTPError as e:
            logger.error(f"Failed to download blob {blob_name}: {e}")
            raise

    async def delete(self, blob_name: str) -> bool:
        try:
            response = await self.client.delete(self._blob_path(blob_name))
            if response.status_code == 404:
                return False
            response.raise_for_status()
            return True
        except httpx.HTTPError as e:
            logger.error(f"Failed to delete blob {blob_name}: {e}")
            raise
