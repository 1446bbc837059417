"""
Storage Abstraction Layer - The Bridge Pattern

One interface for where a rendered image goes: the local output directory
(LocalImageStore) and the IPFS gateway of the chain SDK (IpfsImageStore).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import httpx

from live_nft.core.exceptions import StorageError
from live_nft.core.logging import get_logger

logger = get_logger(__name__)


class IImageStore(ABC):
    """Interface for image storage operations - The Bridge"""

    @abstractmethod
    async def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/png"
    ) -> str:
        """
        Store an image and return its key.

        Args:
            file_data: Raw bytes of the file
            filename: Target file name
            content_type: MIME type of the file

        Returns:
            Local path for LocalImageStore, content identifier for IpfsImageStore
        """
        pass


class LocalImageStore(IImageStore):
    """Writes images into the output directory, replacing older ones."""

    def __init__(self, base_path: str):
        self.base_path = Path(base_path)

    async def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/png"
    ) -> str:
        try:
            # Created lazily, right before the first write
            if not self.base_path.exists():
                self.base_path.mkdir(parents=True)

            file_path = self.base_path / filename
            with open(file_path, "wb") as f:
                f.write(file_data)
        except OSError as e:
            raise StorageError(
                f"Cannot write image to {self.base_path}: {e}",
                details={"path": str(self.base_path)}
            ) from e

        return str(file_path)


class IpfsImageStore(IImageStore):
    """Uploads images through the chain SDK's IPFS endpoint."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def upload(
        self,
        file_data: bytes,
        filename: str,
        content_type: str = "image/png"
    ) -> str:
        url = f"{self.base_url}/ipfs/upload-file"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    url,
                    files={"file": (filename, file_data, content_type)}
                )
        except httpx.HTTPError as e:
            raise StorageError(f"IPFS upload failed: {e}", details={"url": url}) from e

        if response.status_code >= 400:
            raise StorageError(
                f"IPFS upload failed with HTTP {response.status_code}: {response.text}",
                details={"url": url, "http_status": response.status_code}
            )

        try:
            body = response.json()
        except ValueError:
            body = None
        cid = body.get("cid") if isinstance(body, dict) else None

        if not isinstance(cid, str) or not cid:
            raise StorageError("IPFS upload response has no cid", details={"url": url})

        logger.info("ipfs_upload_completed", cid=cid, size=len(file_data))
        return cid
