"""Supabase Storage client for check-in and meal photos."""

import logging
from dataclasses import dataclass
from uuid import uuid4

import httpx
from supabase import Client

from coach_checkins.services.store import BlobStore

_logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/heic": "heic",
    "image/webp": "webp",
}


@dataclass
class SupabaseBlobStore(BlobStore):
    """Stores uploads in a Supabase Storage bucket under one folder."""

    client: Client
    bucket: str
    http_client: httpx.AsyncClient
    folder: str = "checkin_images"
    timeout: float = 20

    @classmethod
    def create(
        cls, client: Client, bucket: str, timeout: float = 20
    ) -> "SupabaseBlobStore":
        """Create a blob store with a managed httpx session."""
        return cls(
            client=client,
            bucket=bucket,
            http_client=httpx.AsyncClient(),
            timeout=timeout,
        )

    def upload(
        self, data: bytes, content_type: str, folder: str | None = None
    ) -> str:
        """Upload bytes under a fresh key and return the public URL."""
        extension = _EXTENSIONS.get(content_type, "bin")
        key = f"{folder or self.folder}/{uuid4()}.{extension}"
        bucket = self.client.storage.from_(self.bucket)
        bucket.upload(key, data, {"content-type": content_type})
        _logger.info("Uploaded %s bytes to %s", len(data), key)
        return bucket.get_public_url(key)

    def exists(self, key: str) -> bool:
        """Check for a stored object by listing its folder."""
        folder, _, name = key.rpartition("/")
        entries = self.client.storage.from_(self.bucket).list(
            folder or None, {"search": name}
        )
        return any(entry.get("name") == name for entry in entries or [])

    async def download(self, url: str) -> bytes:
        """Download an uploaded object by its URL."""
        response = await self.http_client.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.content

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
