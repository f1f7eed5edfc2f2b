"""
Durable media storage on S3-compatible object storage.

Objects are private; the database stores s3://bucket/key references which
are turned into presigned URLs for providers and into proxy URLs for the
frontend.
"""

import base64
import re
import time
from typing import Optional, Tuple
from urllib.parse import quote

import aioboto3
import httpx

from studio.config import settings
from studio.exceptions import StorageRehostError
from studio.utils.logging import get_logger

logger = get_logger(__name__)

_S3_REF = re.compile(r"^s3://[^/]+/(.+)$")
_S3_HTTPS = re.compile(r"amazonaws\.com/(.+)$")
_DATA_URI = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.DOTALL)


def extract_key(url: Optional[str]) -> Optional[str]:
    """Return the object key of an s3:// or S3 https URL, else None."""
    if not url:
        return None
    match = _S3_REF.match(url)
    if match:
        return match.group(1)
    if ".s3." in url and "amazonaws.com" in url:
        match = _S3_HTTPS.search(url)
        return match.group(1) if match else None
    return None


def is_data_uri(url: Optional[str]) -> bool:
    return bool(url) and url.startswith("data:")


def decode_data_uri(url: str) -> Tuple[bytes, Optional[str]]:
    """Decode a data: URI into (bytes, mime type)."""
    match = _DATA_URI.match(url)
    if not match:
        raise StorageRehostError("Malformed data URI")
    data = match.group("data")
    if match.group("b64"):
        try:
            return base64.b64decode(data), match.group("mime")
        except ValueError as e:
            raise StorageRehostError(f"Invalid base64 payload: {e}") from e
    return data.encode("utf-8"), match.group("mime")


def project_key(project_id: object, kind: str, filename: str) -> str:
    """Build projects/<id>/<kind>/<timestamp>_<filename> with a safe filename."""
    timestamp = int(time.time() * 1000)
    safe_name = re.sub(r"[^a-zA-Z0-9.-]", "_", filename)
    return f"projects/{project_id}/{kind}/{timestamp}_{safe_name}"


class StorageService:
    """Upload, fetch and re-host media in the configured bucket."""

    def __init__(
        self,
        bucket: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.bucket = bucket or settings.s3_bucket_name
        self._transport = transport
        self._session = aioboto3.Session()

    @property
    def is_configured(self) -> bool:
        return settings.storage_configured and bool(self.bucket)

    def _client_kwargs(self) -> dict:
        kwargs = {
            "region_name": settings.aws_region,
            "aws_access_key_id": settings.aws_access_key_id,
            "aws_secret_access_key": settings.aws_secret_access_key,
        }
        if settings.s3_endpoint_url:
            kwargs["endpoint_url"] = settings.s3_endpoint_url
        return kwargs

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        """Upload bytes and return the s3:// reference."""
        async with self._session.client("s3", **self._client_kwargs()) as client:
            await client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        logger.info("Stored object", key=key, size=len(data))
        return f"s3://{self.bucket}/{key}"

    async def get(self, key: str) -> Tuple[bytes, str]:
        """Download an object; returns (bytes, content type)."""
        async with self._session.client("s3", **self._client_kwargs()) as client:
            response = await client.get_object(Bucket=self.bucket, Key=key)
            async with response["Body"] as stream:
                body = await stream.read()
            return body, response.get("ContentType") or "application/octet-stream"

    async def delete(self, key: str) -> None:
        async with self._session.client("s3", **self._client_kwargs()) as client:
            await client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("Deleted object", key=key)

    async def discard(self, url: str) -> None:
        """Remove a stored object nothing references any more. Never raises."""
        key = extract_key(url)
        if not key or not self.is_configured:
            return
        try:
            await self.delete(key)
        except Exception as e:
            logger.warning("Could not delete orphaned object", key=key, error=str(e))

    async def presigned_url(self, key: str, expires_in: Optional[int] = None) -> str:
        async with self._session.client("s3", **self._client_kwargs()) as client:
            return await client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expires_in or settings.presigned_url_expiry,
            )

    async def resolve_url(self, url: str) -> str:
        """
        Make a stored reference fetchable by a third party.

        s3 references become presigned URLs; data URIs and plain URLs
        pass through unchanged.
        """
        key = extract_key(url)
        if key and self.is_configured:
            return await self.presigned_url(key)
        return url

    @staticmethod
    def display_url(url: Optional[str]) -> Optional[str]:
        """Frontend URL: stored objects go through the media proxy."""
        key = extract_key(url)
        if key:
            encoded = "/".join(quote(segment) for segment in key.split("/"))
            return f"{settings.api_v1_prefix}/media/{encoded}"
        return url

    async def fetch_bytes(self, url: str) -> Tuple[bytes, Optional[str]]:
        """Read media behind a data URI or an HTTP(S) URL."""
        if is_data_uri(url):
            return decode_data_uri(url)
        try:
            async with httpx.AsyncClient(
                timeout=settings.provider_timeout_seconds,
                follow_redirects=True,
                transport=self._transport,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise StorageRehostError(f"Download failed: {e}") from e
        return response.content, response.headers.get("content-type")

    async def rehost(self, url: str, key: str, content_type: str) -> str:
        """
        Copy provider media into durable storage.

        Returns the durable reference, or the original URL when storage is
        not configured or any step fails. Never raises.
        """
        if not self.is_configured:
            logger.debug("Storage not configured, keeping provider URL", key=key)
            return url
        if extract_key(url):
            return url

        try:
            data, _ = await self.fetch_bytes(url)
            return await self.put(key, data, content_type)
        except StorageRehostError as e:
            logger.warning("Rehost failed, keeping provider URL", key=key, error=str(e))
        except Exception as e:
            logger.warning("Rehost upload failed, keeping provider URL", key=key, error=str(e))
        return url


# Singleton instance
storage_service = StorageService()
