# This project was developed with assistance from AI tools.
"""S3-compatible object storage service backed by MinIO.

Uses boto3 synchronous client run in a thread-pool executor for async
compatibility. The module exposes a singleton initialised at app startup
via ``init_storage_service()``.

Botocore retries are disabled: a failed write or delete surfaces to the
caller immediately so the submission saga can compensate.
"""

import asyncio
import logging
import re
from functools import partial

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import Settings

logger = logging.getLogger(__name__)

# delete_objects accepts at most this many keys per request
_DELETE_BATCH_SIZE = 1000

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9.\-_]+")

# Longest profile id (255) plus type, millis and separators leaves room for
# this many filename characters inside the 500-char storage_path column.
MAX_KEY_FILENAME_LENGTH = 200
_MAX_EXTENSION_LENGTH = 16


class StorageError(Exception):
    """Raised when an object-store request fails."""


def sanitize_filename(name: str) -> str:
    """Replace every run of characters outside ``[A-Za-z0-9.-_]`` with ``-``."""
    return _UNSAFE_FILENAME_CHARS.sub("-", name)


def shorten_filename(name: str, limit: int = MAX_KEY_FILENAME_LENGTH) -> str:
    """Cut ``name`` to ``limit`` characters, keeping a short extension intact."""
    if len(name) <= limit:
        return name
    stem, dot, extension = name.rpartition(".")
    if stem and dot and len(extension) <= _MAX_EXTENSION_LENGTH:
        return f"{stem[: limit - len(extension) - 1]}.{extension}"
    return name[:limit]


class StorageService:
    """Thin wrapper around a boto3 S3 client."""

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        bucket: str,
        region: str = "us-east-1",
        connect_timeout: int = 5,
        read_timeout: int = 30,
    ):
        self._bucket = bucket
        self._client = boto3.client(
            "s3",
            endpoint_url=endpoint,
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=BotoConfig(
                signature_version="s3v4",
                connect_timeout=connect_timeout,
                read_timeout=read_timeout,
                retries={"max_attempts": 1, "mode": "standard"},
                s3={
                    "addressing_style": "path",
                    "use_accelerate_endpoint": False,
                },
            ),
        )
        self._ensure_bucket()

    @property
    def bucket(self) -> str:
        return self._bucket

    def _ensure_bucket(self) -> None:
        """Create the bucket if it doesn't already exist (dev convenience)."""
        try:
            self._client.head_bucket(Bucket=self._bucket)
        except ClientError:
            logger.info("Creating S3 bucket: %s", self._bucket)
            self._client.create_bucket(Bucket=self._bucket)

    async def _call(self, fn, **kwargs):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(fn, **kwargs))
        except (ClientError, BotoCoreError) as exc:
            raise StorageError(str(exc)) from exc

    async def upload_file(
        self,
        file_data: bytes,
        object_key: str,
        content_type: str,
        *,
        overwrite: bool = False,
        cache_control: str = "max-age=3600",
    ) -> str:
        """Upload bytes to S3 and return the object key.

        With ``overwrite=False`` the write is conditional on the key not
        existing yet; a collision fails with ``StorageError``.
        """
        params = {
            "Bucket": self._bucket,
            "Key": object_key,
            "Body": file_data,
            "ContentType": content_type,
            "CacheControl": cache_control,
        }
        if not overwrite:
            params["IfNoneMatch"] = "*"
        await self._call(self._client.put_object, **params)
        return object_key

    async def delete_files(self, object_keys: list[str]) -> None:
        """Delete objects in as few batched requests as possible.

        Raises ``StorageError`` if the request fails or S3 reports a
        per-key error.
        """
        for start in range(0, len(object_keys), _DELETE_BATCH_SIZE):
            batch = object_keys[start : start + _DELETE_BATCH_SIZE]
            response = await self._call(
                self._client.delete_objects,
                Bucket=self._bucket,
                Delete={"Objects": [{"Key": key} for key in batch], "Quiet": True},
            )
            errors = response.get("Errors") or []
            if errors:
                failed = ", ".join(err.get("Key", "?") for err in errors)
                raise StorageError(f"Failed to delete objects: {failed}")

    async def get_download_url(self, object_key: str, expires_in: int = 3600) -> str:
        """Return a presigned GET URL for the given object key."""
        url: str = await self._call(
            self._client.generate_presigned_url,
            ClientMethod="get_object",
            Params={"Bucket": self._bucket, "Key": object_key},
            ExpiresIn=expires_in,
        )
        return url

    @staticmethod
    def build_object_key(
        profile_id: str, document_type: str, filename: str, timestamp_ms: int
    ) -> str:
        """Build the S3 object key: {profile_id}/{document_type}/{millis}-{filename}.

        The filename is sanitized, which also strips path separators, and
        shortened to ``MAX_KEY_FILENAME_LENGTH`` characters.
        """
        name = shorten_filename(sanitize_filename(filename))
        return f"{profile_id}/{document_type}/{timestamp_ms}-{name}"


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

_service: StorageService | None = None


def init_storage_service(cfg: Settings) -> StorageService:
    """Initialise the singleton (called once from app lifespan)."""
    global _service  # noqa: PLW0603
    _service = StorageService(
        endpoint=cfg.S3_ENDPOINT,
        access_key=cfg.S3_ACCESS_KEY,
        secret_key=cfg.S3_SECRET_KEY,
        bucket=cfg.DOCUMENTS_BUCKET,
        region=cfg.S3_REGION,
        connect_timeout=cfg.S3_CONNECT_TIMEOUT,
        read_timeout=cfg.S3_READ_TIMEOUT,
    )
    logger.info("StorageService initialised (bucket=%s)", cfg.DOCUMENTS_BUCKET)
    return _service


def get_storage_service() -> StorageService:
    """Return the initialised StorageService singleton."""
    if _service is None:
        raise RuntimeError("StorageService not initialised -- call init_storage_service() first")
    return _service
