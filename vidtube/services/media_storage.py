"""
Media storage for avatars, cover images, thumbnails and videos

Files go to an S3-compatible bucket (Cloudflare R2, AWS S3) through boto3,
or to the local upload directory in development. Stored URLs are
`<MEDIA_PUBLIC_URL>/<category>/<32 hex chars>.<ext>`; the object key is
recovered from that URL when media has to be deleted.
"""

import asyncio
import io
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional
from uuid import uuid4

import aiofiles
import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError
from fastapi import UploadFile
from mutagen import File as MutagenFile
from mutagen import MutagenError

from vidtube.core.config import settings
from vidtube.core.exceptions import InvalidArgumentError, MediaUploadError

logger = structlog.get_logger()

IMAGES = "images"
VIDEOS = "videos"


@dataclass
class UploadedMedia:
    url: str
    key: str
    duration: Optional[float] = None


class MediaStorage:
    """Uploads and deletes media on S3/R2 or local disk"""

    EXTENSION_MAPPING = {
        "image/jpeg": ".jpg",
        "image/jpg": ".jpg",
        "image/png": ".png",
        "image/webp": ".webp",
        "image/gif": ".gif",
        "video/mp4": ".mp4",
        "video/x-m4v": ".m4v",
        "video/quicktime": ".mov",
    }

    # Optional version segment, then <category>/<hex>.<ext>
    KEY_PATTERN = re.compile(r"^(?:v\d+/)?((?:images|videos)/[0-9a-f]{32}\.[A-Za-z0-9]+)$")

    def __init__(
        self,
        use_s3: Optional[bool] = None,
        upload_dir: Optional[str] = None,
        public_url: Optional[str] = None
    ):
        self.use_s3 = settings.USE_S3_STORAGE if use_s3 is None else use_s3
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.public_url = (public_url or settings.MEDIA_PUBLIC_URL).rstrip("/")
        self.bucket = settings.S3_BUCKET_NAME

        self.allowed_types = {
            IMAGES: set(settings.ALLOWED_IMAGE_TYPES),
            VIDEOS: set(settings.ALLOWED_VIDEO_TYPES),
        }
        self.max_sizes = {
            IMAGES: settings.MAX_IMAGE_SIZE,
            VIDEOS: settings.MAX_VIDEO_SIZE,
        }

    def _get_s3_client(self):
        """S3 client for the configured endpoint (R2 uses region 'auto')"""
        if not all([self.bucket, settings.S3_ACCESS_KEY_ID, settings.S3_SECRET_ACCESS_KEY]):
            raise MediaUploadError("Media storage credentials not configured")

        return boto3.client(
            's3',
            endpoint_url=settings.S3_ENDPOINT_URL,
            aws_access_key_id=settings.S3_ACCESS_KEY_ID,
            aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
            region_name=settings.S3_REGION
        )

    def public_id(self, url: Optional[str]) -> Optional[str]:
        """Object key of a stored URL, or None when the URL is not ours"""
        if not url or not url.startswith(self.public_url + "/"):
            return None
        match = self.KEY_PATTERN.match(url[len(self.public_url) + 1:])
        return match.group(1) if match else None

    def _validate(self, file: UploadFile, content: bytes, category: str):
        if category not in self.allowed_types:
            raise InvalidArgumentError(f"Unknown media category '{category}'")

        if not content:
            raise InvalidArgumentError(f"File '{file.filename}' is empty", field=file.filename)

        if file.content_type not in self.allowed_types[category]:
            allowed = ", ".join(sorted(self.allowed_types[category]))
            raise InvalidArgumentError(
                f"File type '{file.content_type}' not allowed for '{file.filename}'. Allowed types: {allowed}",
                field=file.filename
            )

        if len(content) > self.max_sizes[category]:
            raise InvalidArgumentError(
                f"File '{file.filename}' size ({len(content)} bytes) exceeds maximum allowed size "
                f"({self.max_sizes[category]} bytes)",
                field=file.filename
            )

    @staticmethod
    def _extract_duration(content: bytes) -> Optional[float]:
        """Playback length in seconds, None when the container is not recognised"""
        try:
            media = MutagenFile(io.BytesIO(content))
        except MutagenError as e:
            logger.warning("Failed to read media metadata", error=str(e))
            return None
        if media is None or getattr(media, "info", None) is None:
            return None
        return getattr(media.info, "length", None)

    async def upload(self, file: UploadFile, category: str) -> UploadedMedia:
        """
        Validate and store an uploaded file

        Raises:
            InvalidArgumentError: empty file, wrong type or too large
            MediaUploadError: the backend failed to store the file
        """
        content = await file.read()
        self._validate(file, content, category)

        extension = self.EXTENSION_MAPPING.get(file.content_type, Path(file.filename or "").suffix)
        key = f"{category}/{uuid4().hex}{extension}"

        if self.use_s3:
            await self._upload_to_s3(content, key, file.content_type)
        else:
            await self._save_locally(content, key)

        duration = self._extract_duration(content) if category == VIDEOS else None

        logger.info(
            "Media uploaded",
            filename=file.filename,
            key=key,
            file_size=len(content),
            mime_type=file.content_type,
            duration=duration
        )
        return UploadedMedia(url=f"{self.public_url}/{key}", key=key, duration=duration)

    async def _upload_to_s3(self, content: bytes, key: str, mime_type: str):
        try:
            client = self._get_s3_client()
            await asyncio.to_thread(
                client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=mime_type
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("S3 upload failed", error=str(e), key=key)
            raise MediaUploadError(f"Media upload failed: {e}", key)

    async def _save_locally(self, content: bytes, key: str):
        path = self.upload_dir / key
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Local media write failed", error=str(e), key=key)
            raise MediaUploadError(f"Media upload failed: {e}", key)

    async def delete(self, url: Optional[str]) -> bool:
        """
        Best-effort delete of stored media

        Unparseable URLs and backend failures are logged, never raised.
        Returns True when the object was removed.
        """
        key = self.public_id(url)
        if key is None:
            logger.warning("Could not extract media key from URL, skipping delete", url=url)
            return False

        try:
            if self.use_s3:
                client = self._get_s3_client()
                await asyncio.to_thread(client.delete_object, Bucket=self.bucket, Key=key)
            else:
                path = self.upload_dir / key
                if not path.is_file():
                    logger.warning("Media file already gone", key=key)
                    return False
                path.unlink()
        except (ClientError, BotoCoreError, MediaUploadError, OSError) as e:
            logger.error("Media delete failed", error=str(e), key=key)
            return False

        logger.info("Media deleted", key=key)
        return True


@lru_cache()
def get_media_storage() -> MediaStorage:
    """FastAPI dependency; overridden in tests"""
    return MediaStorage()
