# src/coffee/services/storage.py
"""S3-compatible object storage for avatars, verification photos and post images.

Keys are ``{user_id}/{timestamp_ms}-{filename}`` so two uploads of the same
file never collide. Size and MIME limits are checked here before anything is
sent to the store.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from coffee.core.errors import ConfigurationError, StorageError, ValidationError
from coffee.core.settings import settings
from coffee.db.time import epoch_millis

logger = logging.getLogger(__name__)

MB = 1024 * 1024

AVATARS_BUCKET = "avatars"
POST_IMAGES_BUCKET = "post-images"
VERIFICATION_BUCKET = "verification-photos"


@dataclass(frozen=True)
class BucketSpec:
    """Limits applied to everything stored in a bucket."""

    name: str
    max_bytes: int
    allowed_mime_types: tuple[str, ...]
    public: bool = True


BUCKETS: dict[str, BucketSpec] = {
    AVATARS_BUCKET: BucketSpec(
        AVATARS_BUCKET,
        5 * MB,
        ("image/jpeg", "image/png", "image/webp"),
    ),
    POST_IMAGES_BUCKET: BucketSpec(
        POST_IMAGES_BUCKET,
        10 * MB,
        ("image/jpeg", "image/png", "image/webp", "image/gif", "image/heic"),
    ),
    VERIFICATION_BUCKET: BucketSpec(
        VERIFICATION_BUCKET,
        10 * MB,
        ("image/jpeg", "image/png", "image/webp", "image/heic"),
    ),
}

_MISSING_BUCKET_CODES = {"404", "NoSuchBucket", "NotFound"}
_EXISTING_BUCKET_CODES = {"BucketAlreadyOwnedByYou", "BucketAlreadyExists"}


@dataclass(frozen=True)
class StoredObject:
    bucket: str
    key: str
    url: str


def safe_filename(name: str | None, *, default: str = "file") -> str:
    """Strip directories and replace characters unsafe in object keys."""
    base = (name or "").replace("\\", "/").rsplit("/", 1)[-1].strip()
    cleaned = re.sub(r"[^a-zA-Z0-9._-]", "_", base)
    return cleaned or default


def object_key(user_id: str, filename: str | None, *, now_ms: int | None = None) -> str:
    """Build a collision-avoiding key for a user's upload."""
    stamp = now_ms if now_ms is not None else epoch_millis()
    return f"{user_id}/{stamp}-{safe_filename(filename)}"


def validate_upload(
    spec: BucketSpec,
    *,
    content_type: str | None,
    size: int,
    max_bytes: int | None = None,
) -> None:
    """Check type and size of an upload against a bucket's limits.

    Raises:
        ValidationError: With a message suitable for showing to the user.
    """
    limit = min(spec.max_bytes, max_bytes) if max_bytes else spec.max_bytes
    if not content_type or not content_type.startswith("image/"):
        raise ValidationError(
            "Please upload a valid image file (JPG, PNG, etc.)",
            code="invalid_file_type",
        )
    if content_type not in spec.allowed_mime_types:
        raise ValidationError(
            f"Images of type {content_type} are not accepted here.",
            code="invalid_file_type",
        )
    if size <= 0:
        raise ValidationError("The uploaded file is empty.", code="empty_file")
    if size > limit:
        raise ValidationError(
            f"Image file must be smaller than {limit // MB}MB",
            code="file_too_large",
        )


class ObjectStore:
    """Thin wrapper around a boto3 S3 client."""

    def __init__(
        self,
        client: Any,
        *,
        region: str,
        endpoint_url: str | None = None,
        public_url: str | None = None,
    ) -> None:
        self.client = client
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base = public_url

    def public_url(self, bucket: str, key: str) -> str:
        """Return the public URL of an object in a public bucket."""
        if self.public_base:
            return f"{self.public_base.rstrip('/')}/{bucket}/{key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{bucket}/{key}"
        return f"https://{bucket}.s3.{self.region}.amazonaws.com/{key}"

    def ensure_bucket(self, spec: BucketSpec) -> bool:
        """Create ``spec`` if it does not exist yet.

        Returns:
            True if the bucket was created, False if it was already there.
        """
        try:
            self.client.head_bucket(Bucket=spec.name)
            return False
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code not in _MISSING_BUCKET_CODES:
                raise StorageError(f"Could not check bucket {spec.name}: {code}") from exc

        create_args: dict[str, Any] = {"Bucket": spec.name}
        if self.region != "us-east-1":
            create_args["CreateBucketConfiguration"] = {"LocationConstraint": self.region}
        try:
            self.client.create_bucket(**create_args)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _EXISTING_BUCKET_CODES:
                return False
            raise StorageError(f"Could not create bucket {spec.name}: {code}") from exc

        if spec.public:
            policy = {
                "Version": "2012-10-17",
                "Statement": [
                    {
                        "Effect": "Allow",
                        "Principal": "*",
                        "Action": ["s3:GetObject"],
                        "Resource": [f"arn:aws:s3:::{spec.name}/*"],
                    }
                ],
            }
            try:
                self.client.put_bucket_policy(Bucket=spec.name, Policy=json.dumps(policy))
            except ClientError as exc:
                logger.warning("Could not make bucket %s public: %s", spec.name, exc)
        logger.info("Created storage bucket %s", spec.name)
        return True

    def upload(
        self,
        bucket: str,
        *,
        user_id: str,
        filename: str | None,
        data: bytes,
        content_type: str | None,
        max_bytes: int | None = None,
    ) -> StoredObject:
        """Validate and store ``data`` under the user's prefix."""
        spec = BUCKETS[bucket]
        validate_upload(spec, content_type=content_type, size=len(data), max_bytes=max_bytes)
        key = object_key(user_id, filename)
        try:
            self.client.put_object(Bucket=bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as exc:
            logger.error("Upload to %s/%s failed: %s", bucket, key, exc)
            raise StorageError("Failed to upload file to storage.") from exc
        return StoredObject(bucket=bucket, key=key, url=self.public_url(bucket, key))

    def create_signed_upload(
        self,
        bucket: str,
        key: str,
        *,
        content_type: str = "image/jpeg",
    ) -> dict[str, Any]:
        """Issue a presigned POST so a client can upload straight to the store."""
        spec = BUCKETS[bucket]
        try:
            presigned = self.client.generate_presigned_post(
                Bucket=bucket,
                Key=key,
                Fields={"Content-Type": content_type},
                Conditions=[
                    {"Content-Type": content_type},
                    ["content-length-range", 1, spec.max_bytes],
                ],
                ExpiresIn=settings.storage_signed_upload_ttl_seconds,
            )
        except (ClientError, BotoCoreError) as exc:
            raise StorageError("Failed to create signed upload URL.") from exc
        return {"path": key, "url": presigned["url"], "fields": presigned["fields"]}

    def object_exists(self, bucket: str, key: str) -> bool:
        try:
            self.client.head_object(Bucket=bucket, Key=key)
            return True
        except ClientError:
            return False


@lru_cache(maxsize=1)
def _build_store() -> ObjectStore:
    client = boto3.client(
        "s3",
        endpoint_url=settings.storage_endpoint_url,
        aws_access_key_id=settings.storage_access_key,
        aws_secret_access_key=settings.storage_secret_key,
        region_name=settings.storage_region,
    )
    return ObjectStore(
        client,
        region=settings.storage_region,
        endpoint_url=settings.storage_endpoint_url,
        public_url=settings.storage_public_url,
    )


def get_object_store() -> ObjectStore:
    """Return the shared object store.

    Raises:
        ConfigurationError: If storage credentials are not configured.
    """
    if not settings.storage_configured:
        raise ConfigurationError("Server is missing storage configuration.")
    return _build_store()
