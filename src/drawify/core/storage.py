"""Optional persistence of generated images to S3.

Uploads are best-effort: the image has already been generated and is
returned to the caller as base64 either way, so a failed upload is logged
and reported as "no URL" rather than failing the request.

Object keys are date-partitioned::

    <s3_prefix><yyyy>/<mm>/<dd>/<uuid>.<ext>
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from drawify.core.config import DrawifyConfig
from drawify.core.image_client import GeneratedImage

logger = logging.getLogger(__name__)


class ObjectStore:
    """Writes generated images to the configured S3 bucket."""

    def __init__(
        self,
        config: DrawifyConfig,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or (lambda region: boto3.client("s3", region_name=region))
        self._client: Any = None

    @property
    def enabled(self) -> bool:
        return self._config.storage_enabled

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = self._client_factory(self._config.s3_region)
        return self._client

    def object_key(self, image: GeneratedImage, now: datetime | None = None) -> str:
        now = now or datetime.now(timezone.utc)
        prefix = self._config.s3_prefix
        if prefix and not prefix.endswith("/"):
            prefix += "/"
        return f"{prefix}{now:%Y/%m/%d}/{uuid.uuid4()}.{image.extension}"

    def public_url(self, key: str) -> str:
        """Return the public URL of *key*.

        Uses ``s3_public_base_url`` when set (e.g. a CDN in front of the
        bucket), otherwise the virtual-hosted-style S3 URL.
        """
        if self._config.s3_public_base_url:
            return f"{self._config.s3_public_base_url.rstrip('/')}/{key}"
        return f"https://{self._config.s3_bucket}.s3.{self._config.s3_region}.amazonaws.com/{key}"

    def upload(self, image: GeneratedImage) -> str | None:
        """Upload *image* and return its public URL.

        Args:
            image: The generated image.

        Returns:
            The public URL, or ``None`` when storage is disabled or the
            upload failed.
        """
        if not self.enabled:
            return None

        key = self.object_key(image)
        try:
            self._get_client().put_object(
                Bucket=self._config.s3_bucket,
                Key=key,
                Body=image.data,
                ContentType=image.mime_type,
            )
        except (BotoCoreError, ClientError):
            logger.exception("Upload of s3://%s/%s failed.", self._config.s3_bucket, key)
            return None

        url = self.public_url(key)
        logger.info("Uploaded generated image to %s.", url)
        return url
