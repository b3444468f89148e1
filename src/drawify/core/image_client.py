"""Text-to-image HTTP client.

Processing flow:
    1. Build a multipart form (prompt, output format, optional style preset).
    2. POST it to ``config.image_api_url`` with a bearer token.
    3. Extract the image from the response and return the raw bytes.

Response shapes accepted:
    - Raw ``image/*`` body (Stability ``Accept: image/*``).
    - JSON with base64 under ``image``, ``artifacts[0].base64`` or
      ``data[0].b64_json`` (Stability JSON, Stability v1, OpenAI-compatible).

Error handling:
    - Missing API key -> ``ConfigurationError``.
    - Transport errors, non-2xx responses and bodies without image data ->
      ``UpstreamError`` carrying the provider's message where one is given.
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

import httpx

from drawify.core.config import DrawifyConfig
from drawify.core.errors import ConfigurationError, UpstreamError
from drawify.core.prompt_builder import Style

logger = logging.getLogger(__name__)

_FORMAT_MIME = {"png": "image/png", "jpeg": "image/jpeg", "webp": "image/webp"}


@dataclass(frozen=True)
class GeneratedImage:
    """Image bytes returned by the generation endpoint."""

    data: bytes
    mime_type: str

    @property
    def extension(self) -> str:
        return self.mime_type.split("/")[-1].replace("jpeg", "jpg")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")


def _provider_message(response: httpx.Response) -> str:
    """Pull a human-readable error message out of a provider error body."""
    try:
        payload = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return error
        errors = payload.get("errors")
        if isinstance(errors, list) and errors:
            return "; ".join(str(e) for e in errors)
        if payload.get("message"):
            return str(payload["message"])
    return response.reason_phrase


def _extract_base64(payload: object) -> str | None:
    if not isinstance(payload, dict):
        return None
    if payload.get("image"):
        return payload["image"]
    for key, field in (("artifacts", "base64"), ("data", "b64_json")):
        items = payload.get(key)
        if isinstance(items, list) and items and isinstance(items[0], dict):
            if items[0].get(field):
                return items[0][field]
    return None


class ImageGenerator:
    """Client for the configured text-to-image endpoint.

    Args:
        config: Supplies the endpoint URL, key, output format and timeout.
        transport: Optional ``httpx`` transport, used by tests to stub the
            endpoint.
    """

    def __init__(
        self,
        config: DrawifyConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self._config.image_api_key)

    def generate(self, prompt: str, style: Style | None = None) -> GeneratedImage:
        """Generate an image for *prompt*.

        Args:
            prompt: Compiled text-to-image prompt.
            style: Style whose ``preset`` is forwarded when it has one.

        Returns:
            The generated image.

        Raises:
            ConfigurationError: If no image API key is configured.
            UpstreamError: If the request fails or yields no image.
        """
        if not self.configured:
            raise ConfigurationError("DRAWIFY_IMAGE_API_KEY is not set")

        output_format = self._config.image_output_format
        form = {"prompt": prompt, "output_format": output_format}
        if style is not None and style.preset:
            form["style_preset"] = style.preset

        headers = {
            "Authorization": f"Bearer {self._config.image_api_key}",
            "Accept": "image/*, application/json",
        }

        logger.info("Requesting image from %s.", self._config.image_api_url)
        try:
            with httpx.Client(timeout=self._config.image_timeout, transport=self._transport) as client:
                # The endpoint only accepts multipart bodies, which httpx
                # sends only when at least one file part is present.
                response = client.post(
                    self._config.image_api_url,
                    headers=headers,
                    data=form,
                    files={"none": ("", b"")},
                )
        except httpx.HTTPError as exc:
            logger.error("Image request failed: %s", exc)
            raise UpstreamError(f"Image generation request failed: {exc}") from exc

        if response.is_error:
            message = _provider_message(response)
            logger.error("Image endpoint returned %d: %s", response.status_code, message)
            raise UpstreamError(f"Image generation failed ({response.status_code}): {message}")

        content_type = response.headers.get("content-type", "").split(";")[0].strip().lower()
        if content_type.startswith("image/"):
            if not response.content:
                raise UpstreamError("Image generation returned an empty image")
            return GeneratedImage(data=response.content, mime_type=content_type)

        try:
            encoded = _extract_base64(response.json())
        except ValueError as exc:
            raise UpstreamError("Image generation returned an unreadable response") from exc
        if not encoded:
            raise UpstreamError("Image generation returned no image data")

        try:
            data = base64.b64decode(encoded, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise UpstreamError("Image generation returned invalid base64 data") from exc
        return GeneratedImage(data=data, mime_type=_FORMAT_MIME[output_format])
