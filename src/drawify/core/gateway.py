"""Delegation of the whole pipeline to a remote function.

The remote function (see :mod:`drawify.remote.handler`) sits behind an HTTP
gateway.  It receives::

    {"imageData": "data:image/png;base64,...", "style": "anime", "prompt": "..."}

and answers with an envelope::

    {"success": true,  "data": {"prompt": ..., "imageBase64": ..., "s3Url": ...}}
    {"success": false, "error": "..."}

Failure mapping:
    - Gateway URL not configured -> ``ConfigurationError`` (500).
    - Gateway unreachable or timed out -> ``GatewayError`` (502).
    - Non-2xx status -> ``GatewayError`` with the same status.
    - ``success`` false -> ``GatewayError`` (500) with the remote error.
    - Body not JSON, missing image data or non-string fields ->
      ``GatewayError`` (502).
"""

from __future__ import annotations

import logging

import httpx

from drawify.core.config import DrawifyConfig
from drawify.core.errors import ConfigurationError, GatewayError
from drawify.core.pipeline import GenerationResult

logger = logging.getLogger(__name__)


class GatewayClient:
    """HTTP client for the remote generation function."""

    def __init__(
        self,
        config: DrawifyConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return self._config.gateway_enabled

    def generate(self, image_data: str, style: str, prompt: str | None = None) -> GenerationResult:
        """Run the full pipeline remotely.

        Args:
            image_data: Drawing as a ``data:`` URL.
            style: Style identifier.
            prompt: Optional user hint, forwarded only when non-empty.

        Returns:
            A :class:`GenerationResult` with ``source="gateway"``.

        Raises:
            ConfigurationError: If no gateway URL is configured.
            GatewayError: On any delegation failure.
        """
        if not self.enabled:
            raise ConfigurationError("DRAWIFY_GATEWAY_URL environment variable is not set")

        payload = {"imageData": image_data, "style": style}
        if prompt and prompt.strip():
            payload["prompt"] = prompt.strip()

        logger.info("Sending request to remote function via gateway.")
        try:
            with httpx.Client(timeout=self._config.gateway_timeout, transport=self._transport) as client:
                response = client.post(self._config.gateway_url, json=payload)
        except httpx.HTTPError as exc:
            logger.error("Gateway request failed: %s", exc)
            raise GatewayError(f"Remote function unreachable: {exc}", status_code=502) from exc

        if response.is_error:
            logger.error("Remote invocation failed (%d): %s", response.status_code, response.text[:500])
            raise GatewayError(
                "Failed to process image via remote function",
                status_code=response.status_code,
            )

        try:
            result = response.json()
        except ValueError as exc:
            raise GatewayError("Remote function returned invalid JSON", status_code=502) from exc

        return GenerationResult.from_envelope(result)
