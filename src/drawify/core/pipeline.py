"""Local drawing-to-image pipeline.

:class:`DrawingPipeline` runs the whole transformation in-process:

1. Describe the drawing with the multimodal model.
2. Compile the generation prompt for the requested style.
3. Generate the image.
4. Upload it to object storage (when enabled).

The same pipeline backs the local fallback of ``POST /api/generate`` and the
remote function in :mod:`drawify.remote.handler`, so both produce identical
results.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Literal

from drawify.core.analyzer import DrawingAnalyzer
from drawify.core.config import DrawifyConfig
from drawify.core.drawing import Drawing
from drawify.core.errors import GatewayError
from drawify.core.image_client import ImageGenerator
from drawify.core.prompt_builder import Style, build_generation_prompt
from drawify.core.storage import ObjectStore

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Outcome of one drawing transformation.

    Attributes:
        prompt: Description of the drawing produced by the analysis model.
        image_base64: Generated image, base64-encoded.
        storage_url: Public URL of the stored image, or ``None``.
        source: ``"local"`` or ``"gateway"``, whichever produced the result.
    """

    prompt: str
    image_base64: str
    storage_url: str | None = None
    source: Literal["local", "gateway"] = "local"

    def to_envelope(self) -> dict:
        """Serialise to the remote function's ``{"success", "data"}`` body."""
        return {
            "success": True,
            "data": {
                "prompt": self.prompt,
                "imageBase64": self.image_base64,
                "s3Url": self.storage_url,
            },
        }

    @classmethod
    def from_envelope(cls, envelope: object) -> GenerationResult:
        """Parse a remote function's envelope into a gateway result.

        Args:
            envelope: The decoded JSON body returned through the gateway.

        Returns:
            A :class:`GenerationResult` with ``source="gateway"``.

        Raises:
            GatewayError: 500 with the remote error when ``success`` is
                false, 502 when the body is malformed or carries no image.
        """
        if not isinstance(envelope, dict):
            raise GatewayError("Remote function returned an unexpected response", status_code=502)

        if not envelope.get("success"):
            error = envelope.get("error")
            raise GatewayError(
                error if isinstance(error, str) and error else "Remote processing failed",
                status_code=500,
            )

        data = envelope.get("data")
        if not isinstance(data, dict):
            raise GatewayError("Remote function returned no image", status_code=502)

        image_base64 = data.get("imageBase64")
        if not isinstance(image_base64, str) or not image_base64:
            raise GatewayError("Remote function returned no image", status_code=502)

        prompt = data.get("prompt")
        storage_url = data.get("s3Url")
        for name, value in (("prompt", prompt), ("s3Url", storage_url)):
            if value is not None and not isinstance(value, str):
                raise GatewayError(
                    f"Remote function returned a non-string {name}",
                    status_code=502,
                )

        return cls(
            prompt=prompt or "",
            image_base64=image_base64,
            storage_url=storage_url,
            source="gateway",
        )


class DrawingPipeline:
    """Runs analysis, generation and upload for a single drawing."""

    def __init__(
        self,
        config: DrawifyConfig,
        analyzer: DrawingAnalyzer | None = None,
        generator: ImageGenerator | None = None,
        store: ObjectStore | None = None,
    ) -> None:
        self._config = config
        self.analyzer = analyzer or DrawingAnalyzer(config)
        self.generator = generator or ImageGenerator(config)
        self.store = store or ObjectStore(config)

    def run(self, drawing: Drawing, style: Style, hint: str | None = None) -> GenerationResult:
        """Transform *drawing* into a generated image in *style*.

        Args:
            drawing: The validated drawing.
            style: Target style.
            hint: Optional user description forwarded to the analysis model.

        Returns:
            A :class:`GenerationResult` with ``source="local"``.

        Raises:
            ConfigurationError: If the analysis or image backend is not
                configured.
            UpstreamError: If either backend fails.
        """
        started = time.monotonic()

        description = self.analyzer.describe(drawing, style, hint)
        image = self.generator.generate(build_generation_prompt(description, style), style)
        storage_url = self.store.upload(image)

        logger.info(
            "Local pipeline finished in %.2fs (style=%s, stored=%s).",
            time.monotonic() - started,
            style.id,
            storage_url is not None,
        )
        return GenerationResult(
            prompt=description,
            image_base64=image.to_base64(),
            storage_url=storage_url,
            source="local",
        )
