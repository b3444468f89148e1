"""Drawing description via the Gemini multimodal API.

:class:`DrawingAnalyzer` turns a :class:`~drawify.core.drawing.Drawing` into
a text prompt: the image bytes and an instruction compiled by
:mod:`drawify.core.prompt_builder` are sent in a single ``generate_content``
call, and the model's text answer is cleaned up and returned.

The ``google-genai`` client is created lazily on first use, so the service
starts (and the gateway path keeps working) without an API key.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import Any

from google import genai
from google.genai import types

from drawify.core.config import DrawifyConfig
from drawify.core.drawing import Drawing
from drawify.core.errors import ConfigurationError, UpstreamError
from drawify.core.prompt_builder import Style, build_analysis_instruction

logger = logging.getLogger(__name__)

_FENCE_RE = re.compile(r"^```[\w-]*\s*|\s*```$")


def clean_description(text: str) -> str:
    """Strip code fences, a leading ``Prompt:`` label and wrapping quotes."""
    cleaned = _FENCE_RE.sub("", text.strip()).strip()
    cleaned = re.sub(r"^prompt\s*:\s*", "", cleaned, flags=re.I)
    if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in "\"'":
        cleaned = cleaned[1:-1].strip()
    return cleaned


class DrawingAnalyzer:
    """Describes drawings with a Gemini model.

    Attributes:
        _config (DrawifyConfig):
            Supplies ``gemini_api_key`` and ``gemini_model``.
        _client_factory:
            Callable building the SDK client from an API key.  Tests inject
            a fake here.
    """

    def __init__(
        self,
        config: DrawifyConfig,
        client_factory: Callable[[str], Any] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or (lambda key: genai.Client(api_key=key))
        self._client: Any = None

    @property
    def configured(self) -> bool:
        return bool(self._config.gemini_api_key)

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.configured:
                raise ConfigurationError("DRAWIFY_GEMINI_API_KEY is not set")
            self._client = self._client_factory(self._config.gemini_api_key)
        return self._client

    def describe(self, drawing: Drawing, style: Style, hint: str | None = None) -> str:
        """Ask the model for a text-to-image prompt describing *drawing*.

        Args:
            drawing: The validated drawing.
            style: Target style, used to steer the description.
            hint: Optional user-supplied description of the drawing.

        Returns:
            The cleaned description text.

        Raises:
            ConfigurationError: If no Gemini API key is configured.
            UpstreamError: If the API call fails or returns no text.
        """
        client = self._get_client()
        contents = [
            types.Part.from_bytes(data=drawing.data, mime_type=drawing.mime_type),
            build_analysis_instruction(style, hint),
        ]

        logger.info("Requesting drawing description from %s.", self._config.gemini_model)
        try:
            response = client.models.generate_content(
                model=self._config.gemini_model,
                contents=contents,
            )
        except Exception as exc:
            logger.exception("Gemini analysis request failed.")
            raise UpstreamError(f"Drawing analysis failed: {exc}") from exc

        description = clean_description(getattr(response, "text", None) or "")
        if not description:
            raise UpstreamError("Drawing analysis returned an empty description")
        logger.debug("Description: %s", description)
        return description
