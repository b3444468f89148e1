"""Tests for drawify.core.analyzer — Gemini drawing description.

The ``google.genai`` client is replaced by a ``MagicMock`` through the
analyzer's ``client_factory``.  Tests cover:

- Request assembly (model, image part, instruction).
- Description clean-up.
- Lazy client creation and missing-key handling.
- Upstream failure mapping.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from drawify.core.analyzer import DrawingAnalyzer, clean_description
from drawify.core.drawing import decode_drawing
from drawify.core.errors import ConfigurationError, UpstreamError
from drawify.core.prompt_builder import STYLES


@pytest.fixture
def drawing(png_data_url):
    return decode_drawing(png_data_url, 1024 * 1024)


@pytest.fixture
def analyzer(test_config, genai_client):
    return DrawingAnalyzer(test_config, client_factory=lambda key: genai_client)


class TestDescribe:
    """Test DrawingAnalyzer.describe()."""

    def test_returns_description(self, analyzer, drawing):
        assert analyzer.describe(drawing, STYLES["anime"]) == "A red square on white paper."

    def test_sends_model_image_and_instruction(self, analyzer, drawing, genai_client, test_config):
        analyzer.describe(drawing, STYLES["anime"], hint="a flag")

        kwargs = genai_client.models.generate_content.call_args.kwargs
        assert kwargs["model"] == test_config.gemini_model
        image_part, instruction = kwargs["contents"]
        assert image_part.inline_data.data == drawing.data
        assert image_part.inline_data.mime_type == "image/png"
        assert "Anime" in instruction
        assert "a flag" in instruction

    def test_client_built_once_with_key(self, test_config, genai_client, drawing):
        factory = MagicMock(return_value=genai_client)
        analyzer = DrawingAnalyzer(test_config, client_factory=factory)

        analyzer.describe(drawing, STYLES["realistic"])
        analyzer.describe(drawing, STYLES["realistic"])

        factory.assert_called_once_with("test-gemini-key")

    def test_missing_key(self, test_config, drawing):
        cfg = test_config.model_copy(update={"gemini_api_key": None})
        analyzer = DrawingAnalyzer(cfg, client_factory=MagicMock())

        assert analyzer.configured is False
        with pytest.raises(ConfigurationError, match="GEMINI_API_KEY"):
            analyzer.describe(drawing, STYLES["realistic"])

    def test_api_failure(self, analyzer, drawing, genai_client):
        genai_client.models.generate_content.side_effect = RuntimeError("quota exceeded")

        with pytest.raises(UpstreamError, match="quota exceeded") as exc_info:
            analyzer.describe(drawing, STYLES["realistic"])
        assert exc_info.value.status_code == 502

    @pytest.mark.parametrize("text", [None, "", "   ", "```\n```"])
    def test_empty_description(self, analyzer, drawing, genai_client, text):
        genai_client.models.generate_content.return_value = MagicMock(text=text)

        with pytest.raises(UpstreamError, match="empty description"):
            analyzer.describe(drawing, STYLES["realistic"])


class TestCleanDescription:
    """Test clean_description() normalisation."""

    def test_plain_text_unchanged(self):
        assert clean_description("A cat.") == "A cat."

    def test_code_fence_removed(self):
        assert clean_description("```text\nA cat on a mat.\n```") == "A cat on a mat."

    def test_prompt_label_removed(self):
        assert clean_description("Prompt: A cat.") == "A cat."

    def test_wrapping_quotes_removed(self):
        assert clean_description('"A cat."') == "A cat."
