"""Tests for drawify.api.models — Pydantic request/response models.

Tests cover:
- Required field validation on GenerateRequest.
- Camel-case aliases used by the drawing frontend.
- Default values for optional fields.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from drawify.api.models import GenerateRequest, GenerateResponse


class TestGenerateRequest:
    """Test GenerateRequest Pydantic model."""

    def test_valid_minimal_request(self):
        req = GenerateRequest.model_validate({"imageData": "data:image/png;base64,AAAA"})
        assert req.image_data == "data:image/png;base64,AAAA"
        assert req.prompt is None
        assert req.style is None

    def test_full_request(self):
        req = GenerateRequest.model_validate(
            {"imageData": "AAAA", "prompt": "my cat", "style": "anime"}
        )
        assert req.prompt == "my cat"
        assert req.style == "anime"

    def test_missing_image_data_raises(self):
        with pytest.raises(ValidationError):
            GenerateRequest.model_validate({"style": "anime"})

    def test_populate_by_field_name(self):
        """Python callers may use the snake_case name."""
        assert GenerateRequest(image_data="AAAA").image_data == "AAAA"


class TestGenerateResponse:
    """Test GenerateResponse serialisation."""

    def test_dump_by_alias(self):
        resp = GenerateResponse(prompt="p", image="aW1n", s3_url="https://x", source="local")
        assert resp.model_dump(by_alias=True) == {
            "prompt": "p",
            "image": "aW1n",
            "s3Url": "https://x",
            "source": "local",
        }

    def test_s3_url_defaults_to_none(self):
        assert GenerateResponse(prompt="p", image="i", source="gateway").s3_url is None

    def test_invalid_source(self):
        with pytest.raises(ValidationError):
            GenerateResponse(prompt="p", image="i", source="elsewhere")
