"""Pydantic request and response models for the Drawify API.

The field names follow the JSON the drawing frontend already sends and
expects (``imageData``, ``s3Url``), so Python attribute names are mapped to
those camel-case keys with aliases.

Models
------
GenerateRequest
    Payload for ``POST /api/generate`` and ``POST /api/generate/remote``.
GenerateResponse
    Body returned by both generation endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class GenerateRequest(BaseModel):
    """Request body for the generation endpoints.

    Attributes:
        image_data: The drawing as a ``data:image/...;base64,...`` URL or
            bare base64 text (JSON key ``imageData``).
        prompt: Optional free-text description of the drawing, passed to
            the analysis model as a hint.
        style: Style identifier.  ``None`` means the configured default.
    """

    model_config = ConfigDict(populate_by_name=True)

    image_data: str = Field(
        ...,
        alias="imageData",
        description="Drawing as a base64 data URL.",
    )
    prompt: str | None = Field(
        default=None,
        description="Optional user description of the drawing.",
    )
    style: str | None = Field(
        default=None,
        description="Style identifier (e.g. 'realistic', 'anime').",
    )


class GenerateResponse(BaseModel):
    """Response body for the generation endpoints.

    Attributes:
        prompt: Description of the drawing used to generate the image.
        image: Generated image, base64-encoded.
        s3_url: Public URL of the stored image, or ``None`` when storage is
            disabled or the upload failed (JSON key ``s3Url``).
        source: Whether the gateway or the local pipeline produced it.
    """

    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    image: str
    s3_url: str | None = Field(default=None, alias="s3Url")
    source: Literal["local", "gateway"]
