"""Configuration management for the Drawify service.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the DRAWIFY_ prefix,
allowing easy customization without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (DRAWIFY_* prefix)
2. .env file in the project root
3. Default values defined in DrawifyConfig

Example .env file:
    DRAWIFY_GATEWAY_URL=https://abc123.execute-api.us-east-1.amazonaws.com/prod/generate
    DRAWIFY_GEMINI_API_KEY=...
    DRAWIFY_IMAGE_API_KEY=...
    DRAWIFY_S3_BUCKET=my-drawings

Optional Backends
-----------------
Every external service is optional at configuration time:

- ``gateway_url`` unset: ``POST /api/generate`` skips delegation and runs the
  local pipeline directly; ``POST /api/generate/remote`` answers 500.
- ``gemini_api_key`` / ``image_api_key`` unset: the local pipeline fails with
  a configuration error when it is reached.
- ``s3_bucket`` unset: generated images are returned but never persisted.

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.

Usage Example
-------------
    from drawify.core.config import config

    print(config.gateway_enabled)
    print(config.image_api_url)
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DrawifyConfig(BaseSettings):
    """Main configuration for the Drawify service.

    Attributes
    ----------
    Gateway Delegation:
        gateway_url : str | None
            HTTP front door of the remote generation function
        gateway_timeout : float
            Seconds to wait for the remote function

    Multimodal Analysis:
        gemini_api_key : str | None
            API key for the Gemini analysis model
        gemini_model : str
            Model used to describe the drawing

    Image Generation:
        image_api_url : str
            Text-to-image endpoint (multipart form POST)
        image_api_key : str | None
            Bearer token for the image endpoint
        image_output_format : Literal["png", "jpeg", "webp"]
            Requested output format
        image_timeout : float
            Seconds to wait for the image endpoint

    Object Storage:
        s3_bucket : str | None
            Bucket for generated images (unset disables uploads)
        s3_region : str
            AWS region of the bucket
        s3_prefix : str
            Key prefix for uploaded objects
        s3_public_base_url : str | None
            Public base URL (CDN) used instead of the S3 virtual-hosted URL

    Requests:
        default_style : str
            Style applied when a request does not name one
        max_image_bytes : int
            Upper bound for the decoded drawing size

    Server Settings:
        server_host : str
            Server bind address
        server_port : int
            Server port (1024-65535)
        log_level : str
            Root log level used by the CLI entry point

    Examples
    --------
        >>> custom_config = DrawifyConfig(
        ...     gateway_url=None,
        ...     s3_bucket="drawings",
        ... )
        >>> custom_config.storage_enabled
        True
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="DRAWIFY_",
        case_sensitive=False,
    )

    # Gateway delegation
    gateway_url: str | None = Field(
        default=None,
        description="Remote function URL; unset disables delegation",
    )
    gateway_timeout: float = Field(default=60.0, gt=0)

    # Multimodal analysis
    gemini_api_key: str | None = Field(
        default=None,
        description="API key for the Gemini multimodal analysis model",
    )
    gemini_model: str = Field(
        default="gemini-2.0-flash",
        description="Gemini model used to describe drawings",
    )

    # Image generation
    image_api_url: str = Field(
        default="https://api.stability.ai/v2beta/stable-image/generate/core",
        description="Text-to-image endpoint accepting multipart form data",
    )
    image_api_key: str | None = Field(
        default=None,
        description="Bearer token for the image-generation endpoint",
    )
    image_output_format: Literal["png", "jpeg", "webp"] = Field(default="png")
    image_timeout: float = Field(default=120.0, gt=0)

    # Object storage
    s3_bucket: str | None = Field(
        default=None,
        description="S3 bucket for generated images; unset disables uploads",
    )
    s3_region: str = Field(default="us-east-1")
    s3_prefix: str = Field(default="generated/")
    s3_public_base_url: str | None = Field(
        default=None,
        description="Public base URL for uploaded objects (e.g. a CDN domain)",
    )

    # Request handling
    default_style: str = Field(default="realistic")
    max_image_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)

    # Server settings
    server_host: str = Field(
        default="0.0.0.0",
        description="Server bind address (0.0.0.0 for local network)",
    )
    server_port: int = Field(
        default=7860,
        description="Server port",
        ge=1024,
        le=65535,
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    @property
    def gateway_enabled(self) -> bool:
        """Whether requests should be delegated to the remote function first."""
        return bool(self.gateway_url and self.gateway_url.strip())

    @property
    def storage_enabled(self) -> bool:
        """Whether generated images are persisted to object storage."""
        return bool(self.s3_bucket)


# Global configuration instance
# Loads values from environment variables (DRAWIFY_* prefix) and .env file.
config = DrawifyConfig()
