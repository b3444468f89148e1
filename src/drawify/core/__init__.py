"""Core services for drawing transformation.

- **config**: Configuration management using Pydantic Settings
- **drawing**: Decoding and validation of submitted drawings
- **prompt_builder**: Style catalogue and prompt compilation
- **analyzer**: Drawing description via the Gemini multimodal API
- **image_client**: Text-to-image HTTP client
- **storage**: Optional S3 persistence of generated images
- **pipeline**: The local analyse → generate → upload pipeline
- **gateway**: Delegation of the whole pipeline to a remote function
"""

from drawify.core.config import DrawifyConfig, config
from drawify.core.errors import (
    ConfigurationError,
    DrawifyError,
    GatewayError,
    InvalidDrawingError,
    UpstreamError,
)

__all__ = [
    "DrawifyConfig",
    "config",
    "DrawifyError",
    "InvalidDrawingError",
    "ConfigurationError",
    "UpstreamError",
    "GatewayError",
]
