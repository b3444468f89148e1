"""Drawify - turn hand-made drawings into stylized AI-generated images."""

__version__ = "0.1.0"

from drawify.core.config import DrawifyConfig, config

__all__ = [
    "DrawifyConfig",
    "config",
]
