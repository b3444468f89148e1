"""AWS Lambda entry point for the remote generation function.

This is the function :class:`~drawify.core.gateway.GatewayClient` delegates
to.  It runs behind an API Gateway proxy integration, executes the same
:class:`~drawify.core.pipeline.DrawingPipeline` as the local fallback, and
answers with the ``{"success", "data"}`` envelope the gateway client expects.

Deploy with the handler path ``drawify.remote.handler.handler``.  The
pipeline is built on the first invocation and reused while the execution
environment stays warm.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging

from drawify.core.config import config
from drawify.core.drawing import decode_drawing
from drawify.core.errors import DrawifyError
from drawify.core.pipeline import DrawingPipeline
from drawify.core.prompt_builder import resolve_style

logger = logging.getLogger(__name__)
logger.setLevel(config.log_level)

_STRING_FIELDS = ("imageData", "style", "prompt")

_pipeline: DrawingPipeline | None = None


def get_pipeline() -> DrawingPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = DrawingPipeline(config)
    return _pipeline


def _respond(status_code: int, body: dict) -> dict:
    return {
        "statusCode": status_code,
        "headers": {
            "Content-Type": "application/json",
            "Access-Control-Allow-Origin": "*",
        },
        "body": json.dumps(body, ensure_ascii=False),
    }


def _failure(status_code: int, message: str) -> dict:
    return _respond(status_code, {"success": False, "error": message})


def _parse_body(event: dict) -> dict:
    """Extract the JSON payload from a proxy-integration event.

    Direct invocations (``aws lambda invoke``) pass the payload itself as
    the event; those are accepted too.

    Raises:
        ValueError: If the body is not a JSON object or one of its fields
            is not a string.
    """
    if "body" not in event:
        payload = event
    else:
        body = event.get("body") or "{}"
        if event.get("isBase64Encoded"):
            try:
                body = base64.b64decode(body).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise ValueError("Request body is not valid base64") from exc
        payload = json.loads(body) if isinstance(body, str) else body

    if not isinstance(payload, dict):
        raise ValueError("Request body must be a JSON object")
    for field in _STRING_FIELDS:
        if payload.get(field) is not None and not isinstance(payload[field], str):
            raise ValueError(f"{field} must be a string")
    return payload


def handler(event: dict, context: object) -> dict:
    """Handle one gateway request.

    Args:
        event: API Gateway proxy event.
        context: Lambda context (unused).

    Returns:
        Proxy-integration response with the gateway envelope as body.
    """
    try:
        payload = _parse_body(event or {})
    except ValueError as exc:
        return _failure(400, f"Invalid request body: {exc}")

    try:
        style = resolve_style(payload.get("style"), config.default_style)
        drawing = decode_drawing(payload.get("imageData"), config.max_image_bytes)
        result = get_pipeline().run(drawing, style, payload.get("prompt"))
    except DrawifyError as exc:
        logger.warning("Generation failed (%d): %s", exc.status_code, exc.message)
        return _failure(exc.status_code, exc.message)
    except Exception:
        logger.exception("Unexpected error in remote generation.")
        return _failure(500, "Internal server error")

    return _respond(200, result.to_envelope())
