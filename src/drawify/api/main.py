"""Drawify — FastAPI Application.

This module defines the FastAPI ``app`` instance, the REST API routes, and
the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
Every request is independent and stateless:

- **Gateway delegation** — :class:`~drawify.core.gateway.GatewayClient`
  forwards the whole request to the remote function behind an HTTP gateway.
- **Local pipeline** — :class:`~drawify.core.pipeline.DrawingPipeline` runs
  analysis, generation and the optional upload in-process.
- Both are created once in the lifespan hook and stored on ``app.state``.

Endpoints
---------
========  ===========================  =====================================
Method    Path                         Purpose
========  ===========================  =====================================
GET       ``/api/health``              Liveness check
GET       ``/api/config``              Styles and configured backends
POST      ``/api/generate``            Gateway first, local pipeline fallback
POST      ``/api/generate/remote``     Gateway only, no fallback
========  ===========================  =====================================

Usage
-----
CLI (installed entry point)::

    drawify

Direct invocation::

    python -m drawify.api.main
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware

from drawify import __version__
from drawify.api.models import GenerateRequest, GenerateResponse
from drawify.core.config import DrawifyConfig, config
from drawify.core.drawing import decode_drawing
from drawify.core.errors import DrawifyError
from drawify.core.gateway import GatewayClient
from drawify.core.pipeline import DrawingPipeline, GenerationResult
from drawify.core.prompt_builder import STYLES, resolve_style

logger = logging.getLogger(__name__)


def _to_response(result: GenerationResult) -> GenerateResponse:
    return GenerateResponse(
        prompt=result.prompt,
        image=result.image_base64,
        s3_url=result.storage_url,
        source=result.source,
    )


def _http_error(exc: DrawifyError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def create_app(
    cfg: DrawifyConfig | None = None,
    *,
    gateway: GatewayClient | None = None,
    pipeline: DrawingPipeline | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        cfg: Configuration to use.  Defaults to the global ``config``.
        gateway: Pre-built gateway client (tests inject stubbed transports).
        pipeline: Pre-built local pipeline (tests inject fake services).

    Returns:
        The configured application.
    """
    cfg = cfg or config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        """Create the gateway client and local pipeline on startup."""
        app.state.config = cfg
        app.state.gateway = gateway or GatewayClient(cfg)
        app.state.pipeline = pipeline or DrawingPipeline(cfg)
        logger.info(
            "Drawify %s ready (gateway=%s, storage=%s).",
            __version__,
            "on" if cfg.gateway_enabled else "off",
            "on" if cfg.storage_enabled else "off",
        )
        yield

    app = FastAPI(
        title="Drawify",
        description="Turn drawings into stylized AI-generated images.",
        version=__version__,
        lifespan=lifespan,
    )

    # The drawing frontend is served from a different origin during
    # development.  In production, restrict ``allow_origins``.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Routes.
    # -----------------------------------------------------------------------

    @app.get("/api/health")
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    @app.get("/api/config")
    async def get_config(request: Request) -> dict:
        """Return the style catalogue and which backends are configured.

        Returns:
            Dictionary with keys ``version``, ``default_style``, ``styles``
            and ``backends``.
        """
        state = request.app.state
        return {
            "version": __version__,
            "default_style": resolve_style(cfg.default_style).id,
            "styles": [{"id": s.id, "label": s.label} for s in STYLES.values()],
            "backends": {
                "gateway": state.gateway.enabled,
                "analysis": state.pipeline.analyzer.configured,
                "image": state.pipeline.generator.configured,
                "storage": state.pipeline.store.enabled,
            },
        }

    @app.post("/api/generate", response_model=GenerateResponse)
    def generate(req: GenerateRequest, request: Request) -> GenerateResponse:
        """Transform a drawing, preferring the remote function.

        This endpoint:

        1. Validates the drawing (400 before anything is delegated).
        2. If a gateway is configured, delegates the whole pipeline to the
           remote function and returns its result.
        3. If the gateway is not configured or the delegation fails for any
           reason, runs the local pipeline instead.

        Args:
            req: Validated :class:`GenerateRequest` payload.

        Returns:
            The generated image with its prompt and storage URL.

        Raises:
            HTTPException: 400 for an invalid drawing, 500 for missing
                backend configuration or unexpected failures, 502 when the
                analysis or image service fails.
        """
        style = resolve_style(req.style, cfg.default_style)
        try:
            drawing = decode_drawing(req.image_data, cfg.max_image_bytes)
        except DrawifyError as exc:
            raise _http_error(exc) from exc

        gateway: GatewayClient = request.app.state.gateway
        if gateway.enabled:
            try:
                return _to_response(gateway.generate(drawing.to_data_url(), style.id, req.prompt))
            except DrawifyError as exc:
                logger.warning("Gateway delegation failed, falling back to local pipeline: %s", exc)
            except Exception:
                logger.exception("Unexpected gateway failure, falling back to local pipeline.")
        else:
            logger.info("No gateway configured, running local pipeline.")

        pipeline: DrawingPipeline = request.app.state.pipeline
        try:
            result = pipeline.run(drawing, style, req.prompt)
        except DrawifyError as exc:
            raise _http_error(exc) from exc
        except Exception as exc:
            logger.exception("Local pipeline failed.")
            raise HTTPException(status_code=500, detail="Internal server error") from exc
        return _to_response(result)

    @app.post("/api/generate/remote", response_model=GenerateResponse)
    def generate_remote(req: GenerateRequest, request: Request) -> GenerateResponse:
        """Delegate a drawing to the remote function, with no local fallback.

        The request is forwarded as-is; validation happens remotely.

        Raises:
            HTTPException: 500 when no gateway is configured or the remote
                function reports failure, the gateway's own status when it
                answers with an error, 502 when it is unreachable or its
                answer is malformed.
        """
        gateway: GatewayClient = request.app.state.gateway
        try:
            result = gateway.generate(req.image_data, req.style or cfg.default_style, req.prompt)
            return _to_response(result)
        except DrawifyError as exc:
            raise _http_error(exc) from exc
        except Exception as exc:
            logger.exception("Server error while delegating to remote function.")
            raise HTTPException(status_code=500, detail="Internal server error") from exc

    return app


app = create_app()


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port and log level from :data:`~drawify.core.config.config`
    (``DRAWIFY_SERVER_HOST``, ``DRAWIFY_SERVER_PORT``, ``DRAWIFY_LOG_LEVEL``).

    This function is registered as the ``drawify`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "drawify.api.main:app",
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
