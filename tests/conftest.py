"""Shared pytest fixtures for Drawify tests.

No test talks to a real service: the Gemini and S3 clients are replaced by
``MagicMock`` objects through the services' client factories, and outbound
HTTP (image endpoint, gateway) goes through ``httpx.MockTransport``.
"""

from __future__ import annotations

import base64
import io
import os
import struct
import zlib
from collections.abc import Callable, Generator
from unittest.mock import MagicMock

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from drawify.api.main import create_app
from drawify.core.analyzer import DrawingAnalyzer
from drawify.core.config import DrawifyConfig
from drawify.core.gateway import GatewayClient
from drawify.core.image_client import ImageGenerator
from drawify.core.pipeline import DrawingPipeline
from drawify.core.storage import ObjectStore

GATEWAY_URL = "https://gateway.test/prod/generate"
IMAGE_API_URL = "https://images.test/v2/generate"

# Bytes returned by the stubbed image endpoint.  Content is irrelevant to
# the service, which never decodes generated images.
GENERATED_IMAGE = b"\x89PNG\r\n\x1a\ngenerated"


def make_png(size: tuple[int, int] = (32, 24), color=(255, 0, 0), fmt: str = "PNG") -> bytes:
    """Render a solid-colour image and return its encoded bytes."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


def huge_png_header(width: int = 20000, height: int = 20000) -> bytes:
    """A tiny PNG whose header claims *width* x *height* pixels.

    Pillow refuses to open it as a decompression bomb.
    """

    def chunk(tag: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", zlib.compress(b"")) + chunk(b"IEND", b"")


def gateway_envelope(**data) -> dict:
    """Build a successful remote-function response body."""
    body = {"prompt": "A remote cat.", "imageBase64": "cmVtb3Rl", "s3Url": "https://cdn.test/r.png"}
    body.update(data)
    return {"success": True, "data": body}


@pytest.fixture
def test_config(monkeypatch) -> DrawifyConfig:
    """Configuration with every local backend enabled and no gateway.

    ``DRAWIFY_*`` variables from the developer's shell are cleared so they
    cannot leak into assertions.
    """
    for name in list(os.environ):
        if name.startswith("DRAWIFY_"):
            monkeypatch.delenv(name, raising=False)

    return DrawifyConfig(
        _env_file=None,
        gemini_api_key="test-gemini-key",
        image_api_url=IMAGE_API_URL,
        image_api_key="test-image-key",
        s3_bucket="test-bucket",
        s3_region="eu-west-1",
    )


@pytest.fixture
def gateway_config(test_config: DrawifyConfig) -> DrawifyConfig:
    """Same as ``test_config`` with delegation enabled."""
    return test_config.model_copy(update={"gateway_url": GATEWAY_URL})


@pytest.fixture
def png_bytes() -> bytes:
    return make_png()


@pytest.fixture
def png_data_url(png_bytes: bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


@pytest.fixture
def genai_client() -> MagicMock:
    """Fake ``google.genai.Client`` answering with a fixed description."""
    client = MagicMock()
    client.models.generate_content.return_value = MagicMock(text="A red square on white paper.")
    return client


@pytest.fixture
def s3_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def image_requests() -> list[httpx.Request]:
    """Requests received by the stubbed image endpoint."""
    return []


@pytest.fixture
def image_transport(image_requests: list[httpx.Request]) -> httpx.MockTransport:
    """Image endpoint stub returning ``GENERATED_IMAGE`` as ``image/png``."""

    def handle(request: httpx.Request) -> httpx.Response:
        image_requests.append(request)
        return httpx.Response(200, content=GENERATED_IMAGE, headers={"content-type": "image/png"})

    return httpx.MockTransport(handle)


@pytest.fixture
def make_pipeline(
    genai_client: MagicMock,
    s3_client: MagicMock,
    image_transport: httpx.MockTransport,
) -> Callable[[DrawifyConfig], DrawingPipeline]:
    """Factory building a real pipeline wired to the fake clients."""

    def build(cfg: DrawifyConfig) -> DrawingPipeline:
        return DrawingPipeline(
            cfg,
            analyzer=DrawingAnalyzer(cfg, client_factory=lambda key: genai_client),
            generator=ImageGenerator(cfg, transport=image_transport),
            store=ObjectStore(cfg, client_factory=lambda region: s3_client),
        )

    return build


@pytest.fixture
def gateway_requests() -> list[httpx.Request]:
    """Requests received by the stubbed gateway."""
    return []


@pytest.fixture
def gateway_reply() -> dict:
    """Mutable description of the stubbed gateway's answer.

    Tests set ``status``, ``json``, ``text`` or ``exc`` before issuing
    requests.
    """
    return {"status": 200, "json": gateway_envelope()}


@pytest.fixture
def gateway_transport(
    gateway_requests: list[httpx.Request],
    gateway_reply: dict,
) -> httpx.MockTransport:
    def handle(request: httpx.Request) -> httpx.Response:
        gateway_requests.append(request)
        if "exc" in gateway_reply:
            raise gateway_reply["exc"]
        if "text" in gateway_reply:
            return httpx.Response(gateway_reply["status"], text=gateway_reply["text"])
        return httpx.Response(gateway_reply["status"], json=gateway_reply["json"])

    return httpx.MockTransport(handle)


@pytest.fixture
def make_client(
    make_pipeline: Callable[[DrawifyConfig], DrawingPipeline],
    gateway_transport: httpx.MockTransport,
) -> Generator[Callable[[DrawifyConfig], TestClient], None, None]:
    """Factory returning a started ``TestClient`` for a given configuration."""
    clients: list[TestClient] = []

    def build(cfg: DrawifyConfig) -> TestClient:
        app = create_app(
            cfg,
            gateway=GatewayClient(cfg, transport=gateway_transport),
            pipeline=make_pipeline(cfg),
        )
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield build

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def test_client(make_client, test_config: DrawifyConfig) -> TestClient:
    """API client with the gateway disabled (local pipeline only)."""
    return make_client(test_config)


@pytest.fixture
def gateway_client(make_client, gateway_config: DrawifyConfig) -> TestClient:
    """API client with the gateway enabled."""
    return make_client(gateway_config)


@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """Expose :func:`make_png` to tests that need other sizes or formats."""
    return make_png


@pytest.fixture
def make_envelope() -> Callable[..., dict]:
    """Expose :func:`gateway_envelope` to tests that vary the remote answer."""
    return gateway_envelope


@pytest.fixture
def huge_png() -> bytes:
    """See :func:`huge_png_header`."""
    return huge_png_header()
