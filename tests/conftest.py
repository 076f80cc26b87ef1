"""Shared fixtures: settings, apps and in-memory test images."""

import io
import os
import tempfile

# La app por defecto se construye al importar main: que no toque /data/images
os.environ.setdefault("OUTPUT_DIR", tempfile.mkdtemp(prefix="transcoder-tests-"))

import pytest
from fastapi.testclient import TestClient
from PIL import ExifTags, Image, features

from core.config import load_settings
from main import create_app

AVIF_AVAILABLE = features.check("avif")
FORMATS = "webp,avif" if AVIF_AVAILABLE else "webp"

ADMIN_TOKEN = "admin-secret"
TENANT_KEYS = '{"key-acme": "acme", "key-globex": {"tenant": "globex"}}'


def make_image_bytes(width: int, height: int, orientation: int = None, fmt: str = "JPEG", mode: str = "RGB") -> bytes:
    """Genera una imagen con gradiente y, opcionalmente, tag EXIF de orientación"""
    if mode == "RGBA":
        img = Image.new(mode, (width, height), (200, 50, 50, 128))
    else:
        img = Image.new(mode, (width, height))
    if mode == "RGB":
        img.putdata([((x * 255) // max(width - 1, 1), (y * 255) // max(height - 1, 1), 128)
                     for y in range(height) for x in range(width)])
    buffer = io.BytesIO()
    kwargs = {}
    if orientation is not None:
        exif = Image.Exif()
        exif[ExifTags.Base.Orientation] = orientation
        kwargs["exif"] = exif
    img.save(buffer, format=fmt, **kwargs)
    return buffer.getvalue()


@pytest.fixture
def settings_factory(tmp_path):
    def build(**overrides):
        env = {
            "OUTPUT_DIR": str(tmp_path / "images"),
            "PUBLIC_BASE_URL": "http://testserver/images/",
            "ADMIN_TOKEN": ADMIN_TOKEN,
            "OUTPUT_FORMATS": FORMATS,
            "PORTRAIT_MAX_WIDTH": "30",
            "PORTRAIT_MAX_HEIGHT": "40",
            "LANDSCAPE_MAX_WIDTH": "40",
            "LANDSCAPE_MAX_HEIGHT": "30",
            "AVIF_EFFORT": "2",
        }
        env.update({k: str(v) for k, v in overrides.items()})
        return load_settings(env)

    return build


@pytest.fixture
def client(settings_factory):
    app = create_app(settings_factory())
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def tenant_client(settings_factory):
    app = create_app(settings_factory(TENANT_KEYS=TENANT_KEYS))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def jpeg_landscape():
    return make_image_bytes(80, 60)
