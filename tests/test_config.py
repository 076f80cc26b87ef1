import pytest

from core.config import load_settings
from error.error_handling import ConfigurationFatal
from main import create_app


def test_defaults():
    settings = load_settings({})

    assert settings.OUTPUT_DIR == "/data/images"
    assert settings.OUTPUT_MODE == "disk"
    assert settings.output_formats == ["webp", "avif"]
    assert (settings.WEBP_QUALITY, settings.WEBP_EFFORT) == (78, 6)
    assert (settings.AVIF_QUALITY, settings.AVIF_EFFORT) == (40, 8)
    assert settings.MAX_UPLOAD_BYTES == 25 * 1024 * 1024
    assert settings.multi_tenant is False


def test_values_from_environment():
    settings = load_settings({
        "PUBLIC_BASE_URL": "https://img.example.com/images///",
        "OUTPUT_MODE": " ZIP ",
        "OUTPUT_FORMATS": "avif, webp, avif",
        "WEBP_QUALITY": "90",
        "TENANT_KEYS": '{"k": "acme"}',
    })

    assert settings.PUBLIC_BASE_URL == "https://img.example.com/images"
    assert settings.OUTPUT_MODE == "zip"
    assert settings.output_formats == ["avif", "webp"]
    assert settings.WEBP_QUALITY == 90
    assert settings.multi_tenant is True


@pytest.mark.parametrize("env", [
    {"OUTPUT_MODE": "s3"},
    {"OUTPUT_FORMATS": "webp,jpeg"},
    {"OUTPUT_FORMATS": " , "},
    {"WEBP_QUALITY": "101"},
    {"WEBP_EFFORT": "7"},
    {"AVIF_EFFORT": "-1"},
    {"MAX_UPLOAD_BYTES": "lots"},
    {"PORTRAIT_MAX_WIDTH": "0"},
    {"MAX_CONCURRENT_CONVERSIONS": "0"},
])
def test_invalid_values_are_fatal(env):
    with pytest.raises(ConfigurationFatal):
        load_settings(env)


@pytest.mark.parametrize("blob", ["{not json", "{}"])
def test_malformed_tenant_registry_prevents_startup(settings_factory, blob):
    with pytest.raises(ConfigurationFatal):
        create_app(settings_factory(TENANT_KEYS=blob))
