import asyncio
import io
import zipfile

import pytest

from domain.enums.image_formats import OutputFormat
from domain.models import OutputArtifact, RequestContext
from infrastructure.local_storage_client import LocalStorageClient
from services.path_sandbox import PathSandbox
from services.response_packager import ResponsePackager

ARTIFACTS = [
    OutputArtifact(format=OutputFormat.WEBP, data=b"webp-bytes", filename="cat-0123456789ab.webp"),
    OutputArtifact(format=OutputFormat.AVIF, data=b"avif-bytes", filename="cat-0123456789ab.avif"),
]
CONTEXT = RequestContext(tenant="acme", folder="pets/cats", base_name="cat-0123456789ab")


def _packager(tmp_path, mode):
    sandbox = PathSandbox(str(tmp_path), multi_tenant=True)
    return ResponsePackager(mode, "https://cdn.example.com/images/", sandbox, LocalStorageClient())


def _body(response) -> bytes:
    async def collect():
        return b"".join([chunk async for chunk in response.body_iterator])

    return asyncio.run(collect())


def test_disk_mode_writes_files_and_returns_urls(tmp_path):
    response = _packager(tmp_path, "disk").package(ARTIFACTS, CONTEXT)

    assert response.status_code == 200
    assert (tmp_path / "acme" / "pets" / "cats" / "cat-0123456789ab.webp").read_bytes() == b"webp-bytes"
    assert (tmp_path / "acme" / "pets" / "cats" / "cat-0123456789ab.avif").read_bytes() == b"avif-bytes"
    assert b'"webp":"https://cdn.example.com/images/acme/pets/cats/cat-0123456789ab.webp"' in response.body
    assert b'"ok":true' in response.body


def test_failed_write_removes_formats_already_saved(tmp_path, monkeypatch):
    packager = _packager(tmp_path, "disk")
    original = packager.storage.write_file

    def write_first_only(path, content):
        if path.suffix == ".avif":
            raise OSError("disk full")
        return original(path, content)

    monkeypatch.setattr(packager.storage, "write_file", write_first_only)

    with pytest.raises(OSError):
        packager.package(ARTIFACTS, CONTEXT)
    assert list((tmp_path / "acme" / "pets" / "cats").iterdir()) == []


def test_multipart_mode_writes_nothing(tmp_path):
    response = _packager(tmp_path, "multipart").package(ARTIFACTS, CONTEXT)

    content_type = response.headers["content-type"]
    assert content_type.startswith("multipart/mixed; boundary=")
    boundary = content_type.split("boundary=")[1]
    body = _body(response)

    parts = body.split(f"--{boundary}".encode())
    assert parts[-1] == b"--\r\n"
    assert b"Content-Type: image/webp" in parts[1]
    assert b'filename="cat-0123456789ab.webp"' in parts[1]
    assert parts[1].endswith(b"\r\n\r\nwebp-bytes\r\n")
    assert b"Content-Type: image/avif" in parts[2]
    assert list(tmp_path.iterdir()) == []


def test_zip_mode_bundles_every_format(tmp_path):
    response = _packager(tmp_path, "zip").package(ARTIFACTS, CONTEXT)

    assert response.media_type == "application/zip"
    assert response.headers["content-disposition"] == 'attachment; filename="cat-0123456789ab.zip"'
    with zipfile.ZipFile(io.BytesIO(_body(response))) as archive:
        assert sorted(archive.namelist()) == ["cat-0123456789ab.avif", "cat-0123456789ab.webp"]
        assert archive.read("cat-0123456789ab.webp") == b"webp-bytes"
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in archive.infolist())
    assert list(tmp_path.iterdir()) == []
