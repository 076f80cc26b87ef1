import io
import logging
import secrets
import zipfile
from typing import Iterator, List

from fastapi.responses import JSONResponse, StreamingResponse

from domain.models import OutputArtifact, RequestContext
from domain.schemas.file_schema import ImageUploadResponse
from infrastructure.local_storage_client import LocalStorageClient
from services.path_sandbox import PathSandbox

logger = logging.getLogger(__name__)


class ResponsePackager:
    """
    Empaqueta los artefactos según el modo del despliegue:
    - disk: escribe en disco y devuelve JSON con URLs públicas
    - multipart: devuelve todos los formatos en un multipart/mixed
    - zip: devuelve un único <base>.zip
    """

    def __init__(self, mode: str, public_base_url: str, sandbox: PathSandbox, storage: LocalStorageClient):
        self.mode = mode
        self.public_base_url = public_base_url.rstrip("/")
        self.sandbox = sandbox
        self.storage = storage

    def package(self, artifacts: List[OutputArtifact], context: RequestContext):
        if self.mode == "disk":
            return self.package_json(artifacts, context)
        if self.mode == "multipart":
            return self.package_multipart(artifacts, context)
        return self.package_zip(artifacts, context)

    def persist(self, artifacts: List[OutputArtifact], context: RequestContext) -> dict:
        """Escribe cada artefacto y devuelve formato -> URL"""
        out_dir = self.sandbox.resolve_output_dir(context.tenant, context.folder)
        self.storage.ensure_dir(out_dir)

        urls = {}
        written = []
        try:
            for artifact in artifacts:
                path = self.storage.write_file(out_dir / artifact.filename, artifact.data)
                written.append(path)
                urls[artifact.format.value] = self.public_url(self.sandbox.relative_path(path))
                logger.info(f"Saved {path} ({len(artifact.data)} bytes)")
        except OSError:
            # Todo o nada: no dejar formatos sueltos publicados
            for path in written:
                path.unlink(missing_ok=True)
            raise
        return urls

    def public_url(self, relative_path: str) -> str:
        return f"{self.public_base_url}/{relative_path}"

    def package_json(self, artifacts: List[OutputArtifact], context: RequestContext) -> JSONResponse:
        urls = self.persist(artifacts, context)
        body = ImageUploadResponse(folder=context.folder, files=urls)
        return JSONResponse(body.model_dump())

    def package_multipart(self, artifacts: List[OutputArtifact], context: RequestContext) -> StreamingResponse:
        boundary = secrets.token_hex(16)
        return StreamingResponse(
            self._multipart_parts(artifacts, boundary),
            media_type=f"multipart/mixed; boundary={boundary}",
        )

    @staticmethod
    def _multipart_parts(artifacts: List[OutputArtifact], boundary: str) -> Iterator[bytes]:
        for artifact in artifacts:
            headers = (
                f"--{boundary}\r\n"
                f"Content-Type: {artifact.media_type}\r\n"
                f'Content-Disposition: attachment; filename="{artifact.filename}"\r\n'
                f"Content-Length: {len(artifact.data)}\r\n"
                "\r\n"
            )
            yield headers.encode("ascii")
            yield artifact.data
            yield b"\r\n"
        yield f"--{boundary}--\r\n".encode("ascii")

    def package_zip(self, artifacts: List[OutputArtifact], context: RequestContext) -> StreamingResponse:
        mem = io.BytesIO()
        with zipfile.ZipFile(mem, mode="w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for artifact in artifacts:
                zf.writestr(artifact.filename, artifact.data)
        mem.seek(0)

        headers = {"Content-Disposition": f'attachment; filename="{context.base_name}.zip"'}
        return StreamingResponse(mem, media_type="application/zip", headers=headers)
