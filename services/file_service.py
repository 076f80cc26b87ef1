import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from domain.enums.image_formats import OutputFormat
from domain.models import OutputArtifact, RequestContext
from domain.schemas.file_schema import ImageUploadRequest
from error.error_handling import ClientDisconnected, ConversionFailed, NoFileUploaded, ServiceError, UploadTooLarge
from services.image_processing_service import ImageProcessingService
from services.name_service import NameService
from services.path_sandbox import PathSandbox
from services.response_packager import ResponsePackager

logger = logging.getLogger(__name__)


class FileService:
    def __init__(
        self,
        processing: ImageProcessingService,
        sandbox: PathSandbox,
        packager: ResponsePackager,
        formats: Sequence[OutputFormat],
        max_upload_bytes: int,
        max_concurrent_conversions: int,
    ):
        self.processing = processing
        self.sandbox = sandbox
        self.packager = packager
        self.formats = list(formats)
        self.max_upload_bytes = max_upload_bytes
        # Limita las conversiones simultáneas (CPU y memoria)
        self._conversions = asyncio.Semaphore(max_concurrent_conversions)

    async def read_upload(self, file: Optional[UploadFile]) -> bytes:
        """Lee el archivo subido respetando el límite de tamaño"""
        if file is None or not hasattr(file, "read"):
            raise NoFileUploaded()

        data = await file.read(self.max_upload_bytes + 1)
        if len(data) > self.max_upload_bytes:
            raise UploadTooLarge(f"Upload exceeds {self.max_upload_bytes} bytes")
        if not data:
            raise NoFileUploaded("Empty image part")
        return data

    def build_request(self, image_bytes: bytes, tenant: str, desired_filename: str = None,
                      folder_name: str = None) -> ImageUploadRequest:
        return ImageUploadRequest(
            image_bytes=image_bytes,
            desired_filename=desired_filename,
            folder_name=folder_name,
            tenant=tenant,
        )

    def build_context(self, request: ImageUploadRequest) -> RequestContext:
        # Valida la carpeta antes de cualquier trabajo costoso (no crea nada)
        folder = self.sandbox.sanitize_folder(request.folder_name)
        self.sandbox.resolve_output_dir(request.tenant, folder)

        return RequestContext(
            tenant=request.tenant,
            folder=folder,
            base_name=NameService.make_safe_base_name(request.desired_filename),
        )

    async def convert(
        self,
        image_bytes: bytes,
        context: RequestContext,
        is_disconnected: Callable[[], Awaitable[bool]] = None,
    ) -> List[OutputArtifact]:
        async with self._conversions:
            working = await run_in_threadpool(self.processing.decode_and_prepare, image_bytes)
            try:
                artifacts = []
                for output_format in self.formats:
                    if is_disconnected is not None and await is_disconnected():
                        raise ClientDisconnected(f"Client gone before {output_format.value} encode")
                    artifact = await run_in_threadpool(
                        self.processing.encode_one, working, output_format, context.base_name
                    )
                    artifacts.append(artifact)
                return artifacts
            finally:
                working.close()

    async def process_upload(
        self,
        file: Optional[UploadFile],
        tenant: str,
        desired_filename: str = None,
        folder_name: str = None,
        is_disconnected: Callable[[], Awaitable[bool]] = None,
    ):
        """
        Flujo completo: validar carpeta -> leer con límite -> nombre seguro ->
        convertir cada formato -> empaquetar respuesta.
        """
        if file is None or not hasattr(file, "read"):
            raise NoFileUploaded()

        # La carpeta se valida antes de leer el archivo
        self.sandbox.sanitize_folder(folder_name)
        image_bytes = await self.read_upload(file)

        request = self.build_request(
            image_bytes,
            tenant,
            desired_filename=desired_filename or getattr(file, "filename", None),
            folder_name=folder_name,
        )
        context = self.build_context(request)

        try:
            artifacts = await self.convert(request.image_bytes, context, is_disconnected)
            return self.packager.package(artifacts, context)
        except ConversionFailed:
            logger.exception(f"Conversion failed for {context.base_name}")
            raise
        except ServiceError:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error processing {context.base_name}")
            raise ConversionFailed(str(e)) from e
