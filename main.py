import logging
import os

import uvicorn
from dotenv import load_dotenv
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

load_dotenv()  # Load environment variables from a .env file

from fastapi import FastAPI
from api import api
from core.config import Settings, settings as default_settings
from core.logger import configure_logging
from domain.enums.image_formats import OutputFormat
from domain.models import EncodeOptions, SizeProfile, SizeProfiles
from error.error_handling import register_error_handlers
from infrastructure.local_storage_client import LocalStorageClient
from infrastructure.pillow_codec import PillowCodec
from services.file_service import FileService
from services.image_processing_service import ImageProcessingService
from services.path_sandbox import PathSandbox
from services.response_packager import ResponsePackager
from services.tenant_service import TenantRegistry, TenantResolver

logger = logging.getLogger(__name__)


def create_app(settings: Settings = None) -> FastAPI:
    """
    Construye la aplicación. Cualquier error de configuración (ConfigurationFatal)
    se propaga: el proceso no arranca con una autenticación ambigua.
    """
    settings = settings or default_settings

    registry = TenantRegistry.from_blob(settings.TENANT_KEYS)
    resolver = TenantResolver(registry, settings.ADMIN_TOKEN, multi_tenant=settings.multi_tenant)
    if not settings.multi_tenant and not settings.ADMIN_TOKEN:
        logger.warning("ADMIN_TOKEN is empty: every protected endpoint will answer 401")

    sandbox = PathSandbox(settings.OUTPUT_DIR, multi_tenant=settings.multi_tenant)
    storage = LocalStorageClient()

    processing = ImageProcessingService(
        codec=PillowCodec(),
        profiles=SizeProfiles(
            portrait=SizeProfile(max_width=settings.PORTRAIT_MAX_WIDTH, max_height=settings.PORTRAIT_MAX_HEIGHT),
            landscape=SizeProfile(max_width=settings.LANDSCAPE_MAX_WIDTH, max_height=settings.LANDSCAPE_MAX_HEIGHT),
        ),
        encode_options={
            OutputFormat.WEBP: EncodeOptions(quality=settings.WEBP_QUALITY, effort=settings.WEBP_EFFORT),
            OutputFormat.AVIF: EncodeOptions(quality=settings.AVIF_QUALITY, effort=settings.AVIF_EFFORT),
        },
    )
    packager = ResponsePackager(settings.OUTPUT_MODE, settings.PUBLIC_BASE_URL, sandbox, storage)
    file_service = FileService(
        processing=processing,
        sandbox=sandbox,
        packager=packager,
        formats=[OutputFormat(f) for f in settings.output_formats],
        max_upload_bytes=settings.MAX_UPLOAD_BYTES,
        max_concurrent_conversions=settings.MAX_CONCURRENT_CONVERSIONS,
    )

    app = FastAPI(title="Image Transcoding API")

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Allows all origins
        allow_credentials=True,
        allow_methods=["*"],  # Allows all methods
        allow_headers=["*"],  # Allows all headers
    )

    app.state.settings = settings
    app.state.tenant_resolver = resolver
    app.state.sandbox = sandbox
    app.state.storage = storage
    app.state.file_service = file_service

    register_error_handlers(app)
    app.include_router(api.router)

    # Lectura pública de los archivos publicados (solo modo disco)
    if settings.OUTPUT_MODE == "disk":
        os.makedirs(settings.OUTPUT_DIR, exist_ok=True)
        app.mount("/images", StaticFiles(directory=settings.OUTPUT_DIR), name="images")

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


# Punto de entrada para ejecutar la aplicación
if __name__ == "__main__":
    uvicorn.run(
        "main:app",  # Módulo y nombre de la aplicación
        host="0.0.0.0",  # Escucha en todas las interfaces
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower()
    )
