import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class ErrorTypes:
    unauthorized = "unauthorized"
    invalid_folder = "Invalid folder"
    no_file_uploaded = "No file uploaded (field name: image)"
    upload_too_large = "File too large"
    decode_failed = "Unsupported or corrupt image"
    conversion_failed = "Conversion failed"
    client_disconnected = "Client disconnected"


class ServiceError(Exception):
    """Error base del servicio: código HTTP + mensaje público"""
    status_code = 500
    message = ErrorTypes.conversion_failed

    def __init__(self, detail: str = None):
        # detail solo va al log, nunca al cliente
        self.detail = detail
        super().__init__(detail or self.message)


class Unauthorized(ServiceError):
    status_code = 401
    message = ErrorTypes.unauthorized


class InvalidFolder(ServiceError):
    status_code = 400
    message = ErrorTypes.invalid_folder


class NoFileUploaded(ServiceError):
    status_code = 400
    message = ErrorTypes.no_file_uploaded


class UploadTooLarge(ServiceError):
    status_code = 413
    message = ErrorTypes.upload_too_large


class DecodeFailed(ServiceError):
    status_code = 400
    message = ErrorTypes.decode_failed


class ConversionFailed(ServiceError):
    status_code = 500
    message = ErrorTypes.conversion_failed


class ClientDisconnected(ServiceError):
    status_code = 499
    message = ErrorTypes.client_disconnected


class ConfigurationFatal(Exception):
    """Configuración inválida al arrancar. El proceso no debe iniciar."""


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ServiceError)
    async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.detail or exc.message}")
        return JSONResponse({"error": exc.message}, status_code=exc.status_code)

    # Errores propios de Starlette (multipart inválido, demasiados archivos, 404...)
    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return JSONResponse({"error": detail}, status_code=exc.status_code, headers=exc.headers)
