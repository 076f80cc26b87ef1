from fastapi import Depends, Header, Request

from error.error_handling import UploadTooLarge
from services.tenant_service import TenantResolver

# Margen para cabeceras multipart y campos de texto del formulario
FORM_OVERHEAD_BYTES = 64 * 1024


def get_resolver(request: Request) -> TenantResolver:
    return request.app.state.tenant_resolver


def get_tenant(
    x_api_key: str = Header(default=None, alias="x-api-key"),
    x_admin_token: str = Header(default=None, alias="x-admin-token"),
    resolver: TenantResolver = Depends(get_resolver),
) -> str:
    """Resuelve el tenant de la petición o lanza Unauthorized"""
    return resolver.resolve_tenant(api_key=x_api_key, admin_token=x_admin_token)


def require_admin(
    x_admin_token: str = Header(default=None, alias="x-admin-token"),
    resolver: TenantResolver = Depends(get_resolver),
) -> None:
    resolver.require_admin(x_admin_token)


def enforce_upload_limit(request: Request) -> None:
    """Rechaza por Content-Length antes de leer el cuerpo"""
    limit = request.app.state.settings.MAX_UPLOAD_BYTES + FORM_OVERHEAD_BYTES
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit() and int(content_length) > limit:
        raise UploadTooLarge(f"Content-Length {content_length} exceeds {limit}")
