from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from api.dependencies import enforce_upload_limit, get_tenant, require_admin
from domain.schemas.file_schema import FileListResponse
from error.error_handling import InvalidFolder

router = APIRouter()

IMAGE_FIELD = "image"


@router.get("/health", response_class=PlainTextResponse)
async def health():
    return "ok"


@router.post("/upload")
async def upload_image(
        request: Request,
        tenant: str = Depends(get_tenant),
        _: None = Depends(enforce_upload_limit),
):
    """
    Sube una imagen y la convierte a cada formato configurado (webp, avif).

    Campos del formulario:
    - image: archivo (obligatorio, solo uno)
    - name: nombre deseado (opcional, por defecto el nombre del archivo)
    - folder: subcarpeta destino (opcional, solo a-z A-Z 0-9 _ - /)
    """
    file_service = request.app.state.file_service

    async with request.form(max_files=1) as form:
        file = form.get(IMAGE_FIELD)
        if isinstance(file, str):
            file = None
        name = form.get("name")
        folder = form.get("folder")

        return await file_service.process_upload(
            file,
            tenant,
            desired_filename=name if isinstance(name, str) else None,
            folder_name=folder if isinstance(folder, str) else None,
            is_disconnected=request.is_disconnected,
        )


@router.get("/admin/images", response_model=FileListResponse, dependencies=[Depends(require_admin)])
async def list_images(
        request: Request,
        tenant: str = Query(None, description="Tenant a listar (solo multi-tenant)"),
):
    """Lista recursivamente los archivos publicados, como rutas relativas"""
    state = request.app.state
    sandbox = state.sandbox

    if tenant:
        if not sandbox.multi_tenant or not state.tenant_resolver.is_known_tenant(tenant):
            raise InvalidFolder(f"Unknown tenant {tenant!r}")
        directory = sandbox.tenant_root(tenant)
    else:
        directory = sandbox.root.resolve()

    return FileListResponse(files=state.storage.list_files(directory))
