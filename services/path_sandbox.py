import logging
import re
from pathlib import Path

from error.error_handling import InvalidFolder

logger = logging.getLogger(__name__)

_ALLOWED_FOLDER = re.compile(r"^[A-Za-z0-9/_-]+$")
_ALLOWED_TENANT = re.compile(r"^[A-Za-z0-9_-]+$")


class PathSandbox:
    """
    Confina toda escritura/lectura al directorio raíz configurado.

    Layout: <root>/<tenant?>/<folder?>/
    En despliegues de un solo tenant el segmento de tenant se omite.
    """

    def __init__(self, root: str, multi_tenant: bool = False):
        self.root = Path(root)
        self.multi_tenant = multi_tenant

    @staticmethod
    def sanitize_folder(folder: str = None) -> str:
        """Normaliza la carpeta enviada por el cliente o lanza InvalidFolder"""
        raw = (folder or "").strip()
        if not raw:
            return ""

        cleaned = raw.replace("\\", "/").strip("/")
        cleaned = re.sub(r"/{2,}", "/", cleaned)
        if not cleaned:
            return ""

        if ".." in cleaned or cleaned.startswith(".") or "\0" in cleaned:
            raise InvalidFolder(f"Traversal attempt in folder {folder!r}")

        # Solo a-z A-Z 0-9 _ - /
        if not _ALLOWED_FOLDER.match(cleaned):
            raise InvalidFolder(f"Disallowed characters in folder {folder!r}")

        return cleaned

    def tenant_root(self, tenant: str = "") -> Path:
        root = self.root.resolve()
        if not self.multi_tenant:
            return root
        if not tenant or not _ALLOWED_TENANT.match(tenant):
            raise InvalidFolder(f"Invalid tenant segment {tenant!r}")
        return root / tenant

    def resolve_output_dir(self, tenant: str = "", folder: str = None) -> Path:
        """
        Devuelve el directorio absoluto de salida para tenant/carpeta.
        La verificación final se hace sobre rutas canónicas (symlinks
        resueltos) y por segmentos, no por prefijo de texto.
        """
        normalized = self.sanitize_folder(folder)
        root = self.root.resolve()
        base = self.tenant_root(tenant)
        candidate = base / normalized if normalized else base

        resolved_base = base.resolve()
        resolved_candidate = candidate.resolve()

        if resolved_base != root and not resolved_base.is_relative_to(root):
            raise InvalidFolder(f"Tenant root {resolved_base} escapes {root}")
        if resolved_candidate != resolved_base and not resolved_candidate.is_relative_to(resolved_base):
            raise InvalidFolder(f"Folder {folder!r} resolves outside {resolved_base}")

        return resolved_candidate

    def relative_path(self, path: Path) -> str:
        """Ruta relativa a la raíz, con separador '/'"""
        return Path(path).resolve().relative_to(self.root.resolve()).as_posix()
