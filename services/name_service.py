import re
import secrets

DEFAULT_BASE_NAME = "image"
MAX_BASE_LENGTH = 100

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9_.-]")
_DOT_RUNS = re.compile(r"\.{2,}")


class NameService:

    @staticmethod
    def make_safe_base_name(original_name: str = None) -> str:
        """
        Genera un nombre base seguro para el sistema de archivos a partir del
        nombre que envía el cliente. El sufijo aleatorio de 12 hex evita
        colisiones entre subidas con el mismo nombre.

        Ej: "Mis Vacaciones.JPG" -> "mis-vacaciones-3f9a0c1b2d4e"
        """
        name = (original_name or "").lower()
        name = _WHITESPACE.sub("-", name)
        name = _DISALLOWED.sub("", name)

        # Quitar la extensión final (".png" sin base queda vacío)
        if "." in name:
            name = name[:name.rindex(".")]

        # Sin "..", sin archivos ocultos
        name = _DOT_RUNS.sub(".", name).lstrip(".")
        name = name[:MAX_BASE_LENGTH] or DEFAULT_BASE_NAME

        suffix = secrets.token_hex(6)
        return f"{name}-{suffix}"
