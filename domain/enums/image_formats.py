from enum import Enum


class OutputFormat(Enum):
    """
    Formatos de salida soportados.
    - WEBP: con pérdida, rápido de codificar, soporte universal.
    - AVIF: mayor compresión a costa de más CPU.
    """

    WEBP = "webp"
    AVIF = "avif"

    @property
    def extension(self):
        """Devuelve la extensión del archivo (sin punto)."""
        return self.value

    @property
    def media_type(self):
        """Devuelve el content-type HTTP."""
        return f"image/{self.value}"

    @property
    def pil_format(self):
        """Devuelve el nombre de formato que entiende Pillow."""
        return self.value.upper()
