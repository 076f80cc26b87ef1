import io
import logging
from typing import Tuple

from PIL import ExifTags, Image, ImageOps, UnidentifiedImageError

from domain.enums.image_formats import OutputFormat
from domain.models import EncodeOptions, ImageMetadata
from error.error_handling import ConversionFailed, DecodeFailed

logger = logging.getLogger(__name__)

# libavif: speed 0 (lento, mejor compresión) .. 9 (rápido)
AVIF_MAX_EFFORT = 9


class PillowCodec:
    """Codificación/decodificación de imágenes sobre Pillow"""

    def decode(self, image_bytes: bytes) -> Tuple[ImageMetadata, Image.Image]:
        """Abre la imagen y lee sus metadatos. Los píxeles se cargan después."""
        try:
            img = Image.open(io.BytesIO(image_bytes))
            width, height = img.size
            orientation = img.getexif().get(ExifTags.Base.Orientation, 1)
        except (UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise DecodeFailed(str(e)) from e
        except (OSError, ValueError, SyntaxError) as e:
            raise DecodeFailed(f"Cannot read image metadata: {e}") from e

        metadata = ImageMetadata(
            width=width,
            height=height,
            orientation=orientation if isinstance(orientation, int) else 1,
            format=img.format,
        )
        return metadata, img

    def load(self, img: Image.Image) -> Image.Image:
        try:
            img.load()
        except (OSError, ValueError, SyntaxError) as e:
            raise ConversionFailed(f"Cannot decode pixel data: {e}") from e
        return img

    def apply_rotation(self, img: Image.Image) -> Image.Image:
        """Aplica la orientación EXIF a los píxeles (devuelve copia)"""
        try:
            return ImageOps.exif_transpose(img)
        except (OSError, ValueError) as e:
            raise ConversionFailed(f"Cannot apply orientation: {e}") from e

    def strip_orientation(self, img: Image.Image) -> Image.Image:
        """Elimina el tag de orientación y el resto de metadatos embebidos"""
        img.info.pop("exif", None)
        img.info.pop("xmp", None)
        img.info.pop("XML:com.adobe.xmp", None)
        exif = img.getexif()
        if ExifTags.Base.Orientation in exif:
            del exif[ExifTags.Base.Orientation]
        return img

    def normalize_mode(self, img: Image.Image) -> Image.Image:
        # WebP y AVIF solo aceptan RGB/RGBA
        if img.mode in ("RGB", "RGBA"):
            return img
        has_alpha = img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info)
        converted = img.convert("RGBA" if has_alpha else "RGB")
        converted.info = dict(img.info)
        return converted

    def resize(self, img: Image.Image, max_width: int, max_height: int) -> Image.Image:
        """Reduce para caber en la caja, manteniendo proporción y sin ampliar"""
        resized = img.copy()
        resized.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
        return resized

    def encode(self, img: Image.Image, output_format: OutputFormat, options: EncodeOptions) -> bytes:
        buffer = io.BytesIO()
        try:
            if output_format is OutputFormat.WEBP:
                params = {"method": options.effort}
            elif output_format is OutputFormat.AVIF:
                params = {"speed": AVIF_MAX_EFFORT - options.effort}
            else:
                raise ConversionFailed(f"Unsupported output: {output_format}")
            img.save(buffer, format=output_format.pil_format, quality=options.quality, **params)
        except (OSError, ValueError, KeyError) as e:
            raise ConversionFailed(f"{output_format.value} encode failed: {e}") from e
        return buffer.getvalue()
