from pydantic import BaseModel, ConfigDict
from typing import Optional

from domain.enums.image_formats import OutputFormat
from domain.enums.orientation import Orientation

# Modelos inmutables: se crean por petición y no se modifican
model_config = ConfigDict(frozen=True)


class SizeProfile(BaseModel):
    model_config = model_config
    max_width: int
    max_height: int


class SizeProfiles(BaseModel):
    model_config = model_config
    portrait: SizeProfile
    landscape: SizeProfile

    def for_orientation(self, orientation: Orientation) -> SizeProfile:
        return self.portrait if orientation is Orientation.PORTRAIT else self.landscape


class ImageMetadata(BaseModel):
    model_config = model_config
    width: int
    height: int
    orientation: int = 1
    format: Optional[str] = None


class TranscodePlan(BaseModel):
    model_config = model_config
    bake_rotation: bool
    orientation: Orientation
    target_max_width: int
    target_max_height: int
    # Siempre se elimina el tag EXIF de orientación en la salida
    strip_orientation: bool = True


class EncodeOptions(BaseModel):
    model_config = model_config
    quality: int
    effort: int


class OutputArtifact(BaseModel):
    model_config = model_config
    format: OutputFormat
    data: bytes
    filename: str

    @property
    def media_type(self) -> str:
        return self.format.media_type


class RequestContext(BaseModel):
    """Contexto de una subida: se pasa explícitamente por cada etapa"""
    model_config = model_config
    tenant: str = ""
    folder: str = ""
    base_name: str
