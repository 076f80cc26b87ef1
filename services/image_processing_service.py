import logging
from typing import Dict, List, Sequence

from PIL import Image

from domain.enums.image_formats import OutputFormat
from domain.models import EncodeOptions, ImageMetadata, OutputArtifact, SizeProfiles, TranscodePlan
from infrastructure.pillow_codec import PillowCodec
from services.orientation_planner import plan_transcode

logger = logging.getLogger(__name__)


class ImageProcessingService:
    """
    Orienta, redimensiona y codifica una imagen en cada formato pedido.

    Todas las operaciones son síncronas y de CPU; el llamador decide en qué
    hilo se ejecutan.
    """

    def __init__(self, codec: PillowCodec, profiles: SizeProfiles, encode_options: Dict[OutputFormat, EncodeOptions]):
        self.codec = codec
        self.profiles = profiles
        self.encode_options = encode_options

    def plan(self, metadata: ImageMetadata) -> TranscodePlan:
        return plan_transcode(metadata.orientation, metadata.width, metadata.height, self.profiles)

    def prepare_working_image(self, img: Image.Image, plan: TranscodePlan) -> Image.Image:
        """Imagen de trabajo ya rotada, sin tag de orientación y redimensionada"""
        img = self.codec.load(img)
        if plan.bake_rotation:
            img = self.codec.apply_rotation(img)
        img = self.codec.normalize_mode(img)
        working = self.codec.resize(img, plan.target_max_width, plan.target_max_height)
        if plan.strip_orientation:
            working = self.codec.strip_orientation(working)
        return working

    def decode_and_prepare(self, image_bytes: bytes) -> Image.Image:
        metadata, img = self.codec.decode(image_bytes)
        plan = self.plan(metadata)
        logger.info(
            f"Plan {metadata.width}x{metadata.height} tag={metadata.orientation}: "
            f"bake={plan.bake_rotation} {plan.orientation.value} "
            f"box={plan.target_max_width}x{plan.target_max_height}"
        )
        try:
            return self.prepare_working_image(img, plan)
        finally:
            img.close()

    def encode_one(self, working: Image.Image, output_format: OutputFormat, base_name: str) -> OutputArtifact:
        # Cada formato trabaja sobre su propia copia
        clone = working.copy()
        try:
            data = self.codec.encode(clone, output_format, self.encode_options[output_format])
        finally:
            clone.close()
        return OutputArtifact(
            format=output_format,
            data=data,
            filename=f"{base_name}.{output_format.extension}",
        )

    def encode_all(self, working: Image.Image, formats: Sequence[OutputFormat], base_name: str) -> List[OutputArtifact]:
        return [self.encode_one(working, fmt, base_name) for fmt in formats]

    def transcode(self, image_bytes: bytes, base_name: str, formats: Sequence[OutputFormat]) -> List[OutputArtifact]:
        """Pipeline completo en un solo paso"""
        working = self.decode_and_prepare(image_bytes)
        try:
            return self.encode_all(working, formats, base_name)
        finally:
            working.close()
