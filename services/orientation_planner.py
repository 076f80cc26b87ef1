from domain.enums.orientation import ExifOrientation, Orientation
from domain.models import SizeProfiles, TranscodePlan


def classify(width: int, height: int) -> Orientation:
    """Vertical solo si alto > ancho; cuadrada cuenta como horizontal"""
    return Orientation.PORTRAIT if height > width else Orientation.LANDSCAPE


def plan_transcode(orientation: int, width: int, height: int, profiles: SizeProfiles) -> TranscodePlan:
    """
    Decide si hornear la rotación EXIF y qué caja máxima aplicar.

    - Tag 1: nunca se rota; se clasifica con los píxeles tal cual.
    - Tags 5-8 (intercambian ejes): solo se rota si los píxeles están en
      horizontal. Si ya son verticales, alguna herramienta previa ya los
      giró y rotar de nuevo los dejaría tumbados; se descarta el tag.
    - Tags 2-4 (sin intercambio de ejes): siempre se rota. Las dimensiones
      no cambian, así que se clasifica con las originales.

    La asimetría entre ambas familias es intencional.
    """
    tag = ExifOrientation.normalize(orientation)

    if tag in ExifOrientation.AXIS_SWAPPING:
        bake = width > height
        display = Orientation.PORTRAIT if bake else classify(width, height)
    elif tag in ExifOrientation.NON_SWAPPING:
        bake = True
        display = classify(width, height)
    else:
        bake = False
        display = classify(width, height)

    profile = profiles.for_orientation(display)
    return TranscodePlan(
        bake_rotation=bake,
        orientation=display,
        target_max_width=profile.max_width,
        target_max_height=profile.max_height,
        strip_orientation=True,
    )
