from enum import Enum


class Orientation(Enum):
    """
    Clasificación de la imagen ya orientada para mostrar.
    Cuadrada cuenta como horizontal: vertical exige alto > ancho.
    """
    PORTRAIT = "portrait"
    LANDSCAPE = "landscape"


class ExifOrientation:
    """Valores del tag EXIF Orientation (0x0112)"""
    NORMAL = 1
    MIRROR_HORIZONTAL = 2
    ROTATE_180 = 3
    MIRROR_VERTICAL = 4
    TRANSPOSE = 5
    ROTATE_90 = 6
    TRANSVERSE = 7
    ROTATE_270 = 8

    # Intercambian ancho y alto al corregirse
    AXIS_SWAPPING = frozenset({5, 6, 7, 8})
    # Corrigen sin intercambiar ejes (espejo y familia 180°)
    NON_SWAPPING = frozenset({2, 3, 4})

    @staticmethod
    def normalize(value) -> int:
        """Tags ausentes o fuera de rango se tratan como 1"""
        try:
            value = int(value)
        except (TypeError, ValueError):
            return ExifOrientation.NORMAL
        return value if 1 <= value <= 8 else ExifOrientation.NORMAL
