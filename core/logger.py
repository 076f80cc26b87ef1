import logging


def configure_logging(level: str = "INFO") -> None:
    """Configura el logger raíz del servicio"""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
