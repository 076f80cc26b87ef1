from pydantic import BaseModel, Field, ValidationError, field_validator
from dotenv import load_dotenv
import os

from error.error_handling import ConfigurationFatal

load_dotenv()  # Carga las variables de entorno desde .env

OUTPUT_MODES = ("disk", "multipart", "zip")
SUPPORTED_FORMATS = ("webp", "avif")


class Settings(BaseModel):
    OUTPUT_DIR: str = "/data/images"
    PUBLIC_BASE_URL: str = "http://localhost:3000/images"
    OUTPUT_MODE: str = "disk"
    OUTPUT_FORMATS: str = "webp,avif"

    # JSON: {"api-key": "tenant"} o {"api-key": {"tenant": "tenant"}}
    TENANT_KEYS: str = ""
    ADMIN_TOKEN: str = ""

    WEBP_QUALITY: int = Field(78, ge=1, le=100)
    WEBP_EFFORT: int = Field(6, ge=0, le=6)
    AVIF_QUALITY: int = Field(40, ge=0, le=100)
    AVIF_EFFORT: int = Field(8, ge=0, le=9)

    PORTRAIT_MAX_WIDTH: int = Field(2000, gt=0)
    PORTRAIT_MAX_HEIGHT: int = Field(3000, gt=0)
    LANDSCAPE_MAX_WIDTH: int = Field(3000, gt=0)
    LANDSCAPE_MAX_HEIGHT: int = Field(2000, gt=0)

    MAX_UPLOAD_BYTES: int = Field(25 * 1024 * 1024, gt=0)
    MAX_CONCURRENT_CONVERSIONS: int = Field(2, gt=0)

    PORT: int = 3000
    LOG_LEVEL: str = "INFO"

    @field_validator("PUBLIC_BASE_URL")
    @classmethod
    def _trim_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @field_validator("OUTPUT_MODE")
    @classmethod
    def _check_mode(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in OUTPUT_MODES:
            raise ValueError(f"OUTPUT_MODE must be one of {', '.join(OUTPUT_MODES)}")
        return value

    @field_validator("OUTPUT_FORMATS")
    @classmethod
    def _check_formats(cls, value: str) -> str:
        formats = [f.strip().lower() for f in value.split(",") if f.strip()]
        if not formats:
            raise ValueError("OUTPUT_FORMATS is empty")
        for fmt in formats:
            if fmt not in SUPPORTED_FORMATS:
                raise ValueError(f"Unsupported output format: {fmt}")
        return ",".join(dict.fromkeys(formats))

    @property
    def output_formats(self) -> list:
        return self.OUTPUT_FORMATS.split(",")

    @property
    def multi_tenant(self) -> bool:
        return bool(self.TENANT_KEYS.strip())


def load_settings(env: dict = None) -> Settings:
    """Construye Settings desde el entorno. Cualquier valor inválido es fatal."""
    env = os.environ if env is None else env
    values = {name: env[name] for name in Settings.model_fields if env.get(name) not in (None, "")}
    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationFatal(f"Invalid configuration: {e}") from e


settings = load_settings()
