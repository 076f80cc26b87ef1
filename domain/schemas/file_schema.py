from pydantic import BaseModel
from typing import Dict, List, Optional


class ImageUploadRequest(BaseModel):
    image_bytes: bytes
    desired_filename: Optional[str] = None  # Ej: "Vacaciones 2024.jpg"
    folder_name: Optional[str] = None  # Ej: "products/shoes"
    tenant: str = ""  # Resuelto en el servidor, nunca lo envía el cliente


class ImageUploadResponse(BaseModel):
    ok: bool = True
    folder: str
    files: Dict[str, str]  # formato -> URL pública


class FileListResponse(BaseModel):
    files: List[str]
