import logging
import os
import tempfile
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


class LocalStorageClient:
    """Escritura y listado de archivos en el disco local"""

    def ensure_dir(self, path: Path) -> Path:
        os.makedirs(path, exist_ok=True)
        return Path(path)

    def write_file(self, path: Path, content: bytes) -> Path:
        """
        Escribe el archivo de forma atómica: primero a un temporal en el mismo
        directorio y luego rename, para no servir nunca un archivo a medias.
        """
        path = Path(path)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=path.suffix)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
            os.chmod(tmp_path, 0o644)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Error escribiendo {path}: {str(e)}")
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        return path

    def list_files(self, path: Path) -> List[str]:
        """Lista recursivamente los archivos bajo path como rutas relativas ('a/b.webp')"""
        path = Path(path)
        if not path.is_dir():
            return []

        def walk(directory: Path, prefix: str) -> List[str]:
            files = []
            for entry in sorted(os.scandir(directory), key=lambda e: e.name):
                if entry.name.startswith(".tmp-"):
                    continue
                if entry.is_dir(follow_symlinks=False):
                    files.extend(walk(Path(entry.path), f"{prefix}{entry.name}/"))
                elif entry.is_file(follow_symlinks=False):
                    files.append(f"{prefix}{entry.name}")
            return files

        return walk(path, "")
