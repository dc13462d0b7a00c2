import logging
import shutil
from pathlib import Path
from typing import List, Union

logger = logging.getLogger(__name__)


class UploadError(Exception):
    pass


class UploadService:
    """Guarda archivos por nombre bajo <root>/<prefix>/, sobrescribiendo."""

    def __init__(self, root: Union[str, Path], prefix: str = "inventarios"):
        self.root = Path(root)
        self.prefix = prefix.strip("/")

    @property
    def target_dir(self) -> Path:
        return self.root / self.prefix if self.prefix else self.root

    def _destination(self, name: str) -> Path:
        base = Path(name).name
        if not base:
            raise UploadError("Nombre de archivo inválido.")
        return self.target_dir / base

    def upload(self, source: Union[str, Path]) -> Path:
        src = Path(source)
        if not src.is_file():
            raise UploadError(f"No existe el archivo: {src}")
        dest = self._destination(src.name)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(src, dest)
        except OSError as e:
            raise UploadError(f"Error al subir archivo: {e}") from e
        logger.info("Archivo subido: %s", dest)
        return dest

    def upload_bytes(self, name: str, data: bytes) -> Path:
        dest = self._destination(name)
        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
            dest.write_bytes(data)
        except OSError as e:
            raise UploadError(f"Error al subir archivo: {e}") from e
        logger.info("Archivo subido: %s", dest)
        return dest

    def list_uploads(self) -> List[str]:
        if not self.target_dir.is_dir():
            return []
        return sorted(p.name for p in self.target_dir.iterdir() if p.is_file())
