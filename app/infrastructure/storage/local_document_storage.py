# app/infrastructure/storage/local_document_storage.py
import os
import logging
import tempfile
from typing import Optional

from app.domain.ports.document_storage import DocumentStorage

logger = logging.getLogger(__name__)

STAGING_PREFIX = ".tmp-"


class LocalDocumentStorage(DocumentStorage):
    """Guarda los PDF de las notas en una carpeta local (o el disco persistente)."""

    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def _path(self, filename: str) -> str:
        # Los nombres ya vienen saneados; aun así no se permite salir de la carpeta
        name = os.path.basename(filename)
        if not name or name in (".", ".."):
            raise ValueError(f"Nombre de archivo inválido: {filename}")
        return os.path.join(self.base_dir, name)

    def stage(self, content: bytes) -> str:
        os.makedirs(self.base_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.base_dir, prefix=STAGING_PREFIX)
        try:
            with os.fdopen(fd, "wb") as buffer:
                buffer.write(content)
        except Exception:
            os.remove(tmp_path)
            raise
        return os.path.basename(tmp_path)

    def publish(self, staged: str, filename: str) -> None:
        path = self._path(filename)
        # os.replace es atómico dentro del mismo sistema de archivos
        os.replace(self._path(staged), path)
        logger.info(f"Documento guardado: {path}")

    def discard(self, staged: str) -> None:
        path = self._path(staged)
        if os.path.exists(path):
            os.remove(path)
            logger.info(f"Documento provisional descartado: {path}")

    def read(self, filename: str) -> Optional[bytes]:
        path = self._path(filename)
        if not os.path.exists(path):
            return None
        with open(path, "rb") as f:
            return f.read()
