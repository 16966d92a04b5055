# app/application/use_cases/backup_store.py
import os
import json
import shutil
import logging
import tarfile
import tempfile

from app.domain.ports.file_storage import FileStorage
from app.domain.ports.nota_repository import NotaRepository
from app.domain.services.clock import Clock, utc_now

logger = logging.getLogger(__name__)


class BackupStoreUseCase:
    """
    Respaldo completo: un .tar.gz con `data/notas.json` (todas las notas) y la
    carpeta `uploads/` con los PDF, subido al almacenamiento en la nube.

    Es un respaldo "best effort": no se coordina con escrituras en curso.
    """

    def __init__(
        self,
        nota_repo: NotaRepository,
        file_storage: FileStorage,
        uploads_dir: str,
        system_name: str,
        clock: Clock = utc_now,
    ):
        self.nota_repo = nota_repo
        self.file_storage = file_storage
        self.uploads_dir = uploads_dir
        self.system_name = system_name
        self.clock = clock

    def archive_name(self) -> str:
        return f"backup-{self.system_name}-{self.clock().date().isoformat()}.tar.gz"

    def _build_archive(self, work_dir: str) -> str:
        notas = self.nota_repo.load_all()
        snapshot = [nota.model_dump(mode="json", by_alias=True) for nota in notas]

        archive_path = os.path.join(work_dir, self.archive_name())
        with tarfile.open(archive_path, "w:gz") as tar:
            data_path = os.path.join(work_dir, "notas.json")
            with open(data_path, "w", encoding="utf-8") as f:
                json.dump(snapshot, f, ensure_ascii=False, indent=2)
            tar.add(data_path, arcname="data/notas.json")

            if os.path.isdir(self.uploads_dir):
                tar.add(self.uploads_dir, arcname="uploads")
            else:
                logger.warning(f"No existe la carpeta de PDFs '{self.uploads_dir}'. Solo se respaldan los datos.")

        logger.info(f"Archivo de respaldo creado: {archive_path} ({len(notas)} notas).")
        return archive_path

    def execute(self) -> str:
        work_dir = tempfile.mkdtemp(prefix="cobranza-backup-")
        try:
            archive_path = self._build_archive(work_dir)
            url = self.file_storage.upload_backup(archive_path, self.system_name)
            logger.info(f"Respaldo subido: {url}")
            return url
        finally:
            shutil.rmtree(work_dir, ignore_errors=True)
