# app/domain/ports/file_storage.py
from abc import ABC, abstractmethod


class FileStorage(ABC):
    """Puerto para el almacenamiento de respaldos en la nube."""
    @abstractmethod
    def upload_backup(self, archive_path: str, system_name: str) -> str:
        """
        Sube el archivo comprimido a la carpeta del sistema (la crea si no existe).
        Retorna la URL del archivo subido.
        """
        pass
