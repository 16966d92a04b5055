# app/domain/ports/document_storage.py
from abc import ABC, abstractmethod
from typing import Optional


class DocumentStorage(ABC):
    """
    Puerto para guardar el PDF de cada nota (un archivo por nota).

    La escritura es en dos pasos: `stage` deja el contenido bajo un nombre
    provisional y `publish` lo pone en su lugar. Así el documento definitivo
    solo cambia cuando el registro ya quedó guardado.
    """

    @abstractmethod
    def stage(self, content: bytes) -> str:
        """Guarda `content` con un nombre provisional y devuelve ese nombre."""
        pass

    @abstractmethod
    def publish(self, staged: str, filename: str) -> None:
        """Mueve el documento provisional `staged` a `filename`, sustituyendo el anterior."""
        pass

    @abstractmethod
    def discard(self, staged: str) -> None:
        """Borra un documento provisional que ya no se va a publicar."""
        pass

    @abstractmethod
    def read(self, filename: str) -> Optional[bytes]:
        """Contenido del documento, o None si no existe."""
        pass
