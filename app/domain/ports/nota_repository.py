# app/domain/ports/nota_repository.py
from abc import ABC, abstractmethod
from typing import List, Optional

from app.domain.models.nota import Nota


class NotaRepository(ABC):
    """
    Contrato de persistencia de notas. Cada instancia vive dentro de una
    unidad de trabajo: los cambios se confirman (commit) al cerrarla.
    """

    @abstractmethod
    def load_all(self) -> List[Nota]:
        """Todas las notas, en orden de alta."""
        pass

    @abstractmethod
    def get(self, nota_id: str, for_update: bool = False) -> Optional[Nota]:
        """Busca una nota por su ID. `for_update` bloquea la fila si el motor lo soporta."""
        pass

    @abstractmethod
    def find_in_batch(self, batch_key: str, original_name: str) -> Optional[Nota]:
        """Nota del mismo lote con el mismo nombre de archivo (sin distinguir mayúsculas)."""
        pass

    @abstractmethod
    def add(self, nota: Nota) -> Nota:
        pass

    @abstractmethod
    def save(self, nota: Nota) -> Nota:
        """Sobrescribe los campos mutables de una nota existente."""
        pass
