# app/domain/ports/text_extractor.py
from abc import ABC, abstractmethod


class DocumentTextExtractor(ABC):
    """Puerto para obtener el texto plano de un documento subido."""

    @abstractmethod
    def extract_text(self, content: bytes) -> str:
        pass
