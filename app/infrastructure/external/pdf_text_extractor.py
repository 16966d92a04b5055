# app/infrastructure/external/pdf_text_extractor.py
import io
import pdfplumber

from app.domain.ports.text_extractor import DocumentTextExtractor


class PdfPlumberTextExtractor(DocumentTextExtractor):
    """Texto de todas las páginas del PDF, una página tras otra."""

    def extract_text(self, content: bytes) -> str:
        pages_text = []
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            for page in pdf.pages:
                pages_text.append(page.extract_text() or "")
        return "\n".join(pages_text)
