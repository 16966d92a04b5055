# app/application/use_cases/upload_nota.py
import logging
from dataclasses import dataclass
from datetime import tzinfo
from typing import Optional

from app.domain.exceptions import InvalidRequestError
from app.domain.models.nota import NotaConCredito
from app.domain.ports.document_storage import DocumentStorage
from app.domain.ports.nota_repository import NotaRepository
from app.domain.ports.text_extractor import DocumentTextExtractor
from app.domain.services.batch_key import BATCH_TZ, current_batch_key
from app.domain.services.clock import Clock, utc_now
from app.domain.services.credit_aging import with_credito
from app.domain.services.field_extractor import extract_cliente, extract_total
from app.domain.services.reconciler import DEFAULT_ORIGINAL_NAME, UploadAction, reconcile_upload

logger = logging.getLogger(__name__)


@dataclass
class UploadOutcome:
    action: UploadAction
    nota: Optional[NotaConCredito] = None
    # PDF guardado con nombre provisional; se publica después del commit
    staged_document: Optional[str] = None

    @property
    def duplicate(self) -> bool:
        return self.action == UploadAction.DUPLICATE


class UploadNotaUseCase:
    def __init__(
        self,
        nota_repo: NotaRepository,
        document_storage: DocumentStorage,
        text_extractor: DocumentTextExtractor,
        clock: Clock = utc_now,
        batch_tz: tzinfo = BATCH_TZ,
    ):
        self.nota_repo = nota_repo
        self.document_storage = document_storage
        self.text_extractor = text_extractor
        self.clock = clock
        self.batch_tz = batch_tz

    def execute(
        self,
        original_name: Optional[str],
        content: Optional[bytes],
        text: Optional[str] = None,
    ) -> UploadOutcome:
        """
        Sube una nota al lote de la semana actual: la crea, la sustituye
        (si aún no se entrega) o la rechaza como duplicada.

        El PDF queda con un nombre provisional en `staged_document`; quien
        abre la transacción llama a `publish` tras el commit o a `discard`
        si falla. `text` permite pasar el texto ya extraído del PDF.
        """
        if not content:
            raise InvalidRequestError("No se recibió PDF")

        original_name = original_name or DEFAULT_ORIGINAL_NAME
        now = self.clock()
        batch_key = current_batch_key(now, self.batch_tz)

        # Siempre se parsea: para sustituir hacen falta el cliente y total nuevos
        if text is None:
            text = self.text_extractor.extract_text(content) or ""
        cliente = extract_cliente(text)
        total = extract_total(text)
        logger.info(f"[{batch_key}] '{original_name}': cliente={cliente!r} total={total!r}")

        existing = self.nota_repo.find_in_batch(batch_key, original_name)
        decision = reconcile_upload(existing, batch_key, original_name, cliente, total, now)

        if decision.action == UploadAction.DUPLICATE:
            logger.info(f"[{batch_key}] '{original_name}' ya fue entregada (nota {decision.nota.id}). Duplicado.")
            return UploadOutcome(UploadAction.DUPLICATE)

        if decision.action == UploadAction.CREATE:
            self.nota_repo.add(decision.nota)
            logger.info(f"[{batch_key}] Nota nueva {decision.nota.id}.")
        else:
            self.nota_repo.save(decision.nota)
            logger.info(f"[{batch_key}] Nota {decision.nota.id} sustituida (pre-entrega).")

        staged = self.document_storage.stage(content)
        return UploadOutcome(decision.action, with_credito(decision.nota, now), staged)

    def publish(self, outcome: UploadOutcome) -> None:
        """Pone el PDF provisional en su lugar definitivo. Solo tras el commit."""
        if outcome.staged_document is None:
            return
        self.document_storage.publish(outcome.staged_document, outcome.nota.filename)
        outcome.staged_document = None

    def discard(self, outcome: Optional[UploadOutcome]) -> None:
        """Descarta el PDF provisional de una subida que no llegó a guardarse."""
        if outcome is None or outcome.staged_document is None:
            return
        self.document_storage.discard(outcome.staged_document)
        outcome.staged_document = None
