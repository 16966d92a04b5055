# app/application/use_cases/register_delivery.py
import logging

from app.domain.exceptions import InvalidRequestError, NotaNotFoundError
from app.domain.models.nota import NotaConCredito
from app.domain.ports.nota_repository import NotaRepository
from app.domain.services.clock import Clock, utc_now
from app.domain.services.credit_aging import mark_delivered, with_credito

logger = logging.getLogger(__name__)


class RegisterDeliveryUseCase:
    """Marca una nota como ENTREGADA: arranca el crédito de 15 días."""

    def __init__(self, nota_repo: NotaRepository, clock: Clock = utc_now):
        self.nota_repo = nota_repo
        self.clock = clock

    def execute(self, nota_id: str) -> NotaConCredito:
        if not nota_id:
            raise InvalidRequestError("Falta id")

        nota = self.nota_repo.get(nota_id, for_update=True)
        if nota is None:
            raise NotaNotFoundError(nota_id)

        now = self.clock()
        delivered = mark_delivered(nota, now)
        if delivered is not nota:
            self.nota_repo.save(delivered)
            logger.info(f"Nota {nota_id} entregada; vence {delivered.due_at.isoformat()}.")
        return with_credito(delivered, now)
