# app/application/use_cases/register_payment.py
import logging

from app.domain.exceptions import InvalidRequestError, NotaNotFoundError
from app.domain.models.nota import NotaConCredito
from app.domain.ports.nota_repository import NotaRepository
from app.domain.services.clock import Clock, utc_now
from app.domain.services.credit_aging import apply_payment, validate_amount, with_credito

logger = logging.getLogger(__name__)


class RegisterPaymentUseCase:
    def __init__(self, nota_repo: NotaRepository, clock: Clock = utc_now):
        self.nota_repo = nota_repo
        self.clock = clock

    def execute(self, nota_id: str, monto) -> NotaConCredito:
        if not nota_id:
            raise InvalidRequestError("Datos inválidos")
        try:
            amount = validate_amount(monto)
        except InvalidRequestError:
            raise InvalidRequestError("Datos inválidos") from None

        nota = self.nota_repo.get(nota_id, for_update=True)
        if nota is None:
            raise NotaNotFoundError(nota_id)

        now = self.clock()
        updated = apply_payment(nota, amount, now)
        self.nota_repo.save(updated)
        logger.info(f"Abono de {amount:,.2f} a la nota {nota_id}; pagado={updated.pagado:,.2f}.")
        return with_credito(updated, now)
