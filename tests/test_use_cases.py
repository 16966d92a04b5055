"""Casos de uso: subir, entregar y abonar."""
from datetime import timedelta

import pytest

from app.application.use_cases.register_delivery import RegisterDeliveryUseCase
from app.application.use_cases.register_payment import RegisterPaymentUseCase
from app.application.use_cases.upload_nota import UploadNotaUseCase
from app.domain.exceptions import InvalidRequestError, NotaNotFoundError
from app.domain.models.nota import CreditStatus
from app.domain.services.reconciler import UploadAction

from conftest import FakeTextExtractor


@pytest.fixture
def upload(repo, storage, extractor, clock):
    return UploadNotaUseCase(repo, storage, extractor, clock)


def _subir(upload, name, content):
    outcome = upload.execute(name, content)
    upload.publish(outcome)
    return outcome


def test_alta_extrae_campos_y_guarda_pdf(upload, repo, storage):
    outcome = _subir(upload, "Nota 1.pdf", b"%PDF-1")

    assert outcome.action == UploadAction.CREATE
    nota = outcome.nota
    assert nota.batch_key == "2026-10-12"
    assert nota.cliente == "Abarrotes La Esperanza"
    assert nota.total == 116.0
    assert nota.status_credito == CreditStatus.PRE_ENTREGA
    assert nota.saldo == 116.0
    assert storage.files[nota.filename] == b"%PDF-1"
    assert repo.get(nota.id) is not None


def test_sin_nombre_usa_nota_pdf(upload):
    assert upload.execute(None, b"%PDF").nota.original_name == "nota.pdf"


def test_sin_contenido(upload):
    with pytest.raises(InvalidRequestError):
        upload.execute("vacia.pdf", b"")


def test_texto_sin_datos_deja_campos_vacios(repo, storage, clock):
    use_case = UploadNotaUseCase(repo, storage, FakeTextExtractor("nada útil"), clock)
    nota = use_case.execute("x.pdf", b"%PDF").nota
    assert nota.cliente is None
    assert nota.total is None
    assert nota.saldo is None


def test_resubir_antes_de_entregar_sustituye(upload, repo, storage, extractor, clock):
    original = _subir(upload, "Nota 1.pdf", b"%PDF-1").nota
    RegisterPaymentUseCase(repo, clock).execute(original.id, 16.0)

    clock.advance(hours=3)
    extractor.text = "Cliente: Otro Cliente\nTOTAL: 300.00"
    outcome = _subir(upload, "NOTA 1.PDF", b"%PDF-2")

    assert outcome.action == UploadAction.SUBSTITUTE
    nota = outcome.nota
    assert nota.id == original.id
    assert nota.pagado == 16.0
    assert nota.filename == original.filename
    assert (nota.cliente, nota.total) == ("Otro Cliente", 300.0)
    assert nota.uploaded_at == original.uploaded_at + timedelta(hours=3)
    assert storage.files[original.filename] == b"%PDF-2"
    assert len(repo.load_all()) == 1


def test_resubir_despues_de_entregar_es_duplicado(upload, repo, storage, extractor, clock):
    original = _subir(upload, "Nota 1.pdf", b"%PDF-1").nota
    RegisterDeliveryUseCase(repo, clock).execute(original.id)
    guardada = repo.get(original.id)

    extractor.text = "Cliente: Otro Cliente\nTOTAL: 300.00"
    outcome = upload.execute("Nota 1.pdf", b"%PDF-2")

    assert outcome.duplicate
    assert outcome.nota is None
    assert repo.get(original.id) == guardada
    assert storage.files[original.filename] == b"%PDF-1"


def test_mismo_nombre_otra_semana_es_nota_nueva(upload, repo, clock):
    primera = upload.execute("Nota 1.pdf", b"%PDF-1").nota
    clock.advance(days=7)
    segunda = upload.execute("Nota 1.pdf", b"%PDF-1").nota

    assert segunda.id != primera.id
    assert segunda.batch_key == "2026-10-19"
    assert len(repo.load_all()) == 2


def test_entrega_inicia_credito_y_es_idempotente(upload, repo, clock):
    nota = upload.execute("Nota 1.pdf", b"%PDF").nota
    deliver = RegisterDeliveryUseCase(repo, clock)

    entregada = deliver.execute(nota.id)
    assert entregada.delivered_at == clock.now
    assert entregada.due_at == clock.now + timedelta(days=15)
    assert entregada.status_credito == CreditStatus.EN_PLAZO

    clock.advance(days=2)
    otra_vez = deliver.execute(nota.id)
    assert otra_vez.delivered_at == entregada.delivered_at
    assert otra_vez.due_at == entregada.due_at


def test_entrega_errores(repo, clock):
    deliver = RegisterDeliveryUseCase(repo, clock)
    with pytest.raises(InvalidRequestError):
        deliver.execute("")
    with pytest.raises(NotaNotFoundError):
        deliver.execute("no-existe")


def test_pago_valida_antes_de_buscar(repo, clock):
    pay = RegisterPaymentUseCase(repo, clock)
    with pytest.raises(InvalidRequestError):
        pay.execute("no-existe", 0)
    with pytest.raises(InvalidRequestError):
        pay.execute(None, 10)
    with pytest.raises(NotaNotFoundError):
        pay.execute("no-existe", 10)


def test_pago_marca_primer_pago_solo_despues_de_entregar(upload, repo, clock):
    nota = upload.execute("Nota 1.pdf", b"%PDF").nota
    pay = RegisterPaymentUseCase(repo, clock)

    antes = pay.execute(nota.id, 10)
    assert antes.first_payment_at is None

    RegisterDeliveryUseCase(repo, clock).execute(nota.id)
    clock.advance(days=1)
    despues = pay.execute(nota.id, 106)

    assert despues.pagado == 116.0
    assert despues.first_payment_at == clock.now
    assert despues.status_credito == CreditStatus.LIQUIDADO


def test_sustitucion_no_toca_el_pdf_hasta_publicar(upload, storage, extractor):
    original = _subir(upload, "Nota 1.pdf", b"%PDF-1").nota
    extractor.text = "TOTAL: 300.00"

    outcome = upload.execute("Nota 1.pdf", b"%PDF-2")

    assert outcome.staged_document is not None
    assert storage.files[original.filename] == b"%PDF-1"
    upload.publish(outcome)
    assert storage.files[original.filename] == b"%PDF-2"
    assert outcome.staged_document is None
    assert storage.staged == {}


def test_descartar_conserva_el_pdf_anterior(upload, storage, extractor):
    original = _subir(upload, "Nota 1.pdf", b"%PDF-1").nota
    extractor.text = "TOTAL: 300.00"

    outcome = upload.execute("Nota 1.pdf", b"%PDF-2")
    upload.discard(outcome)

    assert storage.files[original.filename] == b"%PDF-1"
    assert storage.staged == {}


def test_texto_ya_extraido_no_vuelve_a_leer_el_pdf(repo, storage, clock, mocker):
    extractor = FakeTextExtractor("TOTAL: 999.00")
    spy = mocker.spy(extractor, "extract_text")
    use_case = UploadNotaUseCase(repo, storage, extractor, clock)

    nota = use_case.execute("x.pdf", b"%PDF", text="CLIENTE: Ferretería Norte\nTOTAL: 50.00").nota

    assert (nota.cliente, nota.total) == ("Ferretería Norte", 50.0)
    spy.assert_not_called()
