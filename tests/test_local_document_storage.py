"""PDF de notas en disco local."""
import os

import pytest

from app.infrastructure.storage.local_document_storage import STAGING_PREFIX, LocalDocumentStorage


@pytest.fixture
def local_storage(tmp_path):
    return LocalDocumentStorage(str(tmp_path / "uploads"))


def test_publicar_sustituye_el_documento(local_storage):
    local_storage.publish(local_storage.stage(b"%PDF-1"), "a.pdf")

    staged = local_storage.stage(b"%PDF-2")
    assert staged.startswith(STAGING_PREFIX)
    assert local_storage.read("a.pdf") == b"%PDF-1"

    local_storage.publish(staged, "a.pdf")

    assert local_storage.read("a.pdf") == b"%PDF-2"
    assert os.listdir(local_storage.base_dir) == ["a.pdf"]


def test_descartar_borra_el_provisional(local_storage):
    local_storage.publish(local_storage.stage(b"%PDF-1"), "a.pdf")
    staged = local_storage.stage(b"%PDF-2")

    local_storage.discard(staged)
    local_storage.discard(staged)

    assert local_storage.read("a.pdf") == b"%PDF-1"
    assert os.listdir(local_storage.base_dir) == ["a.pdf"]


def test_leer_inexistente(local_storage):
    assert local_storage.read("no-existe.pdf") is None


def test_no_sale_de_la_carpeta(local_storage, tmp_path):
    local_storage.publish(local_storage.stage(b"%PDF"), "../fuera.pdf")

    assert not (tmp_path / "fuera.pdf").exists()
    assert local_storage.read("fuera.pdf") == b"%PDF"
