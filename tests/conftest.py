"""Fixtures pytest: SQLite en memoria, almacenamiento y extractor falsos, reloj fijo."""
import itertools
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.domain.models.nota import Nota
from app.domain.ports.document_storage import DocumentStorage
from app.domain.ports.text_extractor import DocumentTextExtractor
from app.infrastructure.api.routers import notas_router
from app.infrastructure.persistence import models  # noqa: F401
from app.infrastructure.persistence.database import Base
from app.infrastructure.persistence.nota_repository_adapter import SQLAlchemyNotaRepository
from main import app

# Miércoles 14/oct/2026 12:00 en Ciudad de México (UTC-6) -> lote 2026-10-12
NOW = datetime(2026, 10, 14, 18, 0, tzinfo=timezone.utc)


class InMemoryDocumentStorage(DocumentStorage):
    def __init__(self):
        self.files = {}
        self.staged = {}
        self._counter = itertools.count(1)

    def stage(self, content):
        staged = f".tmp-{next(self._counter)}"
        self.staged[staged] = content
        return staged

    def publish(self, staged, filename):
        self.files[filename] = self.staged.pop(staged)

    def discard(self, staged):
        self.staged.pop(staged, None)

    def read(self, filename):
        return self.files.get(filename)


class FakeTextExtractor(DocumentTextExtractor):
    """Devuelve siempre el texto configurado, sin leer el PDF."""

    def __init__(self, text=""):
        self.text = text

    def extract_text(self, content):
        return self.text


class FrozenClock:
    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def session_factory():
    """Sesiones sobre una base SQLite en memoria compartida entre hilos."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False)
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def repo(db_session):
    return SQLAlchemyNotaRepository(db_session)


@pytest.fixture
def clock():
    return FrozenClock()


@pytest.fixture
def storage():
    return InMemoryDocumentStorage()


@pytest.fixture
def extractor():
    return FakeTextExtractor("CLIENTE: Abarrotes La Esperanza\nSUBTOTAL: $100.00\nTOTAL A PAGAR: $116.00")


@pytest.fixture
def nota_factory():
    counter = {"n": 0}

    def make(**overrides):
        counter["n"] += 1
        fields = dict(
            id=f"nota-{counter['n']}",
            batch_key="2026-10-12",
            original_name=f"nota-{counter['n']}.pdf",
            filename=f"2026-10-12__nota-{counter['n']}__nota-{counter['n']}.pdf",
            cliente="Cliente de prueba",
            total=100.0,
            pagado=0.0,
            uploaded_at=NOW,
        )
        fields.update(overrides)
        return Nota(**fields)

    return make


@pytest.fixture
def client(session_factory, storage, extractor, clock):
    """Cliente de test con las dependencias de infraestructura sustituidas."""
    app.dependency_overrides[notas_router.get_session_factory] = lambda: session_factory
    app.dependency_overrides[notas_router.get_document_storage] = lambda: storage
    app.dependency_overrides[notas_router.get_text_extractor] = lambda: extractor
    app.dependency_overrides[notas_router.get_clock] = lambda: clock
    yield TestClient(app)
    app.dependency_overrides.clear()
