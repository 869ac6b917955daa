import os

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# In-memory SQLite and no external identity service for tests
os.environ["HOST_AZURE"] = ""
os.environ["DATABASE_URL"] = ""
os.environ["DATABASE_PATH"] = ":memory:"
os.environ["AUTH_REQUIRED"] = "true"
os.environ["FISIO_ID_FROM_TOKEN"] = "true"

from fisio_api.auth import InvalidToken, TokenVerifier, VerifiedIdentity, get_token_verifier
from fisio_api.database import close_db, init_db
from fisio_api.main import app

FISIO_ID = "fisio-1"
OTHER_FISIO_ID = "fisio-2"
AUTH_HEADERS = {"Authorization": "Bearer token-fisio-1"}
OTHER_AUTH_HEADERS = {"Authorization": "Bearer token-fisio-2"}


class FakeVerifier(TokenVerifier):
    """Accepts a fixed set of tokens and records every verification."""

    def __init__(self) -> None:
        self.tokens = {
            "token-fisio-1": FISIO_ID,
            "token-fisio-2": OTHER_FISIO_ID,
        }
        self.calls: list[str] = []

    async def verify(self, token: str) -> VerifiedIdentity:
        self.calls.append(token)
        uid = self.tokens.get(token)
        if uid is None:
            raise InvalidToken("unknown token")
        return VerifiedIdentity(uid=uid, claims={"uid": uid})


@pytest_asyncio.fixture
async def db():
    """Provide a fresh in-memory database for each test."""
    import fisio_api.database as db_mod

    if db_mod._db is not None:
        await db_mod._db.close()
    db_mod._db = None

    # Override module-level config directly (avoids fragile importlib.reload)
    db_mod.HOST_AZURE = ""
    db_mod.DATABASE_URL = ""
    db_mod.DATABASE_PATH = ":memory:"

    await init_db()
    database = await db_mod.get_db()
    yield database
    await close_db()


@pytest.fixture
def verifier():
    fake = FakeVerifier()
    app.dependency_overrides[get_token_verifier] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_token_verifier, None)


@pytest_asyncio.fixture
async def async_client(db, verifier):
    """Provide an async httpx client for HTTP tests."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest_asyncio.fixture
async def catalog(db):
    """A small diagnosis catalog."""
    rows = [
        ("LUM01", "Musculoesquelético", "Lumbar"),
        ("CER02", "Musculoesquelético", "Cervical"),
        ("ROD03", "Articular", "Rodilla"),
    ]
    for row in rows:
        await db.execute(
            "INSERT INTO diagnostico_medico (id, sistema_lesionado, zona_afectada) VALUES (?, ?, ?)",
            row,
        )
    return rows


@pytest.fixture
def add_paciente(db):
    """Insert a patient row directly, bypassing the API."""

    async def _add(paciente_id, nombre, apellidos, fisio_id=FISIO_ID, direccion=None):
        await db.execute(
            "INSERT INTO paciente_fisio (paciente_id, nombre, apellidos, direccion, telefono, "
            "fecha_nacimiento, fisio_id) VALUES (?, ?, ?, ?, ?, ?, ?)",
            (paciente_id, nombre, apellidos, direccion, "600000000", "1990-05-17", fisio_id),
        )

    return _add


@pytest.fixture
def add_historial(db):
    """Insert a history entry directly, bypassing the API."""

    async def _add(paciente_id, diagnostico_id, fecha, fisio_id=FISIO_ID):
        await db.execute(
            "INSERT INTO paciente_historial_medico "
            "(paciente_id, fisio_id, diagnostico_id, fecha_diagnostico, fecha_inicio_tratamiento, "
            "fecha_fin_tratamiento, sintomas, medicamentos) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (paciente_id, fisio_id, diagnostico_id, fecha, fecha, None, "Dolor", "Ibuprofeno"),
        )

    return _add
