"""
Configuración de pytest para tests

La base de datos es un MongoDB en memoria (mongomock-motor, misma API
asíncrona que Motor). Se inyecta sustituyendo la dependencia ``get_db``.
"""
import uuid

import pytest
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from campusnet.db import get_db, ensure_indexes
from campusnet.main import app
from campusnet.middleware.rate_limit import limiter
from campusnet.security import create_access_token, hash_password
from campusnet.utils import utcnow

# Deshabilitar rate limiting para todos los tests
@pytest.fixture(scope="session", autouse=True)
def disable_rate_limiting():
    limiter.enabled = False

@pytest.fixture
async def db():
    """Base de datos limpia para cada test"""
    client = AsyncMongoMockClient()
    database = client[f"campusnet_test_{uuid.uuid4().hex[:8]}"]
    await ensure_indexes(database)
    yield database

@pytest.fixture
def make_user(db):
    """Crea un usuario directamente en el directorio y devuelve su id"""
    async def _make(first_name="Test", last_name="User", **extra):
        now = utcnow()
        doc = {
            "first_name": first_name,
            "last_name": last_name,
            "email": extra.pop("email", f"{uuid.uuid4().hex[:10]}@student.uni.edu"),
            "role": extra.pop("role", "student"),
            "university": extra.pop("university", "Azerbaijan Technical University"),
            "faculty": None,
            "bio": "",
            "profile_picture": "",
            "is_online": False,
            "last_seen": now,
            "created_at": now,
        }
        password = extra.pop("password", None)
        if password:
            doc["password_hash"] = hash_password(password)
        doc.update(extra)
        res = await db.users.insert_one(doc)
        return str(res.inserted_id)
    return _make

@pytest.fixture
async def client(db):
    """Cliente HTTP contra la app con la base de datos de test"""
    async def _test_db():
        return db

    app.dependency_overrides[get_db] = _test_db
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

@pytest.fixture
def auth_headers():
    """Cabeceras Bearer para actuar como un usuario concreto"""
    def _headers(user_id: str) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}
    return _headers
