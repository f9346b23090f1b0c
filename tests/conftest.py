"""
Configuraciones y fixtures compartidos para las pruebas automatizadas con pytest.
Construye el servicio con un store en memoria y un cliente HTTP sobre la app FastAPI.
"""

import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from auth_service.config import Settings
from auth_service.main import create_app
from auth_service.service import AuthService
from auth_service.store import InMemoryUserStore
from auth_service.utils import PasswordHasher, TokenIssuer

TEST_SECRET = "clave_de_pruebas"
TEST_PASSWORD = "password123"


@pytest.fixture
def settings() -> Settings:
    return Settings(secret_key=TEST_SECRET)


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def hasher() -> PasswordHasher:
    # 4 rondas es el mínimo de bcrypt; basta para las pruebas.
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens(settings) -> TokenIssuer:
    return TokenIssuer(settings)


@pytest.fixture
def service(settings, store, hasher, tokens) -> AuthService:
    return AuthService(settings, store, hasher=hasher, tokens=tokens)


@pytest.fixture
def client(settings, store, hasher):
    """Cliente HTTP sobre la app completa, compartiendo el store de la prueba."""
    app = create_app(settings=settings, store=store)
    app.state.auth_service.hasher = hasher
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def registered_user(client):
    """Registra un usuario por HTTP y devuelve sus credenciales."""
    payload = {"name": "Ana Prueba", "email": "ana@example.com", "password": TEST_PASSWORD}
    r = client.post("/api/auth/register", json=payload)
    assert r.status_code == 201, r.text
    return payload


@pytest.fixture
def auth_headers(client, registered_user):
    """Cabeceras Authorization Bearer para el usuario registrado."""
    r = client.post(
        "/api/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert r.status_code == 200, r.text
    return {"Authorization": f"Bearer {r.json()['token']}"}
