"""Pruebas automatizadas para los endpoints de autenticación (/api/auth/*) y estado de usuario."""

from conftest import TEST_SECRET, TEST_PASSWORD
from jose import jwt


def test_register_returns_confirmation_without_sensitive_data(client, store):
    payload = {"name": "Luis", "email": "luis@example.com", "password": TEST_PASSWORD}
    r = client.post("/api/auth/register", json=payload)

    assert r.status_code == 201
    assert r.json() == {"message": "Usuario registrado con éxito"}
    assert store.find_by_email("luis@example.com").status.value == "active"


def test_register_duplicate_email(client, store, registered_user):
    """
    Verifica que /api/auth/register devuelve 400 cuando el email ya existe
    y que no se crea un segundo usuario.
    """
    r = client.post("/api/auth/register", json={**registered_user, "password": "otra_clave"})

    assert r.status_code == 400, r.text
    assert r.json() == {"message": "El usuario ya está registrado"}
    assert store.count() == 1


def test_register_validation_errors_are_reported_per_field(client, store):
    r = client.post("/api/auth/register", json={"name": "", "email": "no-es-email", "password": "123"})

    assert r.status_code == 400
    fields = {error["field"]: error["message"] for error in r.json()["errors"]}
    assert fields == {
        "name": "El nombre es obligatorio",
        "email": "Debe ser un email válido",
        "password": "La contraseña debe tener al menos 6 caracteres",
    }
    assert store.count() == 0


def test_login_returns_token_with_identity_claims(client, registered_user):
    r = client.post(
        "/api/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )

    assert r.status_code == 200
    claims = jwt.decode(r.json()["token"], TEST_SECRET, algorithms=["HS256"])
    assert claims["id"] == 1
    assert claims["email"] == registered_user["email"]
    assert claims["exp"] - claims["iat"] == 3600


def test_login_unknown_email(client):
    r = client.post("/api/auth/login", json={"email": "nadie@example.com", "password": "wrong_password"})

    assert r.status_code == 400
    assert r.json() == {"message": "Usuario no encontrado"}


def test_login_wrong_password(client, registered_user):
    r = client.post("/api/auth/login", json={"email": registered_user["email"], "password": "incorrecta"})

    assert r.status_code == 400
    assert r.json() == {"message": "Contraseña incorrecta"}


def test_me_returns_profile(client, auth_headers, registered_user):
    r = client.get("/api/auth/me", headers=auth_headers)

    assert r.status_code == 200
    assert r.json() == {"id": 1, "name": registered_user["name"], "email": registered_user["email"]}


def test_me_without_token(client):
    r = client.get("/api/auth/me")

    assert r.status_code == 401
    assert r.json() == {"message": "Acceso denegado, token requerido"}


def test_me_with_wrongly_signed_token(client, registered_user):
    forged = jwt.encode({"id": 1, "email": registered_user["email"], "iat": 0, "exp": 4102444800}, "otra_clave")
    r = client.get("/api/auth/me", headers={"Authorization": f"Bearer {forged}"})

    assert r.status_code == 401
    assert r.json() == {"message": "Token inválido o expirado"}


def test_me_with_garbage_token(client):
    r = client.get("/api/auth/me", headers={"Authorization": "Bearer no.es.un-token"})

    assert r.status_code == 401


def test_change_status_blocks_login(client, registered_user):
    r = client.put("/api/users/1/status", json={"status": "blocked"})
    assert r.status_code == 200
    assert r.json() == {"message": "Estado del usuario actualizado a blocked"}

    login = client.post(
        "/api/auth/login",
        json={"email": registered_user["email"], "password": registered_user["password"]},
    )
    assert login.status_code == 400
    assert login.json() == {"message": "Cuenta bloqueada o no activa"}


def test_change_status_invalid_value(client, store, registered_user):
    r = client.put("/api/users/1/status", json={"status": "archived"})

    assert r.status_code == 400
    assert r.json() == {"message": "Estado no válido"}
    assert store.find_by_id(1).status.value == "active"


def test_change_status_unknown_user(client):
    assert client.put("/api/users/99/status", json={"status": "blocked"}).status_code == 404
    assert client.put("/api/users/abc/status", json={"status": "blocked"}).status_code == 404


def test_change_status_accepts_only_integer_ids(client, registered_user):
    assert client.put("/api/users/1.0/status", json={"status": "blocked"}).status_code == 404
    assert client.put("/api/users/1/status", json={"status": "blocked"}).status_code == 200


def test_health_reports_user_count(client, registered_user):
    assert client.get("/health").json()["users"] == 1


def test_register_documents_validation_error_body(client):
    responses = client.get("/openapi.json").json()["paths"]["/api/auth/register"]["post"]["responses"]
    schema_ref = responses["400"]["content"]["application/json"]["schema"]["$ref"]

    assert schema_ref.endswith("/ValidationErrorResponse")


def test_health_and_metrics(client):
    assert client.get("/health").json() == {"status": "ok", "service": "auth_service", "users": 0}

    r = client.get("/metrics")
    assert r.status_code == 200
    assert "auth_requests_total" in r.text
