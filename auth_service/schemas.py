"""Modelos Pydantic (schemas) para validación de datos de entrada/salida en el Servicio de Autenticación."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.networks import validate_email
from pydantic_core import PydanticCustomError

# --- Schemas de Usuario ---


class UserCreate(BaseModel):
    """Datos de registro: nombre, email válido y contraseña de al menos 6 caracteres."""

    name: str
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("El nombre es obligatorio")
        return value

    @field_validator("email")
    @classmethod
    def email_is_valid(cls, value: str) -> str:
        # Valida el formato pero conserva el email tal cual: la búsqueda es exacta.
        _, normalized = validate_email(value)
        if normalized.lower() != value.lower():
            raise PydanticCustomError("value_error", "Debe ser un email válido")
        return value


class LoginRequest(BaseModel):
    # Sin validación de formato: el login solo busca por email exacto.
    email: str = ""
    password: str = ""


class UserResponse(BaseModel):
    id: int
    name: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class StatusUpdate(BaseModel):
    # Se acepta cualquier string; el servicio decide si es un estado válido.
    status: str = ""


# --- Schemas de Respuesta ---


class Token(BaseModel):
    """Schema para el token JWT devuelto tras un login exitoso."""

    token: str


class Message(BaseModel):
    message: str


class FieldError(BaseModel):
    field: str
    message: str


class ValidationErrorResponse(BaseModel):
    errors: List[FieldError]


FIELD_MESSAGES = {
    "name": "El nombre es obligatorio",
    "email": "Debe ser un email válido",
    "password": "La contraseña debe tener al menos 6 caracteres",
}


def format_validation_errors(errors) -> List[dict]:
    """Convierte errores de pydantic/FastAPI en [{field, message}] por campo."""
    formatted = []
    for error in errors:
        location = [part for part in error.get("loc", ()) if part != "body"]
        field = str(location[0]) if location else "body"
        message = FIELD_MESSAGES.get(field, error.get("msg", "Valor inválido"))
        formatted.append({"field": field, "message": message})
    return formatted
