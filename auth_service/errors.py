"""Tipos de fallo que el servicio de autenticación devuelve a la capa HTTP."""

from enum import Enum
from typing import Dict, List, Optional


class FailureKind(str, Enum):
    VALIDATION_FAILED = "validation_failed"
    ALREADY_REGISTERED = "already_registered"
    USER_NOT_FOUND = "user_not_found"
    ACCOUNT_NOT_ACTIVE = "account_not_active"
    INVALID_CREDENTIALS = "invalid_credentials"
    MISSING_TOKEN = "missing_token"
    INVALID_OR_EXPIRED_TOKEN = "invalid_or_expired_token"
    INVALID_STATUS = "invalid_status"


class AuthServiceError(Exception):
    """Base de todos los fallos esperados del servicio."""

    kind: FailureKind
    default_message = "Error de autenticación"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(AuthServiceError):
    kind = FailureKind.VALIDATION_FAILED
    default_message = "Datos inválidos"

    def __init__(self, errors: List[Dict[str, str]], message: Optional[str] = None):
        self.errors = errors
        super().__init__(message)


class AlreadyRegistered(AuthServiceError):
    kind = FailureKind.ALREADY_REGISTERED
    default_message = "El usuario ya está registrado"


class UserNotFound(AuthServiceError):
    kind = FailureKind.USER_NOT_FOUND
    default_message = "Usuario no encontrado"


class AccountNotActive(AuthServiceError):
    kind = FailureKind.ACCOUNT_NOT_ACTIVE
    default_message = "Cuenta bloqueada o no activa"


class InvalidCredentials(AuthServiceError):
    kind = FailureKind.INVALID_CREDENTIALS
    default_message = "Contraseña incorrecta"


class MissingToken(AuthServiceError):
    kind = FailureKind.MISSING_TOKEN
    default_message = "Acceso denegado, token requerido"


class InvalidOrExpiredToken(AuthServiceError):
    kind = FailureKind.INVALID_OR_EXPIRED_TOKEN
    default_message = "Token inválido o expirado"


class InvalidStatus(AuthServiceError):
    kind = FailureKind.INVALID_STATUS
    default_message = "Estado no válido"


class DuplicateEmail(Exception):
    """Levantada por el store cuando el email ya existe."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Email ya registrado: {email}")
