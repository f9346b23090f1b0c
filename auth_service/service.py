"""Servicio de autenticación: registro, login, "who am I" y cambio de estado de cuenta."""

import logging
from typing import Optional, Union

from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from auth_service import schemas
from auth_service.config import Settings
from auth_service.errors import (
    AccountNotActive,
    AlreadyRegistered,
    DuplicateEmail,
    InvalidCredentials,
    InvalidOrExpiredToken,
    MissingToken,
    UserNotFound,
    ValidationFailed,
)
from auth_service.models import AccountStatus, UserProfile
from auth_service.store import UserStore
from auth_service.utils import PasswordHasher, TokenIssuer

logger = logging.getLogger(__name__)

REGISTERED_MESSAGE = "Usuario registrado con éxito"


class AuthService:
    """
    Orquesta el store de usuarios, el hasher y el emisor de tokens.

    Todas las operaciones son corrutinas; el hash y la verificación de
    contraseñas se ejecutan en el threadpool para no bloquear otras peticiones.
    Los fallos esperados se levantan como subclases de AuthServiceError.
    """

    def __init__(
        self,
        settings: Settings,
        store: UserStore,
        hasher: Optional[PasswordHasher] = None,
        tokens: Optional[TokenIssuer] = None,
    ):
        self.settings = settings
        self.store = store
        self.hasher = hasher or PasswordHasher()
        self.tokens = tokens or TokenIssuer(settings)

    async def register(self, name: str, email: str, password: str) -> str:
        try:
            data = schemas.UserCreate(name=name, email=email, password=password)
        except ValidationError as exc:
            raise ValidationFailed(schemas.format_validation_errors(exc.errors())) from exc

        # Se guarda el email tal como llegó: la comparación es exacta.
        if self.store.find_by_email(email) is not None:
            logger.warning("Registro rechazado: email ya registrado.")
            raise AlreadyRegistered()

        hashed_password = await run_in_threadpool(self.hasher.hash, data.password)

        try:
            user = self.store.insert(data.name, email, hashed_password)
        except DuplicateEmail as exc:
            logger.warning("Registro concurrente rechazado: email ya registrado.")
            raise AlreadyRegistered() from exc

        logger.info(f"Usuario registrado con id {user.id}")
        return REGISTERED_MESSAGE

    async def login(self, email: str, password: str) -> str:
        # El orden de las comprobaciones define el mensaje de error observable.
        user = self.store.find_by_email(email)
        if user is None:
            logger.warning("Login fallido: usuario no encontrado.")
            raise UserNotFound()

        if not user.status.can_login:
            logger.warning(f"Login rechazado para user_id {user.id}: estado {user.status.value}")
            raise AccountNotActive()

        is_match = await run_in_threadpool(self.hasher.verify, password, user.password_hash)
        if not is_match:
            logger.warning(f"Login fallido para user_id {user.id}: contraseña incorrecta")
            raise InvalidCredentials()

        token = await run_in_threadpool(self.tokens.issue, user.id, user.email)
        logger.info(f"Login exitoso para user_id: {user.id}")
        return token

    async def whoami(self, token: Optional[str]) -> UserProfile:
        if not token:
            raise MissingToken()

        result = await run_in_threadpool(self.tokens.verify, token)
        if not result.ok:
            raise InvalidOrExpiredToken()

        user = self.store.find_by_id(result.claims.user_id)
        if user is None:
            logger.warning(f"Token válido para user_id inexistente: {result.claims.user_id}")
            raise UserNotFound()

        return UserProfile.from_user(user)

    async def change_status(self, user_id: int, status: Union[str, AccountStatus]) -> str:
        """
        Cambia el estado de la cuenta. No comprueba quién hace la llamada.

        Levanta UserNotFound antes que InvalidStatus.
        """
        if self.store.find_by_id(user_id) is None:
            raise UserNotFound()

        new_status = AccountStatus.parse(status)

        updated = self.store.update_status(user_id, new_status)
        if updated is None:
            raise UserNotFound()

        logger.info(f"Estado del usuario {user_id} actualizado a {new_status.value}")
        return f"Estado del usuario actualizado a {new_status.value}"
