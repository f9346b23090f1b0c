"""Funciones de utilidad para el servicio de autenticación: hash de contraseñas y manejo de JWT."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Callable, Dict, Optional, Union

from jose import JWTError, jwt
from passlib.context import CryptContext

from auth_service.config import Settings, parse_ttl

# Configuración del logger
logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 10


# --- Utilidades para Contraseñas ---
class PasswordHasher:
    """Hash adaptativo con sal (bcrypt, 10 rondas) mediante passlib."""

    def __init__(self, rounds: int = BCRYPT_ROUNDS):
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    def hash(self, password: str) -> str:
        """Genera el hash de una contraseña plana usando bcrypt."""
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verifica una contraseña plana contra un hash almacenado.

        Nunca levanta excepciones: un hash vacío, corrupto o de un esquema
        desconocido se trata como no coincidente.
        """
        if not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Hash almacenado inválido, verificación rechazada: {e}")
            return False


# --- Utilidades para Tokens JWT ---
class TokenFailure(str, Enum):
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class TokenVerification:
    """Resultado de verificar un token: claims o el motivo del rechazo."""

    claims: Optional[TokenClaims] = None
    failure: Optional[TokenFailure] = None

    @property
    def ok(self) -> bool:
        return self.claims is not None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Emite y verifica tokens JWT firmados con el secreto del proceso."""

    def __init__(self, settings: Settings, now: Callable[[], datetime] = _utcnow):
        self._secret_key = settings.secret_key
        self._algorithm = settings.algorithm
        self._default_ttl = settings.token_ttl
        self._now = now

    def issue(
        self,
        user_id: int,
        email: str,
        ttl: Union[str, int, float, timedelta, None] = None,
    ) -> str:
        """
        Genera un token de acceso con los claims `id`, `email`, `iat` y `exp`.

        Args:
            user_id: id del usuario.
            email: email del usuario.
            ttl: tiempo de vida ("1h", segundos o timedelta). Por defecto el configurado.

        Returns:
            String del JWT codificado.
        """
        lifetime = self._default_ttl if ttl is None else parse_ttl(ttl)
        issued_at = self._now()
        expire = issued_at + lifetime
        to_encode = {
            "id": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expire.timestamp()),
        }
        return jwt.encode(to_encode, self._secret_key, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenVerification:
        """
        Decodifica y valida un token JWT (firma, estructura y expiración).

        Nunca levanta excepciones; el llamador ramifica sobre `failure`.
        """
        try:
            jwt.get_unverified_claims(token)
        except (JWTError, AttributeError, TypeError) as e:
            logger.warning(f"Fallo en decodificación de token: estructura inválida ({e})")
            return TokenVerification(failure=TokenFailure.MALFORMED)

        try:
            # La expiración se evalúa aquí con el reloj inyectado.
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError as e:
            logger.warning(f"Fallo en decodificación de token: {e}")
            return TokenVerification(failure=TokenFailure.BAD_SIGNATURE)

        claims = self._parse_claims(payload)
        if claims is None:
            logger.warning("Fallo en decodificación de token: claims incompletos.")
            return TokenVerification(failure=TokenFailure.MALFORMED)

        if self._now() >= claims.expires_at:
            logger.warning("Fallo en decodificación de token: El token ha expirado.")
            return TokenVerification(failure=TokenFailure.EXPIRED)

        return TokenVerification(claims=claims)

    @staticmethod
    def _parse_claims(payload: Dict[str, Any]) -> Optional[TokenClaims]:
        user_id = payload.get("id")
        email = payload.get("email")
        iat = payload.get("iat")
        exp = payload.get("exp")

        if not isinstance(user_id, int) or isinstance(user_id, bool):
            return None
        if not isinstance(email, str):
            return None
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            return None
        if not isinstance(iat, (int, float)) or isinstance(iat, bool):
            return None

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
        )
