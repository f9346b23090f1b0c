"""Configuración del Auth Service, cargada una sola vez al arrancar el proceso."""

import os
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Mapping, Optional, Union

from dotenv import load_dotenv

DEFAULT_TOKEN_EXPIRATION = "1h"
DEFAULT_PORT = 3000

_DURATION_RE = re.compile(r"^(-?\d+(?:\.\d+)?)\s*([a-z]*)$", re.IGNORECASE)

_UNIT_SECONDS = {
    # Sin unidad: milisegundos, como en `expiresIn`.
    "": 0.001,
    "ms": 0.001, "msec": 0.001, "msecs": 0.001,
    "millisecond": 0.001, "milliseconds": 0.001,
    "s": 1.0, "sec": 1.0, "secs": 1.0, "second": 1.0, "seconds": 1.0,
    "m": 60.0, "min": 60.0, "mins": 60.0, "minute": 60.0, "minutes": 60.0,
    "h": 3600.0, "hr": 3600.0, "hrs": 3600.0, "hour": 3600.0, "hours": 3600.0,
    "d": 86400.0, "day": 86400.0, "days": 86400.0,
    "w": 604800.0, "week": 604800.0, "weeks": 604800.0,
    "y": 31557600.0, "yr": 31557600.0, "yrs": 31557600.0,
    "year": 31557600.0, "years": 31557600.0,
}


class ConfigurationError(RuntimeError):
    """Configuración inválida o incompleta detectada al arrancar."""


def parse_ttl(value: Union[str, int, float, timedelta]) -> timedelta:
    """
    Convierte un tiempo de vida en un timedelta.

    Los números se interpretan como segundos. Los strings siguen el formato
    de `expiresIn`: "1h", "30m", "2 days" o "500ms"; sin unidad son
    milisegundos ("3600" dura 3,6 segundos).

    Raises:
        ConfigurationError: si el valor no se puede interpretar, no es positivo
            o la expiración resultante no cabe en un datetime.
    """
    if isinstance(value, timedelta):
        ttl = value
    elif isinstance(value, bool):
        raise ConfigurationError(f"TTL inválido: {value!r}")
    else:
        if isinstance(value, (int, float)):
            seconds = float(value)
        else:
            match = _DURATION_RE.match(str(value).strip())
            if not match:
                raise ConfigurationError(f"TTL inválido: {value!r}")
            amount, unit = match.groups()
            factor = _UNIT_SECONDS.get(unit.lower())
            if factor is None:
                raise ConfigurationError(f"Unidad de TTL desconocida: {unit!r}")
            seconds = float(amount) * factor
        try:
            ttl = timedelta(seconds=seconds)
        except (OverflowError, ValueError) as exc:
            raise ConfigurationError(f"TTL fuera de rango: {value!r}") from exc

    if ttl <= timedelta(0):
        raise ConfigurationError(f"El TTL debe ser positivo: {value!r}")
    try:
        datetime.now(timezone.utc) + ttl
    except OverflowError as exc:
        raise ConfigurationError(f"TTL fuera de rango: {value!r}") from exc
    return ttl


@dataclass(frozen=True)
class Settings:
    """Configuración de proceso inyectada en el emisor de tokens y el servicio."""

    secret_key: str
    token_ttl: timedelta = timedelta(hours=1)
    algorithm: str = "HS256"
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    def __post_init__(self) -> None:
        if not self.secret_key or not self.secret_key.strip():
            raise ConfigurationError("JWT_SECRET_KEY must not be empty")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Construye la configuración desde variables de entorno (y .env)."""
        if environ is None:
            load_dotenv()
            environ = os.environ

        secret = environ.get("JWT_SECRET_KEY") or environ.get("SECRET_KEY")
        if not secret:
            raise ConfigurationError("JWT_SECRET_KEY no está definida en las variables de entorno.")

        raw_port = environ.get("PORT") or str(DEFAULT_PORT)
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigurationError(f"PORT inválido: {raw_port!r}") from exc

        return cls(
            secret_key=secret,
            token_ttl=parse_ttl(environ.get("TOKEN_EXPIRATION") or DEFAULT_TOKEN_EXPIRATION),
            host=environ.get("HOST", "0.0.0.0"),
            port=port,
            log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        )
