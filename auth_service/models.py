"""Modelos de dominio: registro de usuario y estados de cuenta."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Union

from auth_service.errors import InvalidStatus


class AccountStatus(str, Enum):
    """Estados de cuenta. Cualquier estado puede pasar a cualquier otro."""

    ACTIVE = "active"
    BLOCKED = "blocked"
    PENDING = "pending"

    @classmethod
    def parse(cls, value: Union[str, "AccountStatus"]) -> "AccountStatus":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatus() from None

    @property
    def can_login(self) -> bool:
        return self is AccountStatus.ACTIVE


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    status: AccountStatus = AccountStatus.ACTIVE

    def with_status(self, status: AccountStatus) -> "User":
        return replace(self, status=status)


@dataclass(frozen=True)
class UserProfile:
    """Vista pública de un usuario: nunca incluye el hash de la contraseña."""

    id: int
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserProfile":
        return cls(id=user.id, name=user.name, email=user.email)
