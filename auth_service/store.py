"""Almacenamiento de usuarios: interfaz abstracta e implementación en memoria."""

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional

from auth_service.errors import DuplicateEmail
from auth_service.models import AccountStatus, User

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """
    Capacidad de búsqueda e inserción sobre registros de usuario.

    Las implementaciones deben garantizar que la comprobación de email único
    y la inserción ocurren de forma atómica, y que la actualización de estado
    es atómica por id.
    """

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[User]:
        ...

    @abstractmethod
    def find_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def insert(self, name: str, email: str, password_hash: str) -> User:
        """Crea un usuario activo con el siguiente id. Levanta DuplicateEmail."""

    @abstractmethod
    def update_status(self, user_id: int, status: AccountStatus) -> Optional[User]:
        ...

    @abstractmethod
    def count(self) -> int:
        ...


class InMemoryUserStore(UserStore):
    """Lista ordenada en memoria, recorrida linealmente y protegida por un lock."""

    def __init__(self) -> None:
        self._users: List[User] = []
        self._lock = threading.Lock()

    def find_by_email(self, email: str) -> Optional[User]:
        with self._lock:
            return self._find_by_email_unlocked(email)

    def find_by_id(self, user_id: int) -> Optional[User]:
        with self._lock:
            index = self._index_of(user_id)
            return None if index is None else self._users[index]

    def insert(self, name: str, email: str, password_hash: str) -> User:
        if not password_hash:
            raise ValueError("password_hash must not be empty")

        with self._lock:
            if self._find_by_email_unlocked(email) is not None:
                raise DuplicateEmail(email)
            user = User(
                id=len(self._users) + 1,
                name=name,
                email=email,
                password_hash=password_hash,
                status=AccountStatus.ACTIVE,
            )
            self._users.append(user)

        logger.debug(f"Usuario {user.id} insertado en el store en memoria.")
        return user

    def update_status(self, user_id: int, status: AccountStatus) -> Optional[User]:
        with self._lock:
            index = self._index_of(user_id)
            if index is None:
                return None
            updated = self._users[index].with_status(status)
            self._users[index] = updated
            return updated

    def count(self) -> int:
        with self._lock:
            return len(self._users)

    # Los helpers *_unlocked asumen que el lock ya está tomado.
    def _find_by_email_unlocked(self, email: str) -> Optional[User]:
        for user in self._users:
            if user.email == email:
                return user
        return None

    def _index_of(self, user_id: int) -> Optional[int]:
        for index, user in enumerate(self._users):
            if user.id == user_id:
                return index
        return None
