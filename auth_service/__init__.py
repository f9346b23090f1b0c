"""Auth Service: registro, autenticación con JWT y estados de cuenta."""

from auth_service.config import Settings
from auth_service.service import AuthService
from auth_service.store import InMemoryUserStore, UserStore

__all__ = ["Settings", "AuthService", "InMemoryUserStore", "UserStore"]
