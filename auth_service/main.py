import logging
import time
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from fastapi.security import OAuth2PasswordBearer
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Importaciones locales
from auth_service import schemas
from auth_service.config import Settings
from auth_service.errors import AuthServiceError, FailureKind, UserNotFound
from auth_service.service import AuthService
from auth_service.store import InMemoryUserStore, UserStore

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

# Código HTTP por tipo de fallo
STATUS_BY_KIND = {
    FailureKind.VALIDATION_FAILED: status.HTTP_400_BAD_REQUEST,
    FailureKind.ALREADY_REGISTERED: status.HTTP_400_BAD_REQUEST,
    FailureKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FailureKind.ACCOUNT_NOT_ACTIVE: status.HTTP_400_BAD_REQUEST,
    FailureKind.INVALID_CREDENTIALS: status.HTTP_400_BAD_REQUEST,
    FailureKind.MISSING_TOKEN: status.HTTP_401_UNAUTHORIZED,
    FailureKind.INVALID_OR_EXPIRED_TOKEN: status.HTTP_401_UNAUTHORIZED,
    FailureKind.INVALID_STATUS: status.HTTP_400_BAD_REQUEST,
}

# --- Métricas Prometheus ---
REQUEST_COUNT = Counter(
    "auth_requests_total",
    "Total requests processed by Auth Service",
    ["method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "auth_request_latency_seconds",
    "Request latency in seconds for Auth Service",
    ["endpoint"]
)


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def _error_response(exc: AuthServiceError, status_code: Optional[int] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code or STATUS_BY_KIND[exc.kind],
        content={"message": exc.message},
    )


def create_app(settings: Optional[Settings] = None, store: Optional[UserStore] = None) -> FastAPI:
    """Construye la aplicación FastAPI con la configuración y el store inyectados."""
    settings = settings or Settings.from_env()
    store = store if store is not None else InMemoryUserStore()

    app = FastAPI(
        title="Auth Service",
        description="Handles user registration, authentication, token verification and account status.",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.auth_service = AuthService(settings, store)

    # --- Middleware para Métricas ---
    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        start_time = time.time()
        response = None
        status_code = 500

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as exc:
            logger.error(f"Unhandled exception during request processing: {exc}", exc_info=True)
            response = JSONResponse(status_code=500, content={"message": "Internal Server Error"})
        finally:
            latency = time.time() - start_time
            endpoint = request.url.path

            REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
            REQUEST_COUNT.labels(
                method=request.method,
                endpoint=endpoint,
                status_code=status_code
            ).inc()

        return response

    # --- Manejo de errores ---
    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Error de validación en {request.url.path}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"errors": schemas.format_validation_errors(exc.errors())},
        )

    @app.exception_handler(AuthServiceError)
    async def auth_service_exception_handler(request: Request, exc: AuthServiceError):
        if exc.kind is FailureKind.VALIDATION_FAILED:
            return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"errors": exc.errors})
        return _error_response(exc)

    # --- Endpoints de Salud y Métricas ---
    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        """Exposes application metrics for Prometheus."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health", tags=["Monitoring"])
    def health_check():
        """Performs a basic health check of the service."""
        return {"status": "ok", "service": "auth_service", "users": store.count()}

    # --- Endpoints de API ---
    @app.post(
        "/api/auth/register",
        response_model=schemas.Message,
        status_code=status.HTTP_201_CREATED,
        responses={status.HTTP_400_BAD_REQUEST: {"model": schemas.ValidationErrorResponse}},
        tags=["Authentication"],
    )
    async def register(user: schemas.UserCreate, service: AuthService = Depends(get_auth_service)):
        """Registra un usuario nuevo con estado "active"."""
        message = await service.register(user.name, user.email, user.password)
        return {"message": message}

    @app.post("/api/auth/login", response_model=schemas.Token, tags=["Authentication"])
    async def login(credentials: schemas.LoginRequest, service: AuthService = Depends(get_auth_service)):
        """
        Autentica al usuario y devuelve un token JWT.
        Todos los fallos de login responden 400, incluido usuario no encontrado.
        """
        try:
            token = await service.login(credentials.email, credentials.password)
        except UserNotFound as exc:
            return _error_response(exc, status.HTTP_400_BAD_REQUEST)
        return {"token": token}

    @app.get("/api/auth/me", response_model=schemas.UserResponse, tags=["Authentication"])
    async def me(
        token: Optional[str] = Depends(oauth2_scheme),
        service: AuthService = Depends(get_auth_service),
    ):
        """Devuelve los datos del usuario autenticado por el token Bearer."""
        return await service.whoami(token)

    @app.put("/api/users/{user_id}/status", response_model=schemas.Message, tags=["Users"])
    async def change_status(
        user_id: str,
        update: schemas.StatusUpdate,
        service: AuthService = Depends(get_auth_service),
    ):
        """
        Cambia el estado de la cuenta (active, blocked, pending).
        Solo se aceptan ids enteros; cualquier otro valor ("abc", "1.0") es usuario no encontrado.
        """
        try:
            numeric_id = int(user_id)
        except ValueError:
            raise UserNotFound() from None
        message = await service.change_status(numeric_id, update.status)
        return {"message": message}

    return app


def run() -> None:
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    app = create_app(settings)
    logger.info(f"Servidor en http://localhost:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    run()
