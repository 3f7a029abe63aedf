"""API Gateway - FastAPI application exposing the ledger."""

import logging, threading, time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
from uuid import uuid4

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from intellisoc.api.schemas import (
    ApiResponse,
    ErrorResponse,
    LogBatchData,
    LogBatchRequest,
    LogEventData,
    LogEventRequest,
    LoginRequest,
    LoginSuccessData,
)
from intellisoc.api.service import MonitoringService
from intellisoc.common.config import get_config
from intellisoc.common.constants import APIConstants
from intellisoc.common.exceptions import (
    IntelliSOCException,
    NotFoundError,
    StorageError,
    ValidationError,
)
from intellisoc.data.schemas.login_attempt import FailureReason

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger("intellisoc_api")

_started_at = time.monotonic()


class ServiceManager:
    """Thread-safe service singleton manager."""

    _instance: Optional[MonitoringService] = None
    _lock = threading.Lock()
    _initialized = False

    @classmethod
    def get_service(cls) -> MonitoringService:
        """Get or create the monitoring service instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = MonitoringService.from_config(get_config())
                    cls._initialized = True
                    logger.info("MonitoringService initialized")
        return cls._instance

    @classmethod
    def shutdown(cls) -> None:
        """Shutdown the service and release resources."""
        with cls._lock:
            if cls._instance is not None:
                cls._instance.shutdown()
                cls._instance = None
                cls._initialized = False

                logger.info("MonitoringService shutdown complete")


def get_service() -> MonitoringService:
    """Get the monitoring service instance."""
    return ServiceManager.get_service()


def get_client_address(request: Request) -> str:
    """First X-Forwarded-For hop, else the socket peer, else localhost."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return APIConstants.DEFAULT_CLIENT_ADDRESS


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    # Startup
    logger.info("IntelliSOC API starting up...")
    if get_service not in app.dependency_overrides:
        service = get_service()  # Pre-initialize service and storage
        logger.info(f"Storage: JSON files in {service.config.data_dir}")
    logger.info("IntelliSOC API ready")

    yield

    # Shutdown
    logger.info("IntelliSOC API shutting down...")
    ServiceManager.shutdown()
    logger.info("IntelliSOC API shutdown complete")


app = FastAPI(
    title="IntelliSOC Ledger API",
    description=(
        "Login attempt, behavioral telemetry and IP reputation ledger. "),
    version="0.1.0",
    lifespan=lifespan,
)


# CORS middleware (configured from environment)
cors_origins = get_config().allowed_origins
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=cors_origins != ["*"],
        allow_methods=["POST", "GET"],
        allow_headers=["Content-Type", "Authorization", "X-Request-ID"],
    )


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

def _error(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    data: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            data=data,
            request_id=getattr(request.state, "request_id", None),
        ).model_dump(mode="json"),
    )


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """Handle missing or invalid input."""
    logger.warning(f"Validation error: {exc.message}")
    return _error(request, 400, "validation_error", exc.message)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Map schema validation failures to 400."""
    logger.warning(f"Request validation failed on {request.url.path}")
    fields = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
    return _error(
        request, 400, "validation_error", "Invalid request body",
        data={"fields": fields},
    )


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return _error(request, 404, "not_found", exc.message)


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    """Write failures: the effect of the request cannot be confirmed."""
    logger.error(
        f"Storage error on {request.url.path}",
        extra={"collection": exc.details.get("collection")},
    )
    return _error(request, 500, "storage_error", "Failed to persist data")


@app.exception_handler(IntelliSOCException)
async def intellisoc_error_handler(request: Request, exc: IntelliSOCException) -> JSONResponse:
    logger.error(f"Unhandled service error: {exc.code}")
    return _error(request, 500, exc.code.lower(), "Internal server error")


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected errors.

    Logs full exception for debugging but returns sanitized message to client.
    """
    logger.exception(
        "Unexpected error",
        extra={"error_type": type(exc).__name__}
    )
    return _error(request, 500, "internal_error", "Internal server error")


# =============================================================================
# MIDDLEWARE
# =============================================================================

@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Add request ID to each request for tracing."""
    request_id = f"req_{uuid4().hex[:12]}"
    request.state.request_id = request_id
    logger.info(f"{request.method} {request.url.path} ({request_id})")

    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


# =============================================================================
# AUTHENTICATION
# =============================================================================

@app.post("/api/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    service: MonitoringService = Depends(get_service),
):
    """Authenticate a user and record the attempt.

    Failures never reveal whether the username exists.
    """
    result = service.login(
        username=body.username,
        password=body.password,
        source_address=get_client_address(request),
        session_id=body.session_id,
        device_info=body.device_info,
        remember_me=body.remember_me,
    )

    if result.failure_reason == FailureReason.ADDRESS_BLOCKED:
        return _error(request, 403, "address_blocked", "Access denied")
    if not result.succeeded:
        return _error(
            request, 401, "invalid_credentials", "Invalid credentials",
            data={"remainingAttempts": service.config.remaining_attempts_hint},
        )

    data = LoginSuccessData(
        user_id=result.user.user_id,
        username=result.user.username,
        session_token=result.session_token,
        expires_at=result.expires_at,
        session_id=result.session_id,
    )
    return ApiResponse(
        status="success",
        message="Authentication successful",
        data=data.model_dump(mode="json", by_alias=True),
    ).model_dump(mode="json")


# =============================================================================
# TELEMETRY
# =============================================================================

@app.post("/api/log/event", status_code=201)
def log_event(
    body: LogEventRequest,
    request: Request,
    service: MonitoringService = Depends(get_service),
):
    """Record one behavioral event."""
    record = service.log_event(body, get_client_address(request))
    data = LogEventData(
        log_id=str(record.log_id),
        event_type=record.event_type,
        timestamp=record.timestamp,
    )
    return ApiResponse(
        status="success",
        message="Event logged successfully",
        data=data.model_dump(mode="json", by_alias=True),
    ).model_dump(mode="json")


@app.post("/api/log/batch", status_code=201)
def log_batch(
    body: LogBatchRequest,
    request: Request,
    service: MonitoringService = Depends(get_service),
):
    """Record a batch of events; malformed items are counted, not fatal."""
    logged, failed = service.log_batch(body.events, get_client_address(request))
    data = LogBatchData(events_logged=logged, failed_events=failed)
    return ApiResponse(
        status="success",
        message="Batch logged successfully",
        data=data.model_dump(mode="json", by_alias=True),
    ).model_dump(mode="json")


# =============================================================================
# NETWORK / ANALYTICS / EXPORT
# =============================================================================

@app.get("/api/ip/info")
def ip_info(request: Request, service: MonitoringService = Depends(get_service)):
    location = service.ip_info(get_client_address(request))
    return ApiResponse(
        status="success",
        message="IP information retrieved",
        data=location.model_dump(mode="json"),
    ).model_dump(mode="json")


@app.get("/api/analytics/login-stats")
def login_stats(
    time_range: Optional[str] = Query(default=None, alias="timeRange"),
    service: MonitoringService = Depends(get_service),
):
    """Per-outcome attempt counts over 1h, 24h (default) or 7d."""
    stats = service.login_stats(time_range)
    return ApiResponse(
        status="success",
        data={status: bucket.model_dump() for status, bucket in stats.items()},
    ).model_dump(mode="json")


@app.get("/api/analytics/ip-reputation/{address}")
def ip_reputation(address: str, service: MonitoringService = Depends(get_service)):
    record = service.ip_reputation(address)
    return ApiResponse(
        status="success",
        data=record.model_dump(mode="json"),
    ).model_dump(mode="json")


@app.get("/api/export/all-logs")
def export_all_logs(service: MonitoringService = Depends(get_service)):
    """Full dump of every collection. Research/debug use only."""
    return ApiResponse(
        status="success",
        data=service.export_all(),
    ).model_dump(mode="json")


# =============================================================================
# HEALTH
# =============================================================================

@app.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": APIConstants.SERVICE_NAME,
        "storage": "JSON files",
        "uptime": round(time.monotonic() - _started_at, 3),
    }


@app.get("/ready")
async def readiness_check() -> dict:
    """Readiness check endpoint.

    Returns 503 until the service singleton is initialized.
    """
    if not ServiceManager._initialized and get_service not in app.dependency_overrides:
        raise HTTPException(status_code=503, detail="not_ready")
    return {"status": "ready", "service": APIConstants.SERVICE_NAME}
