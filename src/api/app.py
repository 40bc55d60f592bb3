from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from .error import ClientError, ServerError
import logging

logger = logging.getLogger(__name__)


def _error_body(exc, message: str) -> dict:
    details = exc.base_error.details
    return {
        "code": exc.base_error.code,
        "message": message,
        "correlation_id": details.get("correlation_id"),
        "retryable": details.get("retryable", False),
    }


async def handle_client_error(request: Request, exc: ClientError):
    error_dict = _error_body(exc, exc.base_error.message)
    logger.warning(f"Client error: {error_dict}")
    headers = None
    retry_after = exc.base_error.details.get("retry_after_seconds")
    if retry_after is not None:
        headers = {"Retry-After": str(retry_after)}
    return JSONResponse(
        status_code=exc.status_code, content={"error": error_dict}, headers=headers
    )


async def handle_server_error(request: Request, exc: ServerError):
    # Never echo internal messages
    error_dict = _error_body(exc, "Internal server error")
    logger.error(f"Server error: {exc.base_error.code} ({error_dict['correlation_id']})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": error_dict}
    )


def create_app(ApplicationConfig) -> FastAPI:
    logging.basicConfig(
        level=ApplicationConfig.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="Tenant Provisioning API", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ApplicationConfig.CORS_ORIGINS,
        allow_credentials=ApplicationConfig.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from src.api.routes import audit, credentials, health_check, provisioning, tenant

    app.include_router(health_check.router, tags=["Health"])
    app.include_router(provisioning.router, tags=["Provisioning"])
    app.include_router(credentials.router, tags=["Credentials"])
    app.include_router(tenant.router, tags=["Tenant"])
    app.include_router(audit.router, tags=["Audit"])

    app.add_exception_handler(ClientError, handle_client_error)
    app.add_exception_handler(ServerError, handle_server_error)

    return app
