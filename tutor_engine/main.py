from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tutor_engine.api.v1.api_router import v1_router
from tutor_engine.api.v1.errors import ApiError, api_error_exception_handler
from tutor_engine.core.settings import settings
from tutor_engine.infrastructure.container import TutorContainer
from tutor_engine.infrastructure.observability.correlation import CorrelationMiddleware, get_correlation_id
from tutor_engine.infrastructure.observability.logger_config import configure_structlog

configure_structlog()
logger = structlog.get_logger(__name__)
logger.info(
    "auth_runtime_mode",
    auth_mode="deployed" if settings.is_deployed_environment else "local_bypass",
    app_env=settings.APP_ENV,
    environment=settings.ENVIRONMENT,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    container = TutorContainer()
    app.state.container = container
    await container.startup()
    try:
        yield
    finally:
        await container.shutdown()


app = FastAPI(
    title="Tutor Engine API",
    description="Stateful tutoring turns over a per-student syllabus.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(CorrelationMiddleware)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(
        "frontend_contract_breach",
        type="contract_violation",
        direction="inbound_backend",
        endpoint=str(request.url),
        validation_errors=exc.errors(),
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "error": {
                "code": "FRONTEND_CONTRACT_BREACH",
                "message": "Request validation failed",
                "details": exc.errors(),
                "request_id": get_correlation_id(),
            }
        },
    )


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError):
    return await api_error_exception_handler(request, exc)


app.include_router(v1_router)


@app.get("/health")
def health_check():
    return {"status": "ok", "service": "tutor-engine", "api_v1": "available"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.API_PORT)
