from __future__ import annotations

import structlog
from fastapi import Security
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer

from tutor_engine.api.v1.errors import ApiError
from tutor_engine.core.settings import settings

logger = structlog.get_logger(__name__)

DEVELOPMENT_SECRET = "development-secret"

bearer_auth = HTTPBearer(
    auto_error=False,
    scheme_name="BearerAuth",
    description="Authorization Bearer token. Use TUTOR_SERVICE_SECRET as token value.",
)
service_secret_auth = APIKeyHeader(
    name="X-Service-Secret",
    auto_error=False,
    scheme_name="ServiceSecretAuth",
    description="Service secret header for S2S calls.",
)


async def require_service_auth(
    bearer_credentials: HTTPAuthorizationCredentials | None = Security(bearer_auth),
    x_service_secret: str | None = Security(service_secret_auth),
) -> None:
    """
    Enforces service auth only in deployed environments.
    Accepts either a Bearer token or X-Service-Secret carrying TUTOR_SERVICE_SECRET.
    """
    expected = str(settings.TUTOR_SERVICE_SECRET or "").strip()
    if not settings.is_deployed_environment:
        logger.debug("service_auth_bypass", auth_mode="local_bypass")
        return

    if not expected or expected == DEVELOPMENT_SECRET:
        raise ApiError(
            status_code=500,
            code="AUTH_MISCONFIGURED",
            message="Service secret must be configured in deployed environments",
        )

    bearer = None
    if bearer_credentials and str(bearer_credentials.scheme or "").lower() == "bearer":
        bearer = (bearer_credentials.credentials or "").strip() or None
    header_secret = x_service_secret.strip() if x_service_secret else None
    candidate = bearer or header_secret
    caller_auth_mode = "bearer" if bearer else ("x_service_secret" if header_secret else "missing")

    if candidate != expected:
        logger.warning("service_auth_failed", caller_auth_mode=caller_auth_mode)
        raise ApiError(
            status_code=401,
            code="UNAUTHORIZED",
            message="Unauthorized",
            details="Missing or invalid service token",
        )
