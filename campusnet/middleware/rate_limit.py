"""
Rate limiting con slowapi, compartido por los routers.

Uso: decorar el endpoint con ``@limiter.limit("5/minute")``; el endpoint debe
recibir ``request: Request``. Con ``RATE_LIMIT_ENABLED=false`` (o
``limiter.enabled = False`` en tests) no se aplica ningún límite.
"""
from fastapi import Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from ..config import get_settings

limiter = Limiter(key_func=get_remote_address, enabled=get_settings().rate_limit_enabled)

SIGNUP_LIMIT = "5/minute"
LOGIN_LIMIT = "10/minute"
SEND_MESSAGE_LIMIT = "30/minute"


async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=429,
        content={"detail": f"Demasiadas solicitudes. Límite: {exc.detail}. Intenta más tarde."},
    )
