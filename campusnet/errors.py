"""
Errores de dominio de la mensajería.

Los servicios lanzan estas excepciones y ``main.py`` las traduce a respuestas
HTTP con un único handler, igual que hace con ``RateLimitExceeded``.
"""
import functools
import logging

from pymongo.errors import PyMongoError

logger = logging.getLogger(__name__)


class CampusNetError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(CampusNetError):
    """Entrada mal formada: contenido vacío o demasiado largo, ids, paginación..."""
    status_code = 400


class NotFoundError(CampusNetError):
    status_code = 404


class AuthorizationError(CampusNetError):
    status_code = 403


class StorageError(CampusNetError):
    """Fallo de E/S de MongoDB. No se reintenta: la petición falla entera."""
    status_code = 503


def wraps_storage_errors(func):
    """Convierte cualquier ``PyMongoError`` de una corrutina en ``StorageError``."""
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        try:
            return await func(*args, **kwargs)
        except PyMongoError as e:
            logger.error(f"Storage failure in {func.__qualname__}: {e}", exc_info=True)
            raise StorageError("Error de almacenamiento, inténtalo más tarde") from e
    return wrapper
