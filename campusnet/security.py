"""
Credenciales de CampusNet: contraseñas con bcrypt y tokens de sesión JWT.

El token solo lleva el id del usuario (``sub``), su tipo y las marcas de
tiempo. Nombre, rol y presencia se leen siempre del directorio, así que un
cambio de perfil no obliga a renovar la sesión.
"""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext
from motor.motor_asyncio import AsyncIOMotorDatabase

from .config import get_settings
from .db import get_db
from .errors import ValidationError
from .utils import to_id, to_object_id

settings = get_settings()
ALGO = "HS256"
ACCESS_TOKEN = "access"
# Lo que nunca sale del directorio hacia la sesión
PRIVATE_FIELDS = {"password_hash": 0}

pwd = CryptContext(schemes=["bcrypt"], deprecated="auto")
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def hash_password(plain: str) -> str:
    return pwd.hash(plain)


def verify_password(plain: str, hashed: Optional[str]) -> bool:
    # Usuarios importados sin contraseña no pueden iniciar sesión
    if not hashed:
        return False
    return pwd.verify(plain, hashed)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: str, expires_hours: Optional[int] = None) -> str:
    hours = settings.jwt_expires_hours if expires_hours is None else expires_hours
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "typ": ACCESS_TOKEN,
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGO)


def decode_access_token(token: str) -> str:
    """Devuelve el id de usuario del token o lanza 401."""
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[ALGO])
    except JWTError:
        raise _unauthorized("Token inválido o caducado")
    if claims.get("typ") != ACCESS_TOKEN:
        raise _unauthorized("Token inválido")
    try:
        return str(to_object_id(claims.get("sub"), "sub"))
    except ValidationError:
        raise _unauthorized("Token inválido")


async def get_current_user_id(token: str = Depends(oauth2_scheme)) -> str:
    return decode_access_token(token)


async def get_current_user(
    db: AsyncIOMotorDatabase = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> Dict[str, Any]:
    doc = await db.users.find_one({"_id": to_object_id(user_id)}, PRIVATE_FIELDS)
    if not doc:
        # Token válido de una cuenta que ya no existe
        raise _unauthorized("Usuario no encontrado")
    return to_id(doc)
