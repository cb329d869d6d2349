from fastapi import APIRouter, Depends, HTTPException, status, Request
from pydantic import BaseModel, EmailStr, Field, field_validator
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo.errors import DuplicateKeyError
from ..db import get_db
from ..security import hash_password, verify_password, create_access_token, get_current_user
from ..middleware.rate_limit import limiter, SIGNUP_LIMIT, LOGIN_LIMIT
from ..schemas.user import Role, UserOut
from ..utils import to_id, to_object_id, utcnow
import logging

logger = logging.getLogger(__name__)

router = APIRouter()

def validate_password_strength(password: str) -> str:
    """Al menos 6 caracteres y dentro del límite de bcrypt"""
    if len(password) < 6:
        raise ValueError("La contraseña debe tener al menos 6 caracteres")
    if len(password.encode("utf-8")) > 72:
        raise ValueError("La contraseña no puede exceder 72 bytes")
    if password.isdigit() or password.isalpha():
        logger.warning("Contraseña débil detectada (solo números o solo letras)")
    return password

class Signup(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=60)
    last_name: str = Field(..., min_length=1, max_length=60)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=72)
    role: Role = "student"
    university: str = Field(..., min_length=2, max_length=120)
    faculty: str | None = Field(None, max_length=120)
    bio: str | None = Field(None, max_length=500)
    profile_picture: str | None = None

    @field_validator("first_name", "last_name", "university")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("No puede estar vacío")
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return validate_password_strength(v)

class Login(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=UserOut)
@limiter.limit(SIGNUP_LIMIT)
async def signup(request: Request, payload: Signup, db: AsyncIOMotorDatabase = Depends(get_db)):
    email = payload.email.lower()
    if await db.users.find_one({"email": email}):
        raise HTTPException(409, "Email ya registrado")

    doc = payload.model_dump()
    doc["email"] = email
    doc["password_hash"] = hash_password(doc.pop("password"))
    doc["bio"] = doc.get("bio") or ""
    doc["profile_picture"] = doc.get("profile_picture") or ""
    doc["is_online"] = False
    doc["last_seen"] = utcnow()
    doc["created_at"] = doc["last_seen"]

    try:
        res = await db.users.insert_one(doc)
    except DuplicateKeyError:
        raise HTTPException(409, "Email ya registrado")
    logger.info(f"User {res.inserted_id} signed up as {payload.role}")
    return to_id(await db.users.find_one({"_id": res.inserted_id}, {"password_hash": 0}))

@router.post("/login")
@limiter.limit(LOGIN_LIMIT)
async def login(request: Request, payload: Login, db: AsyncIOMotorDatabase = Depends(get_db)):
    user = await db.users.find_one({"email": payload.email.lower()})
    if not user or not verify_password(payload.password, user.get("password_hash", "")):
        raise HTTPException(401, "Credenciales inválidas")

    # La presencia la mantiene auth; la mensajería solo la lee
    await db.users.update_one(
        {"_id": user["_id"]},
        {"$set": {"is_online": True, "last_seen": utcnow()}},
    )
    token = create_access_token(str(user["_id"]))
    return {"access_token": token, "token_type": "bearer"}

@router.post("/logout")
async def logout(db: AsyncIOMotorDatabase = Depends(get_db), current=Depends(get_current_user)):
    await db.users.update_one(
        {"_id": to_object_id(current["id"])},
        {"$set": {"is_online": False, "last_seen": utcnow()}},
    )
    return {"message": "Sesión cerrada"}
