# campusnet/routers/users.py
from fastapi import APIRouter, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from ..db import get_db
from ..security import get_current_user
from ..schemas.user import UserOut, UserSnapshot
from ..services.directory import UserDirectory

router = APIRouter()

@router.get("/me", response_model=UserOut)
async def get_me(current=Depends(get_current_user)):
    return current

@router.get("/{user_id}", response_model=UserSnapshot)
async def get_user(
    user_id: str,
    db: AsyncIOMotorDatabase = Depends(get_db),
    current=Depends(get_current_user),
):
    """Ficha pública de un usuario (nombre, avatar y presencia)"""
    return await UserDirectory(db).require_snapshot(user_id)
