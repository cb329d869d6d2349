from pydantic import BaseModel, EmailStr
from typing import Optional, Literal

Role = Literal["student", "teacher", "admin"]

class UserSnapshot(BaseModel):
    """Lo que la mensajería necesita saber de un usuario del directorio."""
    id: str
    first_name: str
    last_name: str
    name: str
    profile_picture: Optional[str] = None
    is_online: bool = False
    last_seen: Optional[str] = None

class UserOut(BaseModel):
    id: str
    first_name: str
    last_name: str
    email: EmailStr
    role: Role = "student"
    university: str
    faculty: Optional[str] = None
    profile_picture: Optional[str] = None
    bio: Optional[str] = None
    is_online: bool = False
    last_seen: Optional[str] = None
    created_at: Optional[str] = None
