from enum import Enum
from pydantic import BaseModel, EmailStr
from typing import Optional

class UserRole(str, Enum):
    CLIENT = "client"
    TRAINER = "trainer"
    ADMIN = "admin"

class AuthUser(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: UserRole = UserRole.CLIENT

class TokenData(BaseModel):
    id: str
    email: Optional[EmailStr] = None
    name: Optional[str] = None
    role: UserRole = UserRole.CLIENT
    exp: Optional[float] = None
