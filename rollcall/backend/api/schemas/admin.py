# rollcall/backend/api/schemas/admin.py
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional, Literal

class LoginRequest(BaseModel):
    email: str
    password: str

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

class AdminResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    department: str
    role: str
    employee_id: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    token: Token
    user: AdminResponse


class AdminCreateRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(..., min_length=8, description="Stored only as a PBKDF2 hash.")
    phone: Optional[str] = None
    department: str = Field(..., min_length=1)
    role: Literal["admin", "lecturer", "discipline_master"] = "admin"
    employee_id: str = Field(..., min_length=1)

# Internal representation of JWT data
class TokenData(BaseModel):
    admin_id: Optional[str] = None
