from pydantic import BaseModel, EmailStr, Field
from uuid import UUID
from typing import Literal, Optional

Role = Literal["doctor", "patient"]

class SignupRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8)
    role: Role

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    role: Optional[Role] = None

class UserInfo(BaseModel):
    id: UUID
    email: str
    role: str
    profile_id: Optional[UUID] = None

class LoginResponse(BaseModel):
    access_token: str
    token_type: str
    user: UserInfo

class SessionContext(BaseModel):
    """The authenticated caller, handed explicitly to every handler."""
    user_id: UUID
    email: str
    role: str
    profile_id: Optional[UUID] = None
    token: str

    @property
    def is_doctor(self) -> bool:
        return self.role == "doctor"

    @property
    def is_patient(self) -> bool:
        return self.role == "patient"
