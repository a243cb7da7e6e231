from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str
    role: Optional[str] = None


class ChangePasswordRequest(BaseModel):
    new_password: str = Field(..., min_length=6)


class NavigationItem(BaseModel):
    title: str
    path: str


class NavigationResponse(BaseModel):
    main: List[NavigationItem] = []
    admin: List[NavigationItem] = []


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: str
    user_metadata: Dict[str, Any] = {}
    navigation: NavigationResponse
