from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field


class WechatLoginRequest(BaseModel):
    code: str = Field(..., min_length=1, max_length=512)
    type: Literal["open", "mp"] = "open"


class PasswordLoginRequest(BaseModel):
    phone_number: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1, max_length=256)


class VerifyTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    user_id: str
    expires_at: datetime


class VerifiedUserData(BaseModel):
    user_id: str
    union_id: str


class VerifyTokenResponse(BaseModel):
    success: bool = True
    data: VerifiedUserData


class UserInfoResponse(BaseModel):
    user_id: str
    union_id: str
    phone_number: str | None = None
    email: str | None = None
    last_login_at: datetime | None = None


class SuccessResponse(BaseModel):
    success: bool = True
