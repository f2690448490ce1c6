from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SetPhonePasswordRequest(BaseModel):
    user_id: str = Field(..., min_length=1, max_length=36)
    phone_number: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=6, max_length=256)


class AdminUserResponse(BaseModel):
    user_id: str
    union_id: str
    phone_number: str | None = None
    email: str | None = None
    has_password: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PaginationResponse(BaseModel):
    total: int
    page: int
    page_size: int


class StatisticsResponse(BaseModel):
    total: int
    with_password: int


class UserListData(BaseModel):
    users: list[AdminUserResponse]
    statistics: StatisticsResponse
    pagination: PaginationResponse


class UserListResponse(BaseModel):
    success: bool = True
    data: UserListData


class VerifyAdminResponse(BaseModel):
    success: bool = True
    is_admin: bool
    user_id: str
