from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from auth_center.api.deps import get_list_users_use_case, get_set_phone_password_use_case, require_admin
from auth_center.api.schemas.admin import (
    AdminUserResponse,
    PaginationResponse,
    SetPhonePasswordRequest,
    StatisticsResponse,
    UserListData,
    UserListResponse,
    VerifyAdminResponse,
)
from auth_center.api.schemas.auth import SuccessResponse
from auth_center.application.dto.auth import ListUsersInput, SetPhonePasswordInput
from auth_center.application.use_cases.list_users import ListUsersUseCase
from auth_center.application.use_cases.set_phone_password import SetPhonePasswordUseCase
from auth_center.domain.entities.user import User
from auth_center.domain.exceptions import NotFoundError, PhoneNumberInUseError, StoreError


router = APIRouter()


@router.get("/v1/admin/verify", response_model=VerifyAdminResponse)
def verify_admin(admin: User = Depends(require_admin)):
    return VerifyAdminResponse(is_admin=True, user_id=admin.id)


@router.get("/v1/admin/users", response_model=UserListResponse)
def list_users(
    page: int | None = Query(default=None),
    page_size: int | None = Query(default=None, alias="pageSize"),
    _admin: User = Depends(require_admin),
    use_case: ListUsersUseCase = Depends(get_list_users_use_case),
):
    try:
        output = use_case.execute(ListUsersInput(page=page, page_size=page_size))
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return UserListResponse(
        data=UserListData(
            users=[
                AdminUserResponse(
                    user_id=user.id,
                    union_id=user.union_id,
                    phone_number=user.phone_number,
                    email=user.email,
                    has_password=bool(user.password_hash),
                    last_login_at=user.last_login_at,
                    created_at=user.created_at,
                    updated_at=user.updated_at,
                )
                for user in output.users
            ],
            statistics=StatisticsResponse(
                total=output.statistics.total,
                with_password=output.statistics.with_password,
            ),
            pagination=PaginationResponse(
                total=output.total,
                page=output.page,
                page_size=output.page_size,
            ),
        )
    )


@router.post("/v1/admin/set-phone-password", response_model=SuccessResponse)
def set_phone_password(
    req: SetPhonePasswordRequest,
    _admin: User = Depends(require_admin),
    use_case: SetPhonePasswordUseCase = Depends(get_set_phone_password_use_case),
):
    try:
        use_case.execute(
            SetPhonePasswordInput(
                user_id=req.user_id,
                phone_number=req.phone_number,
                password=req.password,
            )
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except PhoneNumberInUseError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except StoreError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return SuccessResponse()
