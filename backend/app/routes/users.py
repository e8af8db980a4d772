"""
Accounting Notes Backend: Admin Route Handlers
==============================================

What:  Admin account lookup/registration and entering/leaving edit mode.
How:   Login validates credentials through UserService and sets the `role`
       cookie; logout clears it.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.user import LoginRequest, UserResponse
from app.security import clear_admin_cookie, require_admin, set_admin_cookie
from app.services.user_service import user_service

router = APIRouter(prefix="/users", tags=["Users"])


@router.get(
    "/admin",
    response_model=ApiResponse[Optional[UserResponse]],
    summary="Get the admin account, if registered",
)
async def find_admin(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[Optional[UserResponse]]:
    admin = await user_service.find_admin(db)
    return ApiResponse(message=["Uzyskanie admina udane"], data=admin)


@router.post(
    "/admin/register",
    response_model=ApiResponse[UserResponse],
    responses={409: {"description": "Admin already registered", "model": ErrorResponse}},
    summary="Register the admin account",
)
async def register_admin(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    admin = await user_service.register_admin(db)
    return ApiResponse(message=["Rejestracja admina udana"], data=admin)


@router.post(
    "/admin/login",
    response_model=ApiResponse[UserResponse],
    responses={
        401: {"description": "Wrong password", "model": ErrorResponse},
        404: {"description": "Unknown username", "model": ErrorResponse},
    },
    summary="Enter edit mode",
)
async def login_admin(
    body: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserResponse]:
    admin = await user_service.login_admin(db, body.username, body.password)
    set_admin_cookie(response)
    return ApiResponse(message=["Witaj w trybie edycji, Adminie"], data=admin)


@router.post(
    "/admin/logout",
    response_model=ApiResponse[None],
    responses={403: {"description": "Not in edit mode", "model": ErrorResponse}},
    dependencies=[Depends(require_admin)],
    summary="Leave edit mode",
)
async def logout_admin(response: Response) -> ApiResponse[None]:
    clear_admin_cookie(response)
    return ApiResponse(message=["Wylogowanie z trybu edycji udane"])
