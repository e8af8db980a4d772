"""
Accounting Notes Backend: Category Route Handlers
=================================================

What:  Category listing (with topic titles for the sidebar) and admin CRUD.
Who:   Frontend sidebar and the admin category editor.
"""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.category import CategoryRecord, CategoryRequest, CategoryWithTopics
from app.schemas.common import ApiResponse, ErrorResponse
from app.security import require_admin
from app.services.category_service import category_service

router = APIRouter(prefix="/categories", tags=["Categories"])

_ERRORS = {
    403: {"description": "Admin mode required", "model": ErrorResponse},
    404: {"description": "Category not found", "model": ErrorResponse},
    409: {"description": "Name already used", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[List[CategoryWithTopics]],
    summary="List categories with their topic titles",
)
async def list_categories(
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[CategoryWithTopics]]:
    categories = await category_service.list_categories(db)
    return ApiResponse(message=["Uzyskanie kategorii udane"], data=categories)


@router.get(
    "/{category_id}",
    response_model=ApiResponse[CategoryRecord],
    responses={404: _ERRORS[404]},
    summary="Get one category",
)
async def get_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryRecord]:
    category = await category_service.get_category(db, category_id)
    return ApiResponse(message=["Uzyskanie kategorii udane"], data=category)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[CategoryRecord],
    responses={403: _ERRORS[403], 409: _ERRORS[409]},
    dependencies=[Depends(require_admin)],
    summary="Create a category",
)
async def create_category(
    body: CategoryRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryRecord]:
    category = await category_service.create(db, body.name)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        message=["Dodawanie Kategorii udane"],
        data=category,
    )


@router.put(
    "/{category_id}",
    response_model=ApiResponse[CategoryRecord],
    responses=_ERRORS,
    dependencies=[Depends(require_admin)],
    summary="Rename a category",
)
async def update_category(
    category_id: UUID,
    body: CategoryRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryRecord]:
    category = await category_service.update(db, category_id, body.name)
    return ApiResponse(message=["Aktualizowanie Kategorii udane"], data=category)


@router.delete(
    "/{category_id}",
    response_model=ApiResponse[CategoryRecord],
    responses={403: _ERRORS[403], 404: _ERRORS[404]},
    dependencies=[Depends(require_admin)],
    summary="Delete a category with its topics and narrations",
)
async def delete_category(
    category_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[CategoryRecord]:
    category = await category_service.delete(db, category_id)
    return ApiResponse(message=["Usuwanie Kategorii udane"], data=category)
