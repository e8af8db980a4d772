"""
Accounting Notes Backend: Topic and Notes Route Handlers
========================================================

What:  Topics of a category (search, CRUD, previous/next) and the notes of a
       topic. PUT .../notes runs the narration pipeline.
Who:   Frontend topic list, reader view and admin editor.

PUT .../notes always answers 200 once the text is saved: a failed narration
shows up as an unchanged (or empty) audio_url, not as an error.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ApiResponse, ErrorResponse
from app.schemas.topic import (
    ContentRequest,
    NotesResponse,
    TopicDetailResponse,
    TopicRequest,
    TopicResponse,
    TopicSummary,
)
from app.security import require_admin
from app.services.notes_service import notes_service
from app.services.topic_service import topic_service

router = APIRouter(prefix="/categories/{category_id}/topics", tags=["Topics"])

_ERRORS = {
    403: {"description": "Admin mode required", "model": ErrorResponse},
    404: {"description": "Category or topic not found", "model": ErrorResponse},
    409: {"description": "Title already used in this category", "model": ErrorResponse},
}


@router.get(
    "",
    response_model=ApiResponse[List[TopicSummary]],
    responses={404: _ERRORS[404]},
    summary="List topics of a category",
)
async def list_topics(
    category_id: UUID,
    title: Optional[str] = Query(default=None, description="Case-insensitive title fragment"),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[TopicSummary]]:
    topics = await topic_service.list_topics(db, category_id, title)
    return ApiResponse(message=["Uzyskanie tematów udane"], data=topics)


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse[TopicResponse],
    responses=_ERRORS,
    dependencies=[Depends(require_admin)],
    summary="Create a topic",
)
async def create_topic(
    category_id: UUID,
    body: TopicRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TopicResponse]:
    topic = await topic_service.create(db, category_id, body.title)
    return ApiResponse(
        status_code=status.HTTP_201_CREATED,
        message=["Dodawanie tematu udane"],
        data=topic,
    )


@router.get(
    "/{topic_id}",
    response_model=ApiResponse[TopicDetailResponse],
    responses={404: _ERRORS[404]},
    summary="Get a topic with its previous and next topic",
)
async def get_topic(
    category_id: UUID,
    topic_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TopicDetailResponse]:
    detail = await topic_service.get_topic(db, category_id, topic_id)
    return ApiResponse(message=["Uzyskanie tematu udane"], data=detail)


@router.put(
    "/{topic_id}",
    response_model=ApiResponse[TopicResponse],
    responses=_ERRORS,
    dependencies=[Depends(require_admin)],
    summary="Rename a topic",
)
async def update_topic(
    category_id: UUID,
    topic_id: UUID,
    body: TopicRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TopicResponse]:
    topic = await topic_service.update(db, category_id, topic_id, body.title)
    return ApiResponse(message=["Aktualizacja tematu udane"], data=topic)


@router.delete(
    "/{topic_id}",
    response_model=ApiResponse[TopicResponse],
    responses={403: _ERRORS[403], 404: _ERRORS[404]},
    dependencies=[Depends(require_admin)],
    summary="Delete a topic and its narration",
)
async def delete_topic(
    category_id: UUID,
    topic_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[TopicResponse]:
    topic = await topic_service.delete(db, category_id, topic_id)
    return ApiResponse(message=["Usuwanie tematu udane"], data=topic)


@router.get(
    "/{topic_id}/notes",
    response_model=ApiResponse[NotesResponse],
    responses={404: _ERRORS[404]},
    summary="Get the notes and narration URL of a topic",
)
async def get_notes(
    category_id: UUID,
    topic_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NotesResponse]:
    notes = await notes_service.get_notes(db, category_id, topic_id)
    return ApiResponse(message=["Uzyskanie notatek udane"], data=notes)


@router.put(
    "/{topic_id}/notes",
    response_model=ApiResponse[NotesResponse],
    responses={403: _ERRORS[403], 404: _ERRORS[404]},
    dependencies=[Depends(require_admin)],
    summary="Save notes and regenerate their narration",
)
async def update_notes(
    category_id: UUID,
    topic_id: UUID,
    body: ContentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[NotesResponse]:
    notes = await notes_service.update_notes(db, category_id, topic_id, body.content)
    return ApiResponse(message=["Aktualizacja notatek udane"], data=notes)
