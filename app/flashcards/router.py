"""
Flashcards router - API endpoints for flashcard sets and the dashboard.
All routes require authentication and filter by user.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.dependencies import AppSettings, Generator, Registry, Store
from app.core.exceptions import (
    FlashcardSetNotFoundError,
    FormatError,
    GeneratorConfigError,
    PersistenceError,
    UpstreamError,
    WizardValidationError,
)
from app.database import get_db
from app.dependencies import CurrentUser, CurrentUserContext
from app.flashcards.schemas import (
    DashboardResponse,
    FlashcardError,
    FlashcardSetCreate,
    FlashcardSetCreated,
    FlashcardSetDetail,
    SubjectsResponse,
)
from app.flashcards.service import create_set_with_wizard, get_flashcard_set_service

logger = logging.getLogger(__name__)

sets_router = APIRouter(prefix="/sets", tags=["Flashcard Sets"])


@sets_router.get(
    "/subjects",
    response_model=SubjectsResponse,
    status_code=status.HTTP_200_OK,
    summary="List subjects and grades",
    description="Choices offered by the set creation steps.",
)
async def list_subjects() -> SubjectsResponse:
    return SubjectsResponse()


@sets_router.get(
    "",
    response_model=DashboardResponse,
    status_code=status.HTTP_200_OK,
    summary="Dashboard",
    description="The user's sets split into current and past, with completion totals.",
    responses={
        200: {"model": DashboardResponse, "description": "Dashboard"},
        401: {"description": "Not authenticated"},
    },
)
async def list_sets(
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    """List all sets for the authenticated user."""
    logger.info(f"[SetsRouter] Listing sets, user: {current_user.id}")

    service = get_flashcard_set_service(db)
    return await service.list_sets(user_id=current_user.id)


@sets_router.post(
    "",
    response_model=FlashcardSetCreated,
    status_code=status.HTTP_201_CREATED,
    summary="Create a set",
    description=(
        "Create a set from grade, subject and topic and fill it with AI-generated "
        "flashcards. If generation fails the set is not kept."
    ),
    responses={
        201: {"model": FlashcardSetCreated, "description": "Set created with cards"},
        400: {"model": FlashcardError, "description": "Invalid step value"},
        401: {"description": "Not authenticated"},
        502: {"model": FlashcardError, "description": "AI service failed"},
        503: {"model": FlashcardError, "description": "AI service not configured or storage unavailable"},
    },
)
async def create_set(
    set_data: FlashcardSetCreate,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    settings: AppSettings,
) -> FlashcardSetCreated:
    """Create and populate a new set."""
    logger.info(
        f"[SetsRouter] Creating set: grade={set_data.grade}, subject={set_data.subject}, "
        f"user: {context.user_id}"
    )

    try:
        return await create_set_with_wizard(
            context,
            set_data,
            store,
            generator,
            card_count=settings.default_card_count,
        )
    except WizardValidationError as e:
        logger.warning(f"[SetsRouter] Invalid step value: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"error": e.message, "code": "INVALID_STEP"},
        )
    except GeneratorConfigError as e:
        logger.error(f"[SetsRouter] AI not configured: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": e.message, "code": "AI_NOT_CONFIGURED"},
        )
    except UpstreamError as e:
        logger.error(f"[SetsRouter] AI generation failed: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": e.message, "code": "AI_SERVICE_ERROR"},
        )
    except FormatError as e:
        logger.error(f"[SetsRouter] AI reply unusable: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_502_BAD_GATEWAY,
            content={"error": e.message, "code": "AI_FORMAT_ERROR"},
        )
    except PersistenceError as e:
        logger.error(f"[SetsRouter] Could not save set: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": e.message, "code": "STORE_ERROR"},
        )


@sets_router.get(
    "/{set_id}",
    response_model=FlashcardSetDetail,
    status_code=status.HTTP_200_OK,
    summary="Get set by ID",
    description="Get a set with all its flashcards in order.",
    responses={
        200: {"model": FlashcardSetDetail, "description": "Set with flashcards"},
        401: {"description": "Not authenticated"},
        404: {"model": FlashcardError, "description": "Set not found"},
    },
)
async def get_set(
    set_id: str,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> FlashcardSetDetail:
    logger.info(f"[SetsRouter] Getting set: {set_id}, user: {current_user.id}")

    try:
        service = get_flashcard_set_service(db)
        return await service.get_set_detail(set_id, user_id=current_user.id)
    except FlashcardSetNotFoundError as e:
        logger.warning(f"[SetsRouter] Set not found: {set_id}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": e.message, "code": "SET_NOT_FOUND"},
        )


@sets_router.delete(
    "/{set_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete set",
    description="Delete a set and all its flashcards. Study sessions open on it are ended.",
    responses={
        204: {"description": "Set deleted"},
        401: {"description": "Not authenticated"},
        404: {"model": FlashcardError, "description": "Set not found"},
    },
)
async def delete_set(
    set_id: str,
    current_user: CurrentUser,
    registry: Registry,
    db: AsyncSession = Depends(get_db),
) -> None:
    logger.info(f"[SetsRouter] Deleting set: {set_id}, user: {current_user.id}")

    try:
        service = get_flashcard_set_service(db)
        await service.delete_set(set_id, user_id=current_user.id, registry=registry)
    except FlashcardSetNotFoundError as e:
        logger.warning(f"[SetsRouter] Set not found: {set_id}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": e.message, "code": "SET_NOT_FOUND"},
        )
