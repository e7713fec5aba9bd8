"""
Study router - API endpoints for live study sessions.
All routes require authentication; sessions are only visible to their owner.
"""

import logging

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.core.dependencies import Generator, Registry, Store
from app.core.exceptions import (
    EmptySetError,
    FlashcardSetNotFoundError,
    PersistenceError,
    SessionStateError,
    StudySessionNotFoundError,
)
from app.dependencies import CurrentUserContext
from app.study.schemas import ClassifyRequest, StudyError, StudySessionState
from app.study.service import StudyService

logger = logging.getLogger(__name__)

study_router = APIRouter(prefix="/study", tags=["Study"])


def _session_not_found(e: StudySessionNotFoundError, session_id: str) -> JSONResponse:
    logger.warning(f"[StudyRouter] Session not found: {session_id}")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": e.message, "code": "SESSION_NOT_FOUND"},
    )


def _invalid_state(e: SessionStateError, session_id: str) -> JSONResponse:
    logger.warning(f"[StudyRouter] Invalid state for session {session_id}: {e.message}")
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"error": e.message, "code": "INVALID_SESSION_STATE"},
    )


@study_router.post(
    "/sets/{set_id}/sessions",
    response_model=StudySessionState,
    status_code=status.HTTP_201_CREATED,
    summary="Start a study session",
    description="Load a set's cards in order and start a new study session on it.",
    responses={
        201: {"model": StudySessionState, "description": "Session started"},
        401: {"description": "Not authenticated"},
        404: {"model": StudyError, "description": "Set not found"},
        422: {"model": StudyError, "description": "Set has no cards"},
        503: {"model": StudyError, "description": "Storage unavailable, try again"},
    },
)
async def start_session(
    set_id: str,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    registry: Registry,
) -> StudySessionState:
    """Start studying a set."""
    logger.info(f"[StudyRouter] Starting session on set: {set_id}, user: {context.user_id}")

    try:
        service = StudyService(store, generator, registry)
        return await service.start_session(context, set_id)
    except FlashcardSetNotFoundError as e:
        logger.warning(f"[StudyRouter] Set not found: {set_id}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": e.message, "code": "SET_NOT_FOUND"},
        )
    except EmptySetError as e:
        logger.warning(f"[StudyRouter] Empty set: {set_id}")
        return JSONResponse(
            status_code=422,
            content={"error": e.message, "code": "EMPTY_SET"},
        )
    except PersistenceError as e:
        logger.error(f"[StudyRouter] Could not load set {set_id}: {e.message}")
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": e.message, "code": "STORE_ERROR"},
        )


@study_router.get(
    "/sessions/{session_id}",
    response_model=StudySessionState,
    status_code=status.HTTP_200_OK,
    summary="Get study session state",
    responses={
        200: {"model": StudySessionState, "description": "Current session state"},
        401: {"description": "Not authenticated"},
        404: {"model": StudyError, "description": "Session not found"},
    },
)
async def get_session(
    session_id: str,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    registry: Registry,
) -> StudySessionState:
    try:
        service = StudyService(store, generator, registry)
        return await service.get_session(context, session_id)
    except StudySessionNotFoundError as e:
        return _session_not_found(e, session_id)


@study_router.post(
    "/sessions/{session_id}/classify",
    response_model=StudySessionState,
    status_code=status.HTTP_200_OK,
    summary="Classify the current card",
    description=(
        "Mark the current card as understood or as needing review and advance. "
        "Classifying the last card either generates explanatory cards for the "
        "review list (once per session) or completes the session."
    ),
    responses={
        200: {"model": StudySessionState, "description": "Updated session state"},
        401: {"description": "Not authenticated"},
        404: {"model": StudyError, "description": "Session not found"},
        409: {"model": StudyError, "description": "Session is not active or card is stale"},
    },
)
async def classify_card(
    session_id: str,
    request: ClassifyRequest,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    registry: Registry,
) -> StudySessionState:
    """Classify the current card."""
    logger.info(f"[StudyRouter] Classify {request.verdict.value} in session: {session_id}")

    try:
        service = StudyService(store, generator, registry)
        return await service.classify(context, session_id, request.verdict, card_id=request.card_id)
    except StudySessionNotFoundError as e:
        return _session_not_found(e, session_id)
    except SessionStateError as e:
        return _invalid_state(e, session_id)


@study_router.post(
    "/sessions/{session_id}/restart",
    response_model=StudySessionState,
    status_code=status.HTTP_200_OK,
    summary="Restart a completed session",
    description=(
        "Go back to the first card of a completed session. Explanatory cards already "
        "added stay in the sequence. Repeating the call before any card is classified "
        "returns the same state."
    ),
    responses={
        200: {"model": StudySessionState, "description": "Restarted session state"},
        401: {"description": "Not authenticated"},
        404: {"model": StudyError, "description": "Session not found"},
        409: {"model": StudyError, "description": "Session has not completed yet"},
    },
)
async def restart_session(
    session_id: str,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    registry: Registry,
) -> StudySessionState:
    logger.info(f"[StudyRouter] Restarting session: {session_id}")

    try:
        service = StudyService(store, generator, registry)
        return await service.restart(context, session_id)
    except StudySessionNotFoundError as e:
        return _session_not_found(e, session_id)
    except SessionStateError as e:
        return _invalid_state(e, session_id)


@study_router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="End a study session",
    responses={
        204: {"description": "Session ended"},
        401: {"description": "Not authenticated"},
        404: {"model": StudyError, "description": "Session not found"},
    },
)
async def end_session(
    session_id: str,
    context: CurrentUserContext,
    store: Store,
    generator: Generator,
    registry: Registry,
) -> None:
    try:
        service = StudyService(store, generator, registry)
        await service.end_session(context, session_id)
    except StudySessionNotFoundError as e:
        return _session_not_found(e, session_id)
