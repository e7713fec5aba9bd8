"""
Analysis router - API endpoint for per-set study progress.
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.schemas import AnalysisError, SetAnalysis
from app.analysis.service import get_analysis_service
from app.core.exceptions import FlashcardSetNotFoundError
from app.database import get_db
from app.dependencies import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/analysis", tags=["Analysis"])


@router.get(
    "/{set_id}",
    response_model=SetAnalysis,
    status_code=status.HTTP_200_OK,
    summary="Analyze a set",
    description="Totals, completion rate and per-card outcome for one of the user's sets.",
    responses={
        200: {"model": SetAnalysis, "description": "Set analysis"},
        401: {"description": "Not authenticated"},
        404: {"model": AnalysisError, "description": "Set not found"},
    },
)
async def analyze_set(
    set_id: str,
    current_user: CurrentUser,
    db: AsyncSession = Depends(get_db),
) -> SetAnalysis:
    """
    Analyze a set from the flags stored while studying it.

    Each card is reported as understood, needs_review or not_attempted.
    """
    logger.info(f"[AnalysisRouter] Analyzing set: {set_id}, user: {current_user.id}")

    try:
        service = get_analysis_service(db)
        return await service.analyze_set(set_id, user_id=current_user.id)
    except FlashcardSetNotFoundError as e:
        logger.warning(f"[AnalysisRouter] Set not found: {set_id}")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": e.message, "code": "SET_NOT_FOUND"},
        )
