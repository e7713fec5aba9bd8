"""
Analysis service - Computes study progress for a set from its stored flags.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.analysis.schemas import CardAnalysis, CardStatus, SetAnalysis
from app.flashcards.models import Flashcard
from app.flashcards.repository import FlashcardRepository, FlashcardSetRepository

logger = logging.getLogger(__name__)


def card_status(flashcard: Flashcard) -> CardStatus:
    if flashcard.understood:
        return CardStatus.UNDERSTOOD
    if flashcard.needs_review:
        return CardStatus.NEEDS_REVIEW
    return CardStatus.NOT_ATTEMPTED


class AnalysisService:
    """Service for per-set analytics."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.set_repo = FlashcardSetRepository(db)
        self.flashcard_repo = FlashcardRepository(db)

    async def analyze_set(self, set_id: str, user_id: str) -> SetAnalysis:
        """
        Summarise the stored outcome of every card in a set.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or not owned by the user
        """
        logger.info(f"[AnalysisService] Analyzing set: {set_id} for user: {user_id}")

        flashcard_set = await self.set_repo.get_by_id(set_id, user_id=user_id)
        cards = await self.flashcard_repo.get_by_set(set_id)

        total = len(cards)
        understood = sum(1 for c in cards if c.understood)
        review = sum(1 for c in cards if c.needs_review)
        explanatory = sum(1 for c in cards if c.is_explanatory)
        rate = round(understood / total * 100, 1) if total else 0.0

        return SetAnalysis(
            set_id=flashcard_set.id,
            grade=flashcard_set.grade,
            subject=flashcard_set.subject,
            topic=flashcard_set.topic,
            completed=flashcard_set.completed,
            completed_at=flashcard_set.updated_at if flashcard_set.completed else None,
            total_cards=total,
            understood_cards=understood,
            review_cards=review,
            explanatory_cards=explanatory,
            completion_rate=rate,
            cards=[
                CardAnalysis(
                    id=c.id,
                    content=c.content,
                    explanation=c.explanation,
                    order_index=c.order_index,
                    is_explanatory=c.is_explanatory,
                    status=card_status(c),
                )
                for c in cards
            ],
        )


def get_analysis_service(db: AsyncSession) -> AnalysisService:
    """Factory function for AnalysisService."""
    return AnalysisService(db)
