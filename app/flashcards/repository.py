"""
Flashcards repository - Data Access Layer for flashcard sets and flashcards.
Handles all database operations for FlashcardSet and Flashcard entities.
Set lookups filter by user_id for security.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence
from uuid import uuid4

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import FlashcardSetNotFoundError
from app.flashcards.models import Flashcard, FlashcardSet
from app.flashcards.schemas import NewCard

logger = logging.getLogger(__name__)


class FlashcardSetRepository:
    """Repository for FlashcardSet CRUD operations with user filtering."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_id: str, grade: int, subject: str, topic: str) -> FlashcardSet:
        """
        Create a new, not yet completed set for a user.

        Args:
            user_id: Owner user ID
            grade: School grade
            subject: Subject name
            topic: Free-text topic

        Returns:
            Created FlashcardSet entity
        """
        now = datetime.now(timezone.utc)
        flashcard_set = FlashcardSet(
            id=str(uuid4()),
            user_id=user_id,
            grade=grade,
            subject=subject,
            topic=topic,
            completed=False,
            created_at=now,
            updated_at=now,
        )

        self.db.add(flashcard_set)
        await self.db.flush()

        logger.info(f"[FlashcardSetRepository] Created set: {flashcard_set.id} for user: {user_id}")
        return flashcard_set

    async def get_by_id(self, set_id: str, user_id: str) -> FlashcardSet:
        """
        Get a set owned by a user.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or owned by someone else
        """
        stmt = (
            select(FlashcardSet)
            .where(FlashcardSet.id == set_id)
            .where(FlashcardSet.user_id == user_id)
        )
        result = await self.db.execute(stmt)
        flashcard_set = result.scalar_one_or_none()

        if flashcard_set is None:
            raise FlashcardSetNotFoundError(f"Flashcard set not found: {set_id}")

        return flashcard_set

    async def get_all(self, user_id: str) -> Sequence[FlashcardSet]:
        """Get all sets of a user, newest first."""
        stmt = (
            select(FlashcardSet)
            .where(FlashcardSet.user_id == user_id)
            .order_by(FlashcardSet.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def mark_completed(self, set_id: str) -> None:
        """Set completed=True and refresh updated_at."""
        stmt = (
            update(FlashcardSet)
            .where(FlashcardSet.id == set_id)
            .values(completed=True, updated_at=datetime.now(timezone.utc))
        )
        await self.db.execute(stmt)
        await self.db.flush()

        logger.info(f"[FlashcardSetRepository] Marked set completed: {set_id}")

    async def delete(self, set_id: str, user_id: str) -> bool:
        """
        Delete a set and its cards.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or owned by someone else
        """
        flashcard_set = await self.get_by_id(set_id, user_id=user_id)

        await self.db.execute(delete(Flashcard).where(Flashcard.flashcard_set_id == set_id))
        await self.db.delete(flashcard_set)
        await self.db.flush()

        logger.info(f"[FlashcardSetRepository] Deleted set: {set_id}")
        return True


class FlashcardRepository:
    """Repository for Flashcard operations within a set."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def bulk_create(self, set_id: str, cards: List[NewCard]) -> List[Flashcard]:
        """
        Insert cards into a set, keeping input order.

        Args:
            set_id: Parent set ID
            cards: Cards to insert

        Returns:
            List of created Flashcard entities
        """
        now = datetime.now(timezone.utc)

        flashcards = []
        for card in cards:
            flashcard = Flashcard(
                id=str(uuid4()),
                flashcard_set_id=set_id,
                content=card.content,
                explanation=card.explanation,
                order_index=card.order_index,
                understood=False,
                needs_review=False,
                is_explanatory=card.is_explanatory,
                created_at=now,
            )
            self.db.add(flashcard)
            flashcards.append(flashcard)

        await self.db.flush()

        logger.info(f"[FlashcardRepository] Bulk created {len(flashcards)} flashcards in set: {set_id}")
        return flashcards

    async def get_by_set(self, set_id: str) -> Sequence[Flashcard]:
        """Get the cards of a set ordered by order_index."""
        stmt = (
            select(Flashcard)
            .where(Flashcard.flashcard_set_id == set_id)
            .order_by(Flashcard.order_index.asc(), Flashcard.created_at.asc())
        )
        result = await self.db.execute(stmt)
        return result.scalars().all()

    async def update_flags(self, flashcard_id: str, understood: bool, needs_review: bool) -> Optional[Flashcard]:
        """
        Overwrite a card's study flags.

        Returns:
            The updated card, or None when it no longer exists
        """
        stmt = select(Flashcard).where(Flashcard.id == flashcard_id)
        result = await self.db.execute(stmt)
        flashcard = result.scalar_one_or_none()

        if flashcard is None:
            logger.warning(f"[FlashcardRepository] Flag update for missing flashcard: {flashcard_id}")
            return None

        flashcard.understood = understood
        flashcard.needs_review = needs_review
        await self.db.flush()

        logger.info(
            f"[FlashcardRepository] Updated flags for flashcard: {flashcard_id}, "
            f"understood={understood}, needs_review={needs_review}"
        )
        return flashcard
