"""
Flashcards service - Business logic for the dashboard and set management.
Set creation goes through the SetCreationWizard.
"""

import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.context import UserContext
from app.flashcards.models import FlashcardSet
from app.flashcards.repository import FlashcardRepository, FlashcardSetRepository
from app.flashcards.schemas import (
    DashboardResponse,
    FlashcardRead,
    FlashcardSetCreate,
    FlashcardSetCreated,
    FlashcardSetDetail,
    FlashcardSetRead,
)
from app.flashcards.wizard import SetCreationWizard, SetGenerator, SetStore
from app.study.registry import StudySessionRegistry

logger = logging.getLogger(__name__)


class FlashcardSetService:
    """Service for a user's flashcard sets."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.set_repo = FlashcardSetRepository(db)
        self.flashcard_repo = FlashcardRepository(db)

    # ═══════════════════════════════════════════════════════════════════════
    # DASHBOARD
    # ═══════════════════════════════════════════════════════════════════════

    async def list_sets(self, user_id: str) -> DashboardResponse:
        """
        Split a user's sets into current and past.

        Sets stay newest first within each group.
        """
        logger.info(f"[FlashcardSetService] Listing sets for user: {user_id}")

        sets = await self.set_repo.get_all(user_id=user_id)
        current = [self._set_to_read_dto(s) for s in sets if not s.completed]
        past = [self._set_to_read_dto(s) for s in sets if s.completed]

        total = len(sets)
        completed = len(past)
        percentage = round(completed / total * 100) if total else 0

        return DashboardResponse(
            current=current,
            past=past,
            total_sets=total,
            completed_sets=completed,
            completion_percentage=percentage,
        )

    async def get_set_detail(self, set_id: str, user_id: str) -> FlashcardSetDetail:
        """Get a set with its ordered cards."""
        logger.info(f"[FlashcardSetService] Getting set: {set_id} for user: {user_id}")

        flashcard_set = await self.set_repo.get_by_id(set_id, user_id=user_id)
        cards = await self.flashcard_repo.get_by_set(set_id)

        return FlashcardSetDetail(
            **self._set_to_read_dto(flashcard_set).model_dump(),
            flashcards=[FlashcardRead.model_validate(c) for c in cards],
        )

    async def delete_set(
        self,
        set_id: str,
        user_id: str,
        registry: Optional[StudySessionRegistry] = None,
    ) -> bool:
        """
        Delete a set and all its cards.

        Study sessions open on the set are dropped from the registry so they
        stop writing to rows that no longer exist.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or not owned by the user
        """
        logger.info(f"[FlashcardSetService] Deleting set: {set_id} for user: {user_id}")
        deleted = await self.set_repo.delete(set_id, user_id=user_id)
        if registry is not None:
            registry.remove_for_set(set_id, user_id)
        return deleted

    # ═══════════════════════════════════════════════════════════════════════
    # DTO TRANSFORMATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _set_to_read_dto(self, flashcard_set: FlashcardSet) -> FlashcardSetRead:
        return FlashcardSetRead(
            id=flashcard_set.id,
            grade=flashcard_set.grade,
            subject=flashcard_set.subject,
            topic=flashcard_set.topic,
            completed=flashcard_set.completed,
            created_at=flashcard_set.created_at,
            updated_at=flashcard_set.updated_at,
        )


async def create_set_with_wizard(
    context: UserContext,
    data: FlashcardSetCreate,
    store: SetStore,
    generator: SetGenerator,
    card_count: int,
) -> FlashcardSetCreated:
    """
    Walk the creation wizard through its three steps and submit it.

    Raises:
        WizardValidationError: If a step value is rejected
        CardGenerationError: If card generation fails (the set is discarded)
        PersistenceError: If the store fails
    """
    wizard = SetCreationWizard(context, store, generator, card_count=card_count)

    wizard.select_grade(data.grade)
    wizard.next_step()
    wizard.select_subject(data.subject)
    wizard.next_step()
    wizard.enter_topic(data.topic)

    flashcard_set, cards = await wizard.submit()

    return FlashcardSetCreated(
        flashcard_set=FlashcardSetRead.model_validate(flashcard_set),
        created_cards=len(cards),
    )


def get_flashcard_set_service(db: AsyncSession) -> FlashcardSetService:
    """Factory function for FlashcardSetService."""
    return FlashcardSetService(db)
