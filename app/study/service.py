"""
Study service - Starts, drives and ends live study sessions.
"""

import logging
from typing import Optional

from app.auth.context import UserContext
from app.flashcards.schemas import FlashcardRead, FlashcardSetRead
from app.study.controller import (
    StudyGenerator,
    StudySessionController,
    StudyStore,
    Verdict,
)
from app.study.registry import StudySessionRegistry
from app.study.schemas import CompletionSummary, NoticeRead, StudySessionState

logger = logging.getLogger(__name__)


class StudyService:
    """Service for live study sessions held in the registry."""

    def __init__(
        self,
        store: StudyStore,
        generator: StudyGenerator,
        registry: StudySessionRegistry,
    ):
        self.store = store
        self.generator = generator
        self.registry = registry

    async def start_session(self, context: UserContext, set_id: str) -> StudySessionState:
        """
        Load a set and register a new session for it.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or not owned by the user
            EmptySetError: If the set has no cards
        """
        logger.info(f"[StudyService] Starting session on set: {set_id} for user: {context.user_id}")

        controller = StudySessionController(context, set_id, self.store, self.generator)
        await controller.load()
        session_id = self.registry.add(controller)
        return self._to_state(session_id, controller)

    async def get_session(self, context: UserContext, session_id: str) -> StudySessionState:
        controller = self.registry.get(session_id, context.user_id)
        return self._to_state(session_id, controller)

    async def classify(
        self,
        context: UserContext,
        session_id: str,
        verdict: Verdict,
        card_id: Optional[str] = None,
    ) -> StudySessionState:
        """
        Raises:
            StudySessionNotFoundError: If the session is unknown to this user
            SessionStateError: If the session is not active or the card is stale
        """
        controller = self.registry.get(session_id, context.user_id)
        await controller.classify(verdict, card_id=card_id)
        return self._to_state(session_id, controller)

    async def restart(self, context: UserContext, session_id: str) -> StudySessionState:
        controller = self.registry.get(session_id, context.user_id)
        await controller.restart()
        return self._to_state(session_id, controller)

    async def end_session(self, context: UserContext, session_id: str) -> None:
        logger.info(f"[StudyService] Ending session: {session_id} for user: {context.user_id}")
        self.registry.remove(session_id, context.user_id)

    # ═══════════════════════════════════════════════════════════════════════
    # DTO TRANSFORMATIONS
    # ═══════════════════════════════════════════════════════════════════════

    def _to_state(self, session_id: str, controller: StudySessionController) -> StudySessionState:
        current = controller.current_card
        summary = None
        if controller.is_complete:
            summary = CompletionSummary(
                completed_cards=len(controller.cards),
                study_time=controller.study_time_display(),
            )

        return StudySessionState(
            session_id=session_id,
            phase=controller.phase,
            flashcard_set=FlashcardSetRead.model_validate(controller.flashcard_set),
            current_index=controller.cursor,
            total_cards=len(controller.cards),
            current_card=FlashcardRead.model_validate(current) if current else None,
            review_queue=[card.id for card in controller.review_queue],
            remediation_used=controller.remediation_used,
            started_at=controller.started_at,
            summary=summary,
            notices=[
                NoticeRead(level=n.level, message=n.message)
                for n in controller.drain_notices()
            ],
        )
