"""
Study session controller - walks a learner through a set's flashcards.

Phases:
    ACTIVE                  cards are being classified one by one
    GENERATING_REMEDIATION  end of the sequence reached with cards to review
    COMPLETE                terminal until restart()

The in-memory session is the source of truth for traversal. Writes to the
Card Store are best-effort: a failed flag update or completion mark is
logged and reported as a notice, never allowed to stall the learner.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Awaitable, List, Optional, Protocol

from app.auth.context import UserContext
from app.core.exceptions import (
    CardGenerationError,
    EmptySetError,
    PersistenceError,
    SessionStateError,
)
from app.flashcards.models import Flashcard, FlashcardSet
from app.flashcards.schemas import CardContent, NewCard

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    ACTIVE = "active"
    GENERATING_REMEDIATION = "generating_remediation"
    COMPLETE = "complete"


class Verdict(str, Enum):
    UNDERSTOOD = "understood"
    NEEDS_REVIEW = "needs_review"


class NoticeLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notice:
    """A user-facing message about something that happened in the session."""

    level: NoticeLevel
    message: str


class StudyStore(Protocol):
    async def get_set(self, set_id: str, owner_id: str) -> FlashcardSet: ...

    async def list_cards(self, set_id: str) -> List[Flashcard]: ...

    async def insert_cards(self, set_id: str, cards: List[NewCard]) -> List[Flashcard]: ...

    async def update_card_flags(self, card_id: str, understood: bool, needs_review: bool) -> None: ...

    async def mark_set_completed(self, set_id: str) -> None: ...


class StudyGenerator(Protocol):
    async def generate_explanatory(
        self, grade: int, subject: str, topic: str, difficult_cards: List[str]
    ) -> List[CardContent]: ...


class StudySessionController:
    """
    Owns one learner's pass over a flashcard set.

    Cards marked as needing review are collected while traversing. When the
    last card is classified and that list is not empty, explanatory cards
    are generated once per session and appended to the sequence; otherwise
    the session completes and the set is marked completed.
    """

    def __init__(
        self,
        context: UserContext,
        set_id: str,
        store: StudyStore,
        generator: StudyGenerator,
    ):
        self.context = context
        self.set_id = set_id
        self.store = store
        self.generator = generator

        self.flashcard_set: Optional[FlashcardSet] = None
        self.cards: List[Flashcard] = []
        self.cursor = 0
        self.review_queue: List[Flashcard] = []
        self.phase = SessionPhase.ACTIVE
        self.remediation_used = False
        self.notices: List[Notice] = []
        self.started_at = datetime.now(timezone.utc)

        self._loaded = False
        self._restarted = False
        self._lock = asyncio.Lock()

    # ═══════════════════════════════════════════════════════════════════════
    # LOADING
    # ═══════════════════════════════════════════════════════════════════════

    async def load(self) -> None:
        """
        Fetch the set and its ordered cards.

        Raises:
            FlashcardSetNotFoundError: If the set is absent or not owned by the user
            EmptySetError: If the set has no cards
        """
        logger.info(f"[StudySession] Loading set: {self.set_id} for user: {self.context.user_id}")

        self.flashcard_set = await self.store.get_set(self.set_id, self.context.user_id)
        cards = await self.store.list_cards(self.set_id)

        if not cards:
            raise EmptySetError(f"No flashcards found in set: {self.set_id}")

        self.cards = list(cards)
        self.cursor = 0
        self.review_queue = []
        self.phase = SessionPhase.ACTIVE
        self._loaded = True
        self._restarted = False

        logger.info(f"[StudySession] Loaded {len(self.cards)} cards for set: {self.set_id}")

    # ═══════════════════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════════════════

    @property
    def current_card(self) -> Optional[Flashcard]:
        if self.phase != SessionPhase.ACTIVE or not 0 <= self.cursor < len(self.cards):
            return None
        return self.cards[self.cursor]

    @property
    def is_complete(self) -> bool:
        return self.phase == SessionPhase.COMPLETE

    def study_time_display(self, now: Optional[datetime] = None) -> str:
        """Elapsed time since the session started, in whole minutes."""
        now = now or datetime.now(timezone.utc)
        minutes = round((now - self.started_at).total_seconds() / 60)
        if minutes <= 0:
            return "less than 1 minute"
        return f"{minutes} minute" if minutes == 1 else f"{minutes} minutes"

    def drain_notices(self) -> List[Notice]:
        """Return and forget the notices collected so far."""
        notices, self.notices = self.notices, []
        return notices

    # ═══════════════════════════════════════════════════════════════════════
    # TRANSITIONS
    # ═══════════════════════════════════════════════════════════════════════

    async def classify(self, verdict: Verdict, card_id: Optional[str] = None) -> None:
        """
        Classify the current card and advance.

        Args:
            verdict: Whether the learner understood the card
            card_id: When given, must be the current card's id

        Raises:
            SessionStateError: If the session is not active or card_id is stale
        """
        async with self._lock:
            if not self._loaded:
                raise SessionStateError("Session has not been loaded")
            if self.phase != SessionPhase.ACTIVE:
                raise SessionStateError(f"Cannot classify cards while session is {self.phase.value}")

            card = self.cards[self.cursor]
            if card_id is not None and card_id != card.id:
                raise SessionStateError(f"Card {card_id} is not the current card")

            understood = verdict == Verdict.UNDERSTOOD
            await self._sync_best_effort(
                self.store.update_card_flags(card.id, understood=understood, needs_review=not understood),
                failure_message="Progress could not be saved",
            )
            card.understood = understood
            card.needs_review = not understood

            if verdict == Verdict.NEEDS_REVIEW and all(c.id != card.id for c in self.review_queue):
                self.review_queue.append(card)
                self._notify(NoticeLevel.INFO, "Added to review list")

            if self.cursor < len(self.cards) - 1:
                self.cursor += 1
                return

            if self.review_queue and not self.remediation_used:
                await self._remediate()
            else:
                await self._complete()

    async def restart(self) -> None:
        """
        Start another pass over the same (possibly lengthened) card list.

        Stored flags are left as they are until cards are classified again.
        Restarting again before the restarted pass has progressed changes
        nothing.

        Raises:
            SessionStateError: If the session has not completed yet
        """
        async with self._lock:
            if self._restarted and self._at_pass_start():
                return
            if self.phase != SessionPhase.COMPLETE:
                raise SessionStateError("Only a completed session can be restarted")

            self.cursor = 0
            self.review_queue = []
            self.phase = SessionPhase.ACTIVE
            self._restarted = True
            self._notify(NoticeLevel.INFO, "Study session restarted")

            logger.info(f"[StudySession] Restarted session for set: {self.set_id}")

    async def _remediate(self) -> None:
        self.phase = SessionPhase.GENERATING_REMEDIATION
        self.remediation_used = True
        difficult = [card.content for card in self.review_queue]

        logger.info(f"[StudySession] Generating explanations for {len(difficult)} cards in set: {self.set_id}")

        try:
            contents = await self.generator.generate_explanatory(
                self.flashcard_set.grade,
                self.flashcard_set.subject,
                self.flashcard_set.topic,
                difficult,
            )
            first_new = len(self.cards)
            new_cards = await self.store.insert_cards(
                self.set_id,
                [
                    NewCard(
                        content=c.content,
                        explanation=c.explanation,
                        order_index=first_new + index,
                        is_explanatory=True,
                    )
                    for index, c in enumerate(contents)
                ],
            )
        except (CardGenerationError, PersistenceError) as e:
            logger.error(f"[StudySession] Remediation failed for set {self.set_id}: {e.message}")
            self._notify(NoticeLevel.ERROR, "Explanations could not be generated")
            await self._complete()
            return

        if not new_cards:
            logger.warning(f"[StudySession] Remediation produced no cards for set: {self.set_id}")
            self._notify(NoticeLevel.ERROR, "Explanations could not be generated")
            await self._complete()
            return

        self.cards.extend(new_cards)
        self.cursor = first_new
        self.review_queue = []
        self.phase = SessionPhase.ACTIVE
        self._notify(NoticeLevel.SUCCESS, "Explanations generated, let's review them")

        logger.info(f"[StudySession] Appended {len(new_cards)} explanatory cards to set: {self.set_id}")

    async def _complete(self) -> None:
        self.phase = SessionPhase.COMPLETE
        self.flashcard_set.completed = True

        synced = await self._sync_best_effort(
            self.store.mark_set_completed(self.set_id),
            failure_message="Completion status could not be saved",
        )
        if synced:
            self._notify(NoticeLevel.SUCCESS, "Study session completed")

        logger.info(f"[StudySession] Session complete for set: {self.set_id}")

    async def _sync_best_effort(self, write: Awaitable[None], failure_message: str) -> bool:
        """
        Await a Card Store write whose failure must not block the session.

        Local state stays authoritative either way; callers only use the
        result to pick a notice.
        """
        try:
            await write
        except PersistenceError as e:
            logger.warning(f"[StudySession] Best-effort write failed for set {self.set_id}: {e.message}")
            self._notify(NoticeLevel.ERROR, failure_message)
            return False
        return True

    def _at_pass_start(self) -> bool:
        return (
            self._loaded
            and self.phase == SessionPhase.ACTIVE
            and self.cursor == 0
            and not self.review_queue
        )

    def _notify(self, level: NoticeLevel, message: str) -> None:
        self.notices.append(Notice(level=level, message=message))
