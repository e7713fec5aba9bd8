"""
Set creation wizard - grade, then subject, then topic, then submit.

Each step is gated by `can_proceed()`. Submitting creates the set and
fills it with generated cards in one go.
"""

import logging
from typing import List, Optional, Protocol, Tuple

from app.auth.context import UserContext
from app.core.exceptions import (
    CardGenerationError,
    FlashcardSetNotFoundError,
    PersistenceError,
    WizardValidationError,
)
from app.flashcards.models import MAX_GRADE, MIN_GRADE, SUBJECTS, Flashcard, FlashcardSet
from app.flashcards.schemas import CardContent, NewCard

logger = logging.getLogger(__name__)

GRADE_STEP = 1
SUBJECT_STEP = 2
TOPIC_STEP = 3


class SetStore(Protocol):
    async def create_set(self, owner_id: str, grade: int, subject: str, topic: str) -> FlashcardSet: ...

    async def insert_cards(self, set_id: str, cards: List[NewCard]) -> List[Flashcard]: ...

    async def delete_set(self, set_id: str, owner_id: str) -> None: ...


class SetGenerator(Protocol):
    async def generate(self, grade: int, subject: str, topic: str, count: int) -> List[CardContent]: ...


class SetCreationWizard:
    """Collects grade, subject and topic for one new study set."""

    def __init__(
        self,
        context: UserContext,
        store: SetStore,
        generator: SetGenerator,
        card_count: int = 10,
    ):
        self.context = context
        self.store = store
        self.generator = generator
        self.card_count = card_count

        self.step = GRADE_STEP
        self.grade: Optional[int] = None
        self.subject = ""
        self.topic = ""

    def select_grade(self, grade: int) -> None:
        if not MIN_GRADE <= grade <= MAX_GRADE:
            raise WizardValidationError(f"Grade must be between {MIN_GRADE} and {MAX_GRADE}")
        self.grade = grade

    def select_subject(self, subject: str) -> None:
        if subject not in SUBJECTS:
            raise WizardValidationError(f"Unknown subject: {subject}")
        self.subject = subject

    def enter_topic(self, topic: str) -> None:
        self.topic = topic

    def can_proceed(self) -> bool:
        if self.step == GRADE_STEP:
            return self.grade is not None
        if self.step == SUBJECT_STEP:
            return self.subject != ""
        if self.step == TOPIC_STEP:
            return self.topic.strip() != ""
        return False

    def next_step(self) -> None:
        if self.step >= TOPIC_STEP:
            return
        if not self.can_proceed():
            raise WizardValidationError(f"Step {self.step} is not complete")
        self.step += 1

    def previous_step(self) -> None:
        if self.step > GRADE_STEP:
            self.step -= 1

    async def submit(self) -> Tuple[FlashcardSet, List[Flashcard]]:
        """
        Create the set, generate its cards and save them in order.

        If generation or saving fails, the new set is deleted again and
        the error is re-raised.

        Raises:
            WizardValidationError: If called before the topic step is complete
            CardGenerationError: If the generator fails
            PersistenceError: If the store fails
        """
        if self.step != TOPIC_STEP or not self.can_proceed():
            raise WizardValidationError("All steps must be completed before submitting")

        topic = self.topic.strip()
        logger.info(
            f"[SetCreationWizard] Creating set for user: {self.context.user_id}, "
            f"grade={self.grade}, subject={self.subject}, topic={topic}"
        )

        flashcard_set = await self.store.create_set(self.context.user_id, self.grade, self.subject, topic)

        try:
            contents = await self.generator.generate(self.grade, self.subject, topic, self.card_count)
            cards = await self.store.insert_cards(
                flashcard_set.id,
                [
                    NewCard(content=c.content, explanation=c.explanation, order_index=index)
                    for index, c in enumerate(contents)
                ],
            )
        except (CardGenerationError, PersistenceError) as e:
            logger.error(f"[SetCreationWizard] Populating set {flashcard_set.id} failed: {e.message}")
            await self._discard(flashcard_set)
            raise

        logger.info(f"[SetCreationWizard] Created set {flashcard_set.id} with {len(cards)} cards")
        return flashcard_set, cards

    async def _discard(self, flashcard_set: FlashcardSet) -> None:
        try:
            await self.store.delete_set(flashcard_set.id, self.context.user_id)
        except (PersistenceError, FlashcardSetNotFoundError) as e:
            logger.warning(f"[SetCreationWizard] Could not delete empty set {flashcard_set.id}: {e.message}")
