"""
Card Store - the persistence contract used by set creation and study sessions.

Each operation runs in its own short-lived session and transaction, so a
study session can outlive the request that started it.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, List

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.exceptions import PersistenceError
from app.flashcards.models import Flashcard, FlashcardSet
from app.flashcards.repository import FlashcardRepository, FlashcardSetRepository
from app.flashcards.schemas import NewCard

logger = logging.getLogger(__name__)


class CardStore:
    """Owner-scoped access to flashcard sets and their cards."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as db:
            try:
                yield db
                await db.commit()
            except SQLAlchemyError as e:
                await db.rollback()
                logger.error(f"[CardStore] {operation} failed: {e}")
                raise PersistenceError(f"Could not {operation}") from e

    async def create_set(self, owner_id: str, grade: int, subject: str, topic: str) -> FlashcardSet:
        async with self._transaction("create flashcard set") as db:
            return await FlashcardSetRepository(db).create(owner_id, grade, subject, topic)

    async def get_set(self, set_id: str, owner_id: str) -> FlashcardSet:
        """
        Raises:
            FlashcardSetNotFoundError: If the set is absent or not owned by owner_id
        """
        async with self._transaction("load flashcard set") as db:
            return await FlashcardSetRepository(db).get_by_id(set_id, user_id=owner_id)

    async def list_cards(self, set_id: str) -> List[Flashcard]:
        async with self._transaction("load flashcards") as db:
            return list(await FlashcardRepository(db).get_by_set(set_id))

    async def insert_cards(self, set_id: str, cards: List[NewCard]) -> List[Flashcard]:
        async with self._transaction("save flashcards") as db:
            return await FlashcardRepository(db).bulk_create(set_id, cards)

    async def update_card_flags(self, card_id: str, understood: bool, needs_review: bool) -> None:
        async with self._transaction("save card progress") as db:
            updated = await FlashcardRepository(db).update_flags(card_id, understood, needs_review)
        if updated is None:
            raise PersistenceError(f"Flashcard not found: {card_id}")

    async def mark_set_completed(self, set_id: str) -> None:
        async with self._transaction("mark flashcard set completed") as db:
            await FlashcardSetRepository(db).mark_completed(set_id)

    async def delete_set(self, set_id: str, owner_id: str) -> None:
        async with self._transaction("delete flashcard set") as db:
            await FlashcardSetRepository(db).delete(set_id, user_id=owner_id)
