"""Tests for the Card Store against a SQLite database."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from app.core.exceptions import FlashcardSetNotFoundError, PersistenceError
from app.flashcards.models import Flashcard
from app.flashcards.schemas import NewCard
from app.flashcards.store import CardStore


@pytest.fixture
async def flashcard_set(card_store, user):
    return await card_store.create_set(user.id, 8, "Fen Bilimleri", "Fotosentez")


class TestSets:
    async def test_create_and_get_set(self, card_store, user, flashcard_set):
        loaded = await card_store.get_set(flashcard_set.id, user.id)

        assert loaded.id == flashcard_set.id
        assert loaded.topic == "Fotosentez"
        assert loaded.completed is False

    async def test_set_of_another_owner_is_not_found(self, card_store, flashcard_set):
        with pytest.raises(FlashcardSetNotFoundError):
            await card_store.get_set(flashcard_set.id, "someone-else")

    async def test_unknown_set_is_not_found(self, card_store, user):
        with pytest.raises(FlashcardSetNotFoundError):
            await card_store.get_set("missing", user.id)

    async def test_mark_set_completed(self, card_store, user, flashcard_set):
        await card_store.mark_set_completed(flashcard_set.id)

        loaded = await card_store.get_set(flashcard_set.id, user.id)
        assert loaded.completed is True

    async def test_delete_set_removes_its_cards(self, card_store, user, flashcard_set, db_session):
        await card_store.insert_cards(flashcard_set.id, [NewCard(content="A", order_index=0)])

        await card_store.delete_set(flashcard_set.id, user.id)

        with pytest.raises(FlashcardSetNotFoundError):
            await card_store.get_set(flashcard_set.id, user.id)
        result = await db_session.execute(select(Flashcard).where(Flashcard.flashcard_set_id == flashcard_set.id))
        assert result.scalars().all() == []

    async def test_delete_by_another_owner_is_not_found(self, card_store, flashcard_set):
        with pytest.raises(FlashcardSetNotFoundError):
            await card_store.delete_set(flashcard_set.id, "someone-else")


class TestCards:
    async def test_list_cards_in_order(self, card_store, flashcard_set):
        await card_store.insert_cards(
            flashcard_set.id,
            [
                NewCard(content="third", order_index=2),
                NewCard(content="first", order_index=0),
                NewCard(content="second", order_index=1),
            ],
        )

        cards = await card_store.list_cards(flashcard_set.id)

        assert [c.content for c in cards] == ["first", "second", "third"]

    async def test_insert_returns_cards_in_input_order(self, card_store, flashcard_set):
        created = await card_store.insert_cards(
            flashcard_set.id,
            [
                NewCard(content="D", order_index=3, explanation="Örnek", is_explanatory=True),
                NewCard(content="E", order_index=4, is_explanatory=True),
            ],
        )

        assert [c.content for c in created] == ["D", "E"]
        assert all(c.is_explanatory for c in created)
        assert created[0].explanation == "Örnek"
        assert not created[0].understood and not created[0].needs_review

    async def test_update_card_flags(self, card_store, flashcard_set):
        [card] = await card_store.insert_cards(flashcard_set.id, [NewCard(content="A", order_index=0)])

        await card_store.update_card_flags(card.id, understood=False, needs_review=True)

        [loaded] = await card_store.list_cards(flashcard_set.id)
        assert loaded.needs_review is True
        assert loaded.understood is False

    async def test_update_flags_of_missing_card_fails(self, card_store):
        with pytest.raises(PersistenceError):
            await card_store.update_card_flags("missing", understood=True, needs_review=False)


class TestFailures:
    async def test_database_errors_become_persistence_errors(self, tmp_path):
        broken_engine = create_async_engine(
            f"sqlite+aiosqlite:///{tmp_path / 'missing-dir' / 'db.sqlite'}",
            poolclass=NullPool,
        )
        store = CardStore(async_sessionmaker(broken_engine, class_=AsyncSession, expire_on_commit=False))

        with pytest.raises(PersistenceError):
            await store.list_cards("any")

        await broken_engine.dispose()
