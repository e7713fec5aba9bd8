"""
SQLAlchemy models for flashcards module.
Defines FlashcardSet and Flashcard tables with study progress flags.
"""

from datetime import datetime, timezone
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

if TYPE_CHECKING:
    from app.auth.models import User


# Subjects offered by the set creation wizard
SUBJECTS = (
    "Matematik",
    "Fen Bilimleri",
    "Türkçe",
    "Sosyal Bilgiler",
    "Tarih",
    "Coğrafya",
    "Biyoloji",
    "Kimya",
    "Fizik",
    "Edebiyat",
    "Resim",
    "Müzik",
    "Beden Eğitimi",
    "Bilgisayar Bilimleri",
    "Yabancı Dil",
)

MIN_GRADE = 1
MAX_GRADE = 12
GRADES = tuple(range(MIN_GRADE, MAX_GRADE + 1))


class FlashcardSet(Base):
    """
    A grade/subject/topic study unit owned by one user.
    `completed` flips to True when a study session finishes.
    """

    __tablename__ = "flashcard_sets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    grade: Mapped[int] = mapped_column(Integer, nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    topic: Mapped[str] = mapped_column(String(500), nullable=False)
    completed: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Relationships
    user: Mapped["User"] = relationship(
        "User",
        back_populates="flashcard_sets",
    )
    flashcards: Mapped[List["Flashcard"]] = relationship(
        "Flashcard",
        back_populates="flashcard_set",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Flashcard.order_index.asc()",
        lazy="noload",
    )

    def __repr__(self) -> str:
        return f"<FlashcardSet(id={self.id}, subject={self.subject}, topic={self.topic})>"


class Flashcard(Base):
    """
    One study item of a set.
    `order_index` is unique only within its set and drives traversal order.
    """

    __tablename__ = "flashcards"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    flashcard_set_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("flashcard_sets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Study progress (never both True)
    understood: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    needs_review: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Remedial cards generated mid-session
    is_explanatory: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    flashcard_set: Mapped["FlashcardSet"] = relationship(
        "FlashcardSet",
        back_populates="flashcards",
    )

    __table_args__ = (
        Index("ix_flashcards_set_order", "flashcard_set_id", "order_index"),
    )

    def __repr__(self) -> str:
        return f"<Flashcard(id={self.id}, set_id={self.flashcard_set_id}, order={self.order_index})>"
