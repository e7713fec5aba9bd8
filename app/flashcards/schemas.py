"""
Pydantic schemas for flashcards module.
DTOs for API input/output validation.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from app.flashcards.models import GRADES, MAX_GRADE, MIN_GRADE, SUBJECTS


# ═══════════════════════════════════════════════════════════════════════════
# CARD STORE / GENERATOR VALUES
# ═══════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class CardContent:
    """Content produced by the card generator for one card."""

    content: str
    explanation: Optional[str] = None


@dataclass(frozen=True)
class NewCard:
    """A card row to be inserted into a set."""

    content: str
    order_index: int
    explanation: Optional[str] = None
    is_explanatory: bool = False


# ═══════════════════════════════════════════════════════════════════════════
# SET SCHEMAS
# ═══════════════════════════════════════════════════════════════════════════


class FlashcardSetCreate(BaseModel):
    """DTO for the three set creation steps submitted together."""

    grade: int = Field(
        ...,
        ge=MIN_GRADE,
        le=MAX_GRADE,
        description="School grade (1-12)",
    )
    subject: str = Field(
        ...,
        description="Subject, one of the offered subjects",
    )
    topic: str = Field(
        ...,
        min_length=1,
        max_length=500,
        description="Free-text topic",
    )

    @field_validator("topic")
    @classmethod
    def topic_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Topic must not be blank")
        return v.strip()

    model_config = {
        "json_schema_extra": {
            "example": {
                "grade": 8,
                "subject": "Fen Bilimleri",
                "topic": "Fotosentez",
            }
        }
    }


class FlashcardRead(BaseModel):
    """DTO for reading a flashcard."""

    id: str = Field(..., description="Flashcard ID")
    flashcard_set_id: str = Field(..., description="Parent set ID")
    content: str = Field(..., description="Question/prompt text")
    explanation: Optional[str] = Field(None, description="Optional explanation")
    order_index: int = Field(..., description="Position within the set")
    understood: bool = Field(..., description="Marked as understood")
    needs_review: bool = Field(..., description="Marked as needing review")
    is_explanatory: bool = Field(..., description="Remedial card generated during study")
    created_at: datetime = Field(..., description="Creation timestamp")

    model_config = {"from_attributes": True}


class FlashcardSetRead(BaseModel):
    """DTO for reading a set (without cards)."""

    id: str = Field(..., description="Set ID")
    grade: int = Field(..., description="School grade")
    subject: str = Field(..., description="Subject")
    topic: str = Field(..., description="Topic")
    completed: bool = Field(..., description="Whether a study session finished")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")

    model_config = {"from_attributes": True}


class FlashcardSetDetail(FlashcardSetRead):
    """DTO for a set with its ordered cards."""

    flashcards: List[FlashcardRead] = Field(
        default_factory=list,
        description="Cards ordered by order_index",
    )


class FlashcardSetCreated(BaseModel):
    """Response after the wizard created and populated a set."""

    flashcard_set: FlashcardSetRead
    created_cards: int = Field(..., description="Number of cards generated and saved")


class DashboardResponse(BaseModel):
    """The user's sets split into current and past, with totals."""

    current: List[FlashcardSetRead] = Field(..., description="Sets not completed yet")
    past: List[FlashcardSetRead] = Field(..., description="Completed sets")
    total_sets: int = Field(..., description="Total number of sets")
    completed_sets: int = Field(..., description="Number of completed sets")
    completion_percentage: int = Field(..., description="Completed sets as a rounded percentage")


class SubjectsResponse(BaseModel):
    """Choices offered by the set creation wizard."""

    subjects: List[str] = Field(default_factory=lambda: list(SUBJECTS))
    grades: List[int] = Field(default_factory=lambda: list(GRADES))


class FlashcardError(BaseModel):
    """Error response for flashcard operations."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")

    model_config = {
        "json_schema_extra": {
            "example": {
                "error": "Flashcard set not found",
                "code": "SET_NOT_FOUND",
            }
        }
    }
