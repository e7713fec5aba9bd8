"""
Pydantic schemas for analysis module.
DTOs for API output.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class CardStatus(str, Enum):
    UNDERSTOOD = "understood"
    NEEDS_REVIEW = "needs_review"
    NOT_ATTEMPTED = "not_attempted"


class CardAnalysis(BaseModel):
    """One card's outcome within a set."""

    id: str = Field(..., description="Flashcard ID")
    content: str = Field(..., description="Question/prompt text")
    explanation: Optional[str] = Field(None, description="Optional explanation")
    order_index: int = Field(..., description="Position within the set")
    is_explanatory: bool = Field(..., description="Remedial card generated during study")
    status: CardStatus = Field(..., description="understood, needs_review or not_attempted")


class SetAnalysis(BaseModel):
    """
    Study progress for one set.

    completion_rate is the share of understood cards, as a percentage.
    """

    set_id: str = Field(..., description="Set ID")
    grade: int = Field(..., description="School grade")
    subject: str = Field(..., description="Subject")
    topic: str = Field(..., description="Topic")
    completed: bool = Field(..., description="Whether a study session finished")
    completed_at: Optional[datetime] = Field(None, description="When the set was completed")
    total_cards: int = Field(..., description="All cards, explanatory included")
    understood_cards: int = Field(..., description="Cards marked understood")
    review_cards: int = Field(..., description="Cards marked as needing review")
    explanatory_cards: int = Field(..., description="Explanatory cards added during study")
    completion_rate: float = Field(..., description="understood / total x 100, 0 for empty sets")
    cards: List[CardAnalysis] = Field(default_factory=list, description="Per-card outcome in order")

    model_config = {
        "json_schema_extra": {
            "example": {
                "set_id": "set-uuid-here",
                "grade": 8,
                "subject": "Fen Bilimleri",
                "topic": "Fotosentez",
                "completed": True,
                "completed_at": "2026-10-19T10:30:00Z",
                "total_cards": 12,
                "understood_cards": 9,
                "review_cards": 3,
                "explanatory_cards": 2,
                "completion_rate": 75.0,
                "cards": [],
            }
        }
    }


class AnalysisError(BaseModel):
    """Error response for analysis."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
