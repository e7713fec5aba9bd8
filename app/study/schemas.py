"""
Pydantic schemas for study sessions.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.flashcards.schemas import FlashcardRead, FlashcardSetRead
from app.study.controller import NoticeLevel, SessionPhase, Verdict


class ClassifyRequest(BaseModel):
    """DTO for classifying the current card."""

    verdict: Verdict = Field(..., description="understood or needs_review")
    card_id: Optional[str] = Field(
        None,
        description="Id of the card being classified; rejected if it is not the current card",
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "verdict": "needs_review",
                "card_id": "card-uuid-here",
            }
        }
    }


class NoticeRead(BaseModel):
    level: NoticeLevel
    message: str


class CompletionSummary(BaseModel):
    """Shown once the session is complete."""

    completed_cards: int = Field(..., description="Number of cards in the session")
    study_time: str = Field(..., description="Human-readable time spent")


class StudySessionState(BaseModel):
    """Snapshot of a live study session."""

    session_id: str = Field(..., description="Live session ID")
    phase: SessionPhase = Field(..., description="active, generating_remediation or complete")
    flashcard_set: FlashcardSetRead
    current_index: int = Field(..., description="Index of the current card")
    total_cards: int = Field(..., description="Cards in the session, explanatory cards included")
    current_card: Optional[FlashcardRead] = Field(None, description="Card to show, if any")
    review_queue: List[str] = Field(default_factory=list, description="Ids of cards awaiting explanations")
    remediation_used: bool = Field(..., description="Whether explanations were already generated")
    started_at: datetime
    summary: Optional[CompletionSummary] = Field(None, description="Present when complete")
    notices: List[NoticeRead] = Field(default_factory=list, description="Messages since the last response")


class StudyError(BaseModel):
    """Error response for study operations."""

    error: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
