"""
FastAPI dependencies for dependency injection.
"""

from typing import Annotated

from fastapi import Depends

from app.config import Settings, get_settings
from app.database import async_session_maker
from app.flashcards.generator import OpenAICardGenerator, get_card_generator
from app.flashcards.store import CardStore
from app.study.registry import StudySessionRegistry, get_session_registry


def get_card_store() -> CardStore:
    """Provides a Card Store on the application's session factory."""
    return CardStore(async_session_maker)


# Type aliases for cleaner dependency injection
AppSettings = Annotated[Settings, Depends(get_settings)]
Store = Annotated[CardStore, Depends(get_card_store)]
Generator = Annotated[OpenAICardGenerator, Depends(get_card_generator)]
Registry = Annotated[StudySessionRegistry, Depends(get_session_registry)]
