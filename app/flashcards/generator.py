"""
Card generator - AI-powered flashcard content via the OpenAI Chat Completions API.

Two modes:
- generate: a fresh set of cards for a grade/subject/topic
- generate_explanatory: one simpler, explanatory card per difficult card
"""

import json
import logging
import re
from typing import Any, List, Optional

from openai import APIError, AsyncOpenAI

from app.config import Settings, get_settings
from app.core.exceptions import FormatError, GeneratorConfigError, UpstreamError
from app.flashcards.schemas import CardContent

logger = logging.getLogger(__name__)

# Study set prompt template
GENERATION_PROMPT = """{grade}. sınıf öğrencisi için {subject} dersinden "{topic}" konusu hakkında {count} adet eğitici flashcard oluştur.

Her flashcard için şunları sağla:
1. Kavramın anlaşılmasını test eden açık, kısa bir soru veya ifade
2. İçeriğin {grade}. sınıf seviyesine uygun olduğundan emin ol
3. "{topic}" konusuyla ilgili temel kavramlar, tanımlar veya önemli gerçeklere odaklan

Yanıtını şu yapıda bir JSON dizisi olarak formatla:
[
  {{
    "content": "... nedir?"
  }},
  {{
    "content": "... nasıl açıklanır?"
  }}
]

Her flashcard'ın eğitici, ilgi çekici ve sınıf seviyesine uygun olduğundan emin ol."""

# Remediation prompt template
EXPLANATORY_PROMPT = """{grade}. sınıf öğrencisi "{topic}" konusundan {subject} dersinde bu kavramları anlamakta zorlanıyor:

{difficult_cards}

Şunları yapan açıklayıcı flashcard'lar oluştur:
1. Her zor kavramı daha basit terimlerle açıkla
2. {grade}. sınıf için uygun örnekler kullan
3. Adım adım açıklamalar sağla
4. Yardımcı olduğunda analojiler veya gerçek dünya bağlantıları kullan

Yanıtını şu yapıda bir JSON dizisi olarak formatla:
[
  {{
    "content": "Bu kavramı daha basit terimlerle açıklayayım...",
    "explanation": "Ek yardımcı detaylar veya örnekler"
  }}
]

Açıklamaların açık, cesaret verici ve güven artırıcı olduğundan emin ol."""

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*([\s\S]*?)\s*```")


def extract_json_from_markdown(text: str) -> str:
    """Return the body of the first fenced code block, or the stripped text."""
    match = _FENCED_BLOCK.search(text)
    if match:
        return match.group(1).strip()
    return text.strip()


def parse_cards(text: Optional[str]) -> List[CardContent]:
    """
    Parse a completion into card contents.

    Accepts a JSON list of {"content", "explanation"?} objects, optionally
    wrapped in a fenced code block or in a {"cards": [...]} object.
    Items with a blank content are dropped.

    Raises:
        FormatError: If the text is not a list of objects
    """
    if not text or not text.strip():
        raise FormatError("Empty response from AI")

    try:
        data: Any = json.loads(extract_json_from_markdown(text))
    except json.JSONDecodeError as e:
        raise FormatError(f"AI response is not valid JSON: {e}") from e

    if isinstance(data, dict) and isinstance(data.get("cards"), list):
        data = data["cards"]

    if not isinstance(data, list):
        raise FormatError("AI response is not a list of flashcards")

    cards = []
    for item in data:
        if not isinstance(item, dict):
            raise FormatError("AI response contains a flashcard that is not an object")

        content = item.get("content")
        if not isinstance(content, str) or not content.strip():
            continue

        explanation = item.get("explanation")
        cards.append(
            CardContent(
                content=content.strip(),
                explanation=explanation.strip() if isinstance(explanation, str) and explanation.strip() else None,
            )
        )

    return cards


class OpenAICardGenerator:
    """Card generator backed by the OpenAI Chat Completions API."""

    def __init__(self, settings: Optional[Settings] = None, client: Optional[AsyncOpenAI] = None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self) -> AsyncOpenAI:
        """
        Lazy initialization of OpenAI client.

        Raises:
            GeneratorConfigError: If no API key is configured
        """
        if self._client is None:
            if not self.settings.openai_api_key:
                raise GeneratorConfigError("OpenAI API key is not configured")
            self._client = AsyncOpenAI(api_key=self.settings.openai_api_key)
        return self._client

    async def generate(self, grade: int, subject: str, topic: str, count: int) -> List[CardContent]:
        """Generate `count` cards for a grade/subject/topic (the model may return another count)."""
        logger.info(f"[CardGenerator] Generating {count} cards: grade={grade}, subject={subject}, topic={topic}")

        prompt = GENERATION_PROMPT.format(grade=grade, subject=subject, topic=topic, count=count)
        cards = parse_cards(await self._complete(prompt))

        logger.info(f"[CardGenerator] Generated {len(cards)} cards")
        return cards

    async def generate_explanatory(
        self,
        grade: int,
        subject: str,
        topic: str,
        difficult_cards: List[str],
    ) -> List[CardContent]:
        """Generate one explanatory card per difficult card text, in the same order."""
        logger.info(f"[CardGenerator] Generating explanations for {len(difficult_cards)} cards: topic={topic}")

        numbered = "\n".join(f"{index}. {text}" for index, text in enumerate(difficult_cards, 1))
        prompt = EXPLANATORY_PROMPT.format(
            grade=grade,
            subject=subject,
            topic=topic,
            difficult_cards=numbered,
        )
        cards = parse_cards(await self._complete(prompt))

        logger.info(f"[CardGenerator] Generated {len(cards)} explanatory cards")
        return cards

    async def _complete(self, prompt: str) -> Optional[str]:
        client = self.client

        try:
            response = await client.chat.completions.create(
                model=self.settings.openai_model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=self.settings.openai_max_tokens,
                temperature=self.settings.openai_temperature,
            )
        except APIError as e:
            logger.error(f"[CardGenerator] OpenAI request failed: {e}")
            raise UpstreamError(f"AI service error: {e}") from e

        if not response.choices:
            raise FormatError("AI response has no choices")
        return response.choices[0].message.content


def get_card_generator() -> OpenAICardGenerator:
    """Factory function for the card generator."""
    return OpenAICardGenerator()
