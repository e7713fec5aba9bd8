"""Tests for the OpenAI card generator and completion parsing."""

from types import SimpleNamespace

import httpx
import openai
import pytest

from app.config import Settings
from app.core.exceptions import CardGenerationError, FormatError, GeneratorConfigError, UpstreamError
from app.flashcards.generator import OpenAICardGenerator, extract_json_from_markdown, parse_cards


class FakeCompletions:
    def __init__(self, content=None, error=None, choices=True):
        self.content = content
        self.error = error
        self.choices = choices
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if self.error is not None:
            raise self.error
        if not self.choices:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))])


def make_generator(completions: FakeCompletions) -> OpenAICardGenerator:
    client = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    settings = Settings(openai_api_key="sk-test", openai_model="gpt-4o-mini")
    return OpenAICardGenerator(settings=settings, client=client)


class TestParsing:
    def test_extracts_fenced_json(self):
        text = 'Here you go:\n```json\n[{"content": "Soru"}]\n```\nGood luck!'
        assert extract_json_from_markdown(text) == '[{"content": "Soru"}]'

    def test_extracts_plain_fence(self):
        assert extract_json_from_markdown("```\n[]\n```") == "[]"

    def test_unfenced_text_is_stripped(self):
        assert extract_json_from_markdown('  [{"content": "A"}] \n') == '[{"content": "A"}]'

    def test_parses_list_of_cards(self):
        cards = parse_cards('[{"content": "Fotosentez nedir?"}, {"content": "Neden?", "explanation": "Çünkü"}]')

        assert [c.content for c in cards] == ["Fotosentez nedir?", "Neden?"]
        assert cards[0].explanation is None
        assert cards[1].explanation == "Çünkü"

    def test_accepts_cards_object(self):
        cards = parse_cards('{"cards": [{"content": "A"}]}')
        assert [c.content for c in cards] == ["A"]

    def test_drops_blank_content_and_blank_explanation(self):
        cards = parse_cards('[{"content": "  "}, {"front": "x"}, {"content": "B", "explanation": " "}]')

        assert len(cards) == 1
        assert cards[0].content == "B"
        assert cards[0].explanation is None

    def test_empty_list_is_valid(self):
        assert parse_cards("[]") == []

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "   ",
            None,
            "Üzgünüm, yardımcı olamam.",
            '{"content": "A"}',
            '"just a string"',
            '["A", "B"]',
        ],
    )
    def test_unusable_text_raises_format_error(self, text):
        with pytest.raises(FormatError):
            parse_cards(text)

    def test_format_error_is_a_generation_error(self):
        with pytest.raises(CardGenerationError):
            parse_cards("not json")


class TestOpenAICardGenerator:
    async def test_missing_key_raises_config_error(self):
        generator = OpenAICardGenerator(settings=Settings(openai_api_key=None))

        with pytest.raises(GeneratorConfigError):
            await generator.generate(8, "Fen Bilimleri", "Fotosentez", 10)

    async def test_generate_sends_prompt_and_parses_reply(self):
        completions = FakeCompletions(content='```json\n[{"content": "A"}, {"content": "B"}]\n```')
        generator = make_generator(completions)

        cards = await generator.generate(8, "Fen Bilimleri", "Fotosentez", 10)

        assert [c.content for c in cards] == ["A", "B"]
        request = completions.requests[0]
        assert request["model"] == "gpt-4o-mini"
        assert request["temperature"] == 0.7
        assert request["max_tokens"] == 2000
        prompt = request["messages"][0]["content"]
        assert "8. sınıf" in prompt
        assert "Fen Bilimleri" in prompt
        assert '"Fotosentez"' in prompt
        assert "10 adet" in prompt

    async def test_explanatory_prompt_numbers_difficult_cards(self):
        completions = FakeCompletions(content='[{"content": "Daha basit", "explanation": "Örnek"}]')
        generator = make_generator(completions)

        cards = await generator.generate_explanatory(8, "Fen Bilimleri", "Fotosentez", ["Klorofil?", "Işık?"])

        assert cards[0].explanation == "Örnek"
        prompt = completions.requests[0]["messages"][0]["content"]
        assert "1. Klorofil?\n2. Işık?" in prompt

    async def test_api_error_becomes_upstream_error(self):
        request = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")
        completions = FakeCompletions(error=openai.APIConnectionError(request=request))
        generator = make_generator(completions)

        with pytest.raises(UpstreamError):
            await generator.generate(8, "Fen Bilimleri", "Fotosentez", 10)

    async def test_reply_without_choices_is_a_format_error(self):
        generator = make_generator(FakeCompletions(choices=False))

        with pytest.raises(FormatError):
            await generator.generate(8, "Fen Bilimleri", "Fotosentez", 10)

    async def test_empty_reply_is_a_format_error(self):
        generator = make_generator(FakeCompletions(content=None))

        with pytest.raises(FormatError):
            await generator.generate(8, "Fen Bilimleri", "Fotosentez", 10)
