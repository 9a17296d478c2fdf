"""
Preference Text Service Tests

Response parsing, answer description and provider checks. No LLM calls.
"""

import pytest

from engine.catalog import StaticQuestionCatalog
from engine.models.context import Context
from server.services.preference_text import (
    LLMPreferenceTextService,
    describe_answers,
    is_provider_available,
    parse_preference,
)


class TestParsePreference:

    def test_json_object(self):
        assert parse_preference('{"preference": "A tense, slow-burn thriller."}') == "A tense, slow-burn thriller."

    def test_json_in_code_block(self):
        content = '```json\n{"preference": "Something warm and funny"}\n```'
        assert parse_preference(content) == "Something warm and funny"

    def test_raw_text_fallback(self):
        assert parse_preference("  A cozy comedy for a slow night.  ") == "A cozy comedy for a slow night."

    def test_blank_preference_falls_back_to_content(self):
        assert parse_preference('{"preference": ""}') == '{"preference": ""}'


class TestDescribeAnswers:

    @pytest.fixture(autouse=True)
    def setup(self):
        self.questions = StaticQuestionCatalog().questions_for_flow("standard", Context())

    def test_lists_answered_questions_only(self):
        text = describe_answers({"cognitive_load": "easy"}, self.questions)
        lines = text.splitlines()
        assert len(lines) == 1
        assert lines[0].startswith(f"- {self.questions[0].text} -> ")

    def test_unknown_option_is_skipped(self):
        assert describe_answers({"cognitive_load": "nap"}, self.questions) == ""


class TestProviders:

    def test_provider_available_from_env(self, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "key")
        assert is_provider_available("gemini")
        assert not is_provider_available("mystery")

    def test_unsupported_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            LLMPreferenceTextService(provider="mystery")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            LLMPreferenceTextService(provider="anthropic")

    def test_default_model_per_provider(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        assert LLMPreferenceTextService(provider="openai").model == "gpt-4o-mini"
        assert LLMPreferenceTextService(provider="openai", model="gpt-4o").model == "gpt-4o"
