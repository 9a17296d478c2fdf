"""
LLM preference-text service using LiteLLM.

Turns the chosen answers into one short natural-language statement of what the
user wants to watch. Best-effort: the engine falls back to its own template
when this is slow, unconfigured or fails.

Usage:
    service = LLMPreferenceTextService(provider="openai")
    text = await service.preference_text(answers, questions, "movies")
"""

import json
import os
import re
from typing import Dict, List, Mapping, Optional

import litellm
from litellm import acompletion

from engine.models.question import Question

# Suppress LiteLLM's verbose logging
litellm.suppress_debug_info = True

# Drop unsupported params for models with restrictions
litellm.drop_params = True


# ============================================================================
# Model Configuration
# ============================================================================

SUPPORTED_MODELS: Dict[str, str] = {
    "openai": "gpt-4o-mini",
    "gemini": "gemini/gemini-2.5-flash",
    "anthropic": "claude-3-5-haiku-latest",
}

API_KEY_ENV_VARS: Dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "gemini": "GEMINI_API_KEY",
    "anthropic": "ANTHROPIC_API_KEY",
}

PROMPT_TEMPLATE = """You turn quiz answers into a search query for a {domain} recommender.

The user answered:
{answers}

Write ONE or TWO sentences describing the {noun} they want right now: tone, pace,
themes and feel. Do not name specific titles. Respond as JSON: {{"preference": "..."}}"""

NOUNS = {"movies": "movie", "tv": "show", "books": "book"}


def is_provider_available(provider: str) -> bool:
    """Check if a specific provider has an API key configured."""
    env_var = API_KEY_ENV_VARS.get(provider)
    return bool(env_var and os.getenv(env_var))


def parse_preference(content: str) -> str:
    """
    Extract the preference sentence from an LLM response.

    Accepts a JSON object (optionally inside a markdown code block) with a
    "preference" field, or falls back to the raw text.
    """
    content = (content or "").strip()
    match = re.search(r"\{[\s\S]*\}", content)
    if match:
        try:
            value = json.loads(match.group()).get("preference")
            if isinstance(value, str) and value.strip():
                return value.strip()
        except (json.JSONDecodeError, AttributeError):
            pass
    return content.strip("`").strip()


def describe_answers(answers: Mapping[str, str], questions: List[Question]) -> str:
    lines = []
    for q in questions:
        option = q.option(answers.get(q.id, ""))
        if option is not None:
            lines.append(f"- {q.text} -> {option.label}")
    return "\n".join(lines)


class LLMPreferenceTextService:
    """engine.collaborators.PreferenceTextService backed by acompletion."""

    def __init__(self, provider: str = "openai", model: Optional[str] = None, temperature: float = 0.4):
        if provider not in SUPPORTED_MODELS:
            raise ValueError(f"Unsupported provider: {provider}. Supported: {list(SUPPORTED_MODELS.keys())}")
        if not is_provider_available(provider):
            raise ValueError(
                f"No API key configured for {provider}. Set {API_KEY_ENV_VARS[provider]} environment variable."
            )
        self.provider = provider
        self.model = model or SUPPORTED_MODELS[provider]
        self.temperature = temperature

    async def preference_text(self, answers: Mapping[str, str], questions: List[Question], domain: str) -> str:
        prompt = PROMPT_TEMPLATE.format(
            domain=domain,
            noun=NOUNS.get(domain, "title"),
            answers=describe_answers(answers, questions),
        )
        response = await acompletion(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            temperature=self.temperature,
            response_format={"type": "json_object"},
        )
        return parse_preference(response.choices[0].message.content)
