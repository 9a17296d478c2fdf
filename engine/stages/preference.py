"""
Preference Synthesizer: answers + EmotionalProfile -> natural-language search text.

The baseline statement comes from the preference-text service when one is
configured and answers in time; otherwise from a deterministic template. Fixed
enhancement phrases are then appended in AXES order, so identical profiles
always yield byte-identical text.
"""

import asyncio
import logging
from typing import List, Mapping, Optional

from ..collaborators import PreferenceTextService
from ..models.config import EngineConfig
from ..models.profile import AXES, EmotionalProfile
from ..models.question import Question

logger = logging.getLogger(__name__)

DOMAIN_NOUNS = {"movies": "movie", "tv": "show", "books": "book", "games": "game"}

# axis -> (phrase when high, phrase when low)
ENHANCEMENT_PHRASES = {
    "energy": ("high-energy, exciting, thrilling", "gentle, calming, soothing"),
    "mood": ("uplifting, warm, hopeful", "emotional, deep, poignant"),
    "openness": ("unique, unconventional, artistic", "familiar, classic, well-loved"),
    "focus": ("complex, layered, detailed", "simple, straightforward, accessible"),
    "darkness": ("dark, gritty, suspenseful", "light-hearted, bright"),
    "comfort": ("cozy, comforting, feel-good", "challenging, unsettling"),
    "complexity": ("intellectual, thought-provoking", "easy to follow"),
    "humor": ("funny, witty", "serious, earnest"),
}


def template_text(answers: Mapping[str, str], questions: List[Question], domain: str) -> str:
    """Deterministic baseline built from the chosen options' phrases, in flow order."""
    noun = DOMAIN_NOUNS.get(domain, "title")
    phrases = []
    for question in questions:
        option_id = answers.get(question.id)
        if option_id is None:
            continue
        option = question.option(option_id)
        if option is not None and option.phrase:
            phrases.append(option.phrase)
    if not phrases:
        return f"A great {noun} for right now."
    return f"A {noun} that is " + "; ".join(phrases) + "."


def enhancement_phrases(profile: EmotionalProfile, config: EngineConfig) -> List[str]:
    out = []
    for axis in AXES:
        high, low = ENHANCEMENT_PHRASES[axis]
        value = profile.value(axis)
        if value >= config.enhancement_high:
            out.append(high)
        elif value <= config.enhancement_low:
            out.append(low)
    return out


def compose(base_text: str, profile: EmotionalProfile, config: EngineConfig, suffix: Optional[str] = None) -> str:
    """base + ' It should also be ' + phrases (+ ', but ' + suffix)."""
    text = base_text.rstrip()
    phrases = enhancement_phrases(profile, config)
    if phrases:
        text = f"{text} It should also be {'; '.join(phrases)}."
    if suffix:
        text = f"{text.rstrip('.')}, but {suffix.lower()}."
    return text


async def baseline_text(
    answers: Mapping[str, str],
    questions: List[Question],
    domain: str,
    service: Optional[PreferenceTextService],
    config: EngineConfig,
) -> str:
    """Ask the preference-text service, falling back to the template on any failure."""
    if service is None:
        return template_text(answers, questions, domain)
    try:
        text = await asyncio.wait_for(
            service.preference_text(answers, questions, domain),
            timeout=config.preference_text_timeout_seconds,
        )
    except asyncio.TimeoutError:
        logger.warning("[preference] PREFERENCE_TEXT_TIMEOUT falling back to template")
        return template_text(answers, questions, domain)
    except Exception as e:
        logger.warning("[preference] PREFERENCE_TEXT_FAILED %s: %s", type(e).__name__, e)
        return template_text(answers, questions, domain)
    text = (text or "").strip()
    return text or template_text(answers, questions, domain)
