"""Shared fixtures: an orchestrator wired to in-process fakes."""

import asyncio
import random

import pytest

from engine.catalog import StaticQuestionCatalog
from engine.models.config import EngineConfig
from engine.models.context import Context, DayType, TimeOfDay
from engine.orchestrator import SessionOrchestrator
from server.services.session_store import InMemorySessionStore

from .fakes import FakeIndex, FixedClock

EVENING_WEEKDAY = Context(time_of_day=TimeOfDay.EVENING, day_type=DayType.WEEKDAY)
LATE_NIGHT_WEEKDAY = Context(time_of_day=TimeOfDay.LATE_NIGHT, day_type=DayType.WEEKDAY)

# cognitive_load, emotional_tone, personal_context, attention_level, discovery_mode
INTENSE_ANSWERS = {
    "cognitive_load": "challenge",
    "emotional_tone": "intense",
    "personal_context": "exploring",
    "attention_level": "full_focus",
    "discovery_mode": "surprise",
}

COZY_ANSWERS = {
    "cognitive_load": "easy",
    "emotional_tone": "uplifting",
    "personal_context": "escaping",
    "attention_level": "background",
    "discovery_mode": "reliable",
}


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_orchestrator(clock):
    """Factory so each test can swap a single collaborator."""

    def _make(**overrides):
        kwargs = {
            "store": InMemorySessionStore(),
            "catalog": StaticQuestionCatalog(),
            "index": FakeIndex(),
            "config": EngineConfig(),
            "clock": clock,
            "rng_factory": lambda session: random.Random(f"{session.session_id}:{session.refinement_count}"),
        }
        kwargs.update(overrides)
        return SessionOrchestrator(**kwargs)

    return _make


async def answer_all(orchestrator, session_id, answers):
    """Submit answers in dict order; returns the last AnswerResult."""
    result = None
    for question_id, option_id in answers.items():
        result = await orchestrator.submit_answer(session_id, question_id, option_id)
    return result


async def recommended_session(orchestrator, answers=None, context=EVENING_WEEKDAY):
    """Start a standard-flow session and answer every question."""
    started = await orchestrator.start_session(context=context)
    result = await answer_all(orchestrator, started.session_id, answers or INTENSE_ANSWERS)
    return started.session_id, result
