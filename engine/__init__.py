"""
WhatNext moment-to-recommendation engine.

Single entry point for the engine package:
- models/: Session, EmotionalProfile, SearchFilters, EngineConfig, results
- stages/: emotional_mapping, preference, search, surprise, refinement, validation
- catalog: static question flows
- orchestrator: SessionOrchestrator (state machine and write-back)
- collaborators: Protocols the server adapters implement
"""

__version__ = "0.3.0"

from .catalog import StaticQuestionCatalog
from .errors import (
    EngineError,
    InvalidFeedbackError,
    SessionConflictError,
    SessionExpiredError,
    SessionExpiredOrNotFound,
    SessionNotFoundError,
    SessionStateError,
    UnknownOptionError,
    UnknownQuestionError,
)
from .models import Context, EngineConfig, Feedback, QuickAdjustment, RefinementStrategy, Session, SessionState
from .models.config import DEFAULT_CONFIG, resolve_config
from .orchestrator import SessionOrchestrator, adjustment_catalog

__all__ = [
    "__version__",
    "Context",
    "DEFAULT_CONFIG",
    "EngineConfig",
    "EngineError",
    "Feedback",
    "InvalidFeedbackError",
    "QuickAdjustment",
    "RefinementStrategy",
    "Session",
    "SessionConflictError",
    "SessionExpiredError",
    "SessionExpiredOrNotFound",
    "SessionNotFoundError",
    "SessionOrchestrator",
    "SessionState",
    "StaticQuestionCatalog",
    "UnknownOptionError",
    "UnknownQuestionError",
    "adjustment_catalog",
    "resolve_config",
]
