"""
Pipeline stages: emotional mapping, preference synthesis, search, surprise,
refinement, enrichment and moment validation.
"""

from .emotional_mapping import map_emotions
from .enrichment import apply_details, fetch_details
from .preference import baseline_text, compose, template_text
from .refinement import QUICK_ADJUSTMENTS, parse_action, parse_quick_adjustment, select_strategy
from .search import build_filters, search_candidates
from .surprise import inject_surprises
from .validation import needs_follow_up, persist_moment_feedback, validate_score

__all__ = [
    "QUICK_ADJUSTMENTS",
    "apply_details",
    "baseline_text",
    "build_filters",
    "compose",
    "fetch_details",
    "inject_surprises",
    "map_emotions",
    "needs_follow_up",
    "parse_action",
    "parse_quick_adjustment",
    "persist_moment_feedback",
    "search_candidates",
    "select_strategy",
    "template_text",
    "validate_score",
]
