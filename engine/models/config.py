"""
Engine configuration: surprise policy, search, refinement thresholds and session limits.

EngineConfig defaults are defined here. The server may pass a nested dict
(e.g. from an env-selected JSON file); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional, Tuple

from pydantic import BaseModel, model_validator


class EngineConfig(BaseModel):
    """Configuration for the moment-to-recommendation engine."""

    # -------------------------------------------------------------------------
    # Similarity Search
    # -------------------------------------------------------------------------

    # Number of candidates requested from the similarity index (K).
    # Must be larger than safe_count so the surprise engine has a broader pool.
    search_top_k: int = 30

    # Seconds before a similarity search is abandoned and treated as unavailable.
    search_timeout_seconds: float = 8.0

    # Confidence reported on a moment whose search degraded to no results.
    degraded_confidence: int = 20

    # -------------------------------------------------------------------------
    # Surprise Injection
    # final list = safe_count safe picks + up to surprise_quota surprises
    # -------------------------------------------------------------------------

    # First N candidates kept as-is (the safe set).
    safe_count: int = 10
    # Surprises injected per recommendation list, regardless of strategy mix.
    surprise_quota: int = 2
    # 0-based positions surprises are inserted at (clamped to list length).
    surprise_positions: Tuple[int, ...] = (3, 7)

    # Strategy draw weights (must sum to 1.0).
    weight_controlled_chaos: float = 0.50
    weight_adjacent_discovery: float = 0.35
    weight_wildcard: float = 0.15

    # -------------------------------------------------------------------------
    # Preference Synthesis
    # -------------------------------------------------------------------------

    # Axis value at or above which the "high" enhancement phrase is appended.
    enhancement_high: float = 0.65
    # Axis value at or below which the "low" enhancement phrase is appended.
    enhancement_low: float = 0.30
    # Seconds before the preference-text service is abandoned for the template.
    preference_text_timeout_seconds: float = 6.0

    # -------------------------------------------------------------------------
    # Feedback Refinement (pattern detection, evaluated in priority order)
    # -------------------------------------------------------------------------

    # Trait value at or above which an item counts as "dark".
    dark_trait_threshold: float = 0.6
    # too_intense: dislikes must exceed this share of the batch...
    too_intense_dislike_share: float = 0.5
    # ...and at least this share of the dislikes must be dark items.
    too_intense_dark_share: float = 0.6

    # wrong_energy: minimum dislikes, and the share of them whose energy sits
    # at least energy_gap away from the profile on the same side.
    wrong_energy_min_dislikes: int = 2
    wrong_energy_gap: float = 0.35
    wrong_energy_share: float = 0.7

    # genre_mismatch: a cluster must appear in at least this many dislikes and
    # this share of them, and in none of the likes.
    genre_mismatch_min_count: int = 2
    genre_mismatch_share: float = 0.6

    # hidden_desire: at least this many likes, all in one unexpected cluster.
    hidden_desire_min_likes: int = 2
    # Boost applied to the liked cluster's signature axis.
    hidden_desire_boost: float = 0.3

    # auto fallback: step away from each disliked item's dominant axis,
    # or toward liked items' dominant axes when nothing was disliked.
    auto_step: float = 0.15
    auto_like_step: float = 0.10

    # -------------------------------------------------------------------------
    # Session Lifecycle
    # -------------------------------------------------------------------------

    # Session time-to-live. Accesses after expiry fail with SessionExpired.
    session_ttl_seconds: int = 3600
    # Optimistic write attempts before a SessionConflictError is surfaced.
    max_write_attempts: int = 3

    # -------------------------------------------------------------------------
    # Enrichment and Moment Validation
    # -------------------------------------------------------------------------

    enrichment_timeout_seconds: float = 5.0
    # Satisfaction scores strictly below this trigger follow-up feedback.
    follow_up_threshold: int = 3

    @model_validator(mode="after")
    def weights_sum_to_one(self):
        total = self.weight_controlled_chaos + self.weight_adjacent_discovery + self.weight_wildcard
        if abs(total - 1.0) > 0.01:
            raise ValueError(f"Surprise strategy weights must sum to 1.0, got {total}")
        if self.search_top_k < self.safe_count:
            raise ValueError(
                f"search_top_k ({self.search_top_k}) must be >= safe_count ({self.safe_count})"
            )
        return self

    @property
    def strategy_weights(self) -> Dict[str, float]:
        return {
            "controlled_chaos": self.weight_controlled_chaos,
            "adjacent_discovery": self.weight_adjacent_discovery,
            "wildcard": self.weight_wildcard,
        }

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "EngineConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        for section in ("search", "synthesis", "refinement", "session", "enrichment"):
            if section in config_dict:
                flat.update(config_dict[section])
        if "surprise" in config_dict:
            sp = dict(config_dict["surprise"])
            weights = sp.pop("weights", {})
            for name, value in weights.items():
                flat[f"weight_{name}"] = value
            if "positions" in sp:
                flat["surprise_positions"] = tuple(sp.pop("positions"))
            flat.update(sp)
        flat.update({k: v for k, v in config_dict.items() if not isinstance(v, dict)})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)


DEFAULT_CONFIG = EngineConfig()


def resolve_config(config: Optional["EngineConfig"]) -> "EngineConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
