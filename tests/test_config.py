"""
Configuration Tests

ServerConfig loading from the environment, its validation errors, and
EngineConfig overrides from a nested JSON file.
"""

import json

import pytest
from pydantic import ValidationError

from engine.models.config import EngineConfig
from server.config import ServerConfig

ENV_KEYS = [
    "OPENAI_API_KEY",
    "PINECONE_API_KEY",
    "TMDB_API_KEY",
    "CORS_ORIGINS",
    "WHATNEXT_SESSION_BACKEND",
    "SESSION_TIMEOUT_SECONDS",
    "PREFERENCE_TEXT_PROVIDER",
    "PREFERENCE_TEXT_MODEL",
    "QDRANT_URL",
    "FIREBASE_CREDENTIALS_PATH",
    "GOOGLE_APPLICATION_CREDENTIALS",
    "ENGINE_CONFIG_PATH",
]


class TestServerConfig:

    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch):
        for key in ENV_KEYS:
            monkeypatch.delenv(key, raising=False)
        self.env = monkeypatch

    def test_defaults(self):
        config = ServerConfig.from_env()
        assert config.session_backend == "memory"
        assert config.session_ttl_seconds == 3600
        assert config.cors_origins == ["*"]
        assert config.preference_text_provider == "openai"
        assert config.pinecone_api_key is None

    def test_reads_environment(self):
        self.env.setenv("OPENAI_API_KEY", "sk-test")
        self.env.setenv("WHATNEXT_SESSION_BACKEND", "Firestore")
        self.env.setenv("SESSION_TIMEOUT_SECONDS", "900")
        self.env.setenv("CORS_ORIGINS", "http://localhost:3000, https://whatnext.app")
        self.env.setenv("QDRANT_URL", ":memory:")

        config = ServerConfig.from_env()
        assert config.openai_api_key == "sk-test"
        assert config.session_backend == "firestore"
        assert config.session_ttl_seconds == 900
        assert config.cors_origins == ["http://localhost:3000", "https://whatnext.app"]
        assert config.qdrant_url == ":memory:"

    def test_provider_none_disables_llm(self):
        self.env.setenv("PREFERENCE_TEXT_PROVIDER", "none")
        assert ServerConfig.from_env().preference_text_provider is None

    def test_blank_pinecone_key_is_unset(self):
        self.env.setenv("PINECONE_API_KEY", "   ")
        assert ServerConfig.from_env().pinecone_api_key is None

    def test_relative_paths_resolve_from_project_root(self):
        self.env.setenv("ENGINE_CONFIG_PATH", "config/engine.json")
        config = ServerConfig.from_env()
        assert config.engine_config_path.is_absolute()
        assert config.engine_config_path.parts[-2:] == ("config", "engine.json")

    def test_valid_config(self):
        ok, errors = ServerConfig(openai_api_key="sk-test").validate()
        assert ok
        assert errors == []

    def test_validation_errors(self, tmp_path):
        config = ServerConfig(
            session_backend="redis",
            session_ttl_seconds=0,
            engine_config_path=tmp_path / "missing.json",
        )
        ok, errors = config.validate()
        assert not ok
        joined = "\n".join(errors)
        assert "Unknown session backend" in joined
        assert "SESSION_TIMEOUT_SECONDS" in joined
        assert "OPENAI_API_KEY" in joined
        assert "Engine config file not found" in joined

    def test_firestore_requires_credentials(self):
        ok, errors = ServerConfig(openai_api_key="sk-test", session_backend="firestore").validate()
        assert not ok
        assert any("FIREBASE_CREDENTIALS_PATH" in e for e in errors)

    def test_engine_config_from_file(self, tmp_path):
        path = tmp_path / "engine.json"
        path.write_text(json.dumps({"surprise": {"surprise_quota": 1}, "search": {"search_top_k": 40}}))

        engine = ServerConfig(engine_config_path=path, session_ttl_seconds=600).engine_config()
        assert engine.surprise_quota == 1
        assert engine.search_top_k == 40
        assert engine.session_ttl_seconds == 600


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.safe_count == 10
        assert config.surprise_quota == 2
        assert config.surprise_positions == (3, 7)
        assert config.strategy_weights == {
            "controlled_chaos": 0.50,
            "adjacent_discovery": 0.35,
            "wildcard": 0.15,
        }

    def test_from_dict_sections(self):
        config = EngineConfig.from_dict({
            "surprise": {
                "weights": {"controlled_chaos": 0.6, "adjacent_discovery": 0.3, "wildcard": 0.1},
                "positions": [2, 5],
            },
            "refinement": {"auto_step": 0.2},
            "session": {"max_write_attempts": 5},
            "follow_up_threshold": 4,
            "not_a_field": 1,
        })
        assert config.weight_controlled_chaos == 0.6
        assert config.surprise_positions == (2, 5)
        assert config.auto_step == 0.2
        assert config.max_write_attempts == 5
        assert config.follow_up_threshold == 4

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValidationError):
            EngineConfig(weight_controlled_chaos=0.9)

    def test_top_k_must_cover_safe_set(self):
        with pytest.raises(ValidationError):
            EngineConfig(search_top_k=5)
