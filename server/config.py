"""
Server Configuration

Loads configuration from environment variables and provides defaults.
Supports loading from .env file using python-dotenv.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from engine.models.config import EngineConfig

# Single .env at the project root
root_env = Path(__file__).resolve().parent.parent / ".env"
if root_env.exists():
    load_dotenv(root_env)


@dataclass
class ServerConfig:
    """Server configuration."""

    # API Keys
    openai_api_key: Optional[str] = None
    pinecone_api_key: Optional[str] = None
    tmdb_api_key: Optional[str] = None

    # Server settings
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Sessions: "memory" | "firestore"
    session_backend: str = "memory"
    session_ttl_seconds: int = 3600

    # Similarity index: Pinecone when an API key is set, else Qdrant
    pinecone_index_name: Optional[str] = None
    pinecone_index_host: Optional[str] = None
    pinecone_namespace: str = ""
    qdrant_url: Optional[str] = None
    qdrant_collection: str = "whatnext_movies"

    # Preference text (LiteLLM provider); None disables the LLM and uses the template
    preference_text_provider: Optional[str] = "openai"
    preference_text_model: Optional[str] = None

    # Firestore (sessions, analytics, moment feedback)
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Optional JSON file with EngineConfig overrides (nested sections allowed)
    engine_config_path: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """Load configuration from environment variables."""
        base_dir = Path(__file__).parent.parent

        def _path_env(key: str) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return None
            p = Path(v)
            return p if p.is_absolute() else (base_dir / p).resolve()

        backend = os.getenv("WHATNEXT_SESSION_BACKEND", "memory").strip().lower()
        provider = os.getenv("PREFERENCE_TEXT_PROVIDER", "openai").strip().lower() or None
        if provider == "none":
            provider = None
        origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

        return cls(
            openai_api_key=os.getenv("OPENAI_API_KEY"),
            pinecone_api_key=(os.getenv("PINECONE_API_KEY") or "").strip() or None,
            tmdb_api_key=os.getenv("TMDB_API_KEY"),
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "8000")),
            cors_origins=origins or ["*"],
            session_backend=backend,
            session_ttl_seconds=int(os.getenv("SESSION_TIMEOUT_SECONDS", "3600")),
            pinecone_index_name=os.getenv("PINECONE_INDEX_NAME") or None,
            pinecone_index_host=os.getenv("PINECONE_INDEX_HOST") or None,
            pinecone_namespace=os.getenv("PINECONE_NAMESPACE", ""),
            qdrant_url=os.getenv("QDRANT_URL") or None,
            qdrant_collection=os.getenv("QDRANT_COLLECTION", "whatnext_movies"),
            preference_text_provider=provider,
            preference_text_model=os.getenv("PREFERENCE_TEXT_MODEL") or None,
            firebase_credentials_path=_path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS"),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            engine_config_path=_path_env("ENGINE_CONFIG_PATH"),
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.session_backend not in ("memory", "firestore"):
            errors.append(f"Unknown session backend: {self.session_backend!r}")

        if self.session_backend == "firestore" and not self.firebase_credentials_path:
            errors.append("WHATNEXT_SESSION_BACKEND=firestore requires FIREBASE_CREDENTIALS_PATH")

        if self.session_ttl_seconds <= 0:
            errors.append(f"SESSION_TIMEOUT_SECONDS must be positive, got {self.session_ttl_seconds}")

        if not self.openai_api_key:
            errors.append("OPENAI_API_KEY is required to embed search queries")

        if self.engine_config_path and not self.engine_config_path.is_file():
            errors.append(f"Engine config file not found: {self.engine_config_path}")

        return len(errors) == 0, errors

    def engine_config(self) -> EngineConfig:
        """EngineConfig from the optional JSON file, with the session TTL from env."""
        overrides = {}
        if self.engine_config_path and self.engine_config_path.is_file():
            with open(self.engine_config_path) as f:
                overrides = json.load(f)
        overrides["session_ttl_seconds"] = self.session_ttl_seconds
        return EngineConfig.from_dict(overrides)


# Global config instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def reload_config() -> ServerConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
