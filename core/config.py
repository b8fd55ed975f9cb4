"""
Configuration management for Campaign Studio.

Centralizes all configuration including:
- API keys for the Gemini / Veo service
- Model selections per generation path
- Polling and download settings
"""

import os
from dataclasses import dataclass, field
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


@dataclass
class APIConfig:
    """API configuration for the generative-media service."""

    gemini_api_key: str = field(
        default_factory=lambda: os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")
    )


@dataclass
class ModelConfig:
    """Model selection per generation path."""

    video_model: str = field(default_factory=lambda: os.getenv("VIDEO_MODEL", "veo-3.1-fast-generate-preview"))
    image_model: str = field(default_factory=lambda: os.getenv("IMAGE_MODEL", "gemini-3-pro-image-preview"))
    edit_model: str = field(default_factory=lambda: os.getenv("EDIT_MODEL", "gemini-2.5-flash-image"))

    # Planning (high reasoning) and grounded research
    plan_model: str = field(default_factory=lambda: os.getenv("PLAN_MODEL", "gemini-3-pro-preview"))
    research_model: str = field(default_factory=lambda: os.getenv("RESEARCH_MODEL", "gemini-3-flash-preview"))


@dataclass
class GenerationConfig:
    """Polling, download and output settings."""

    poll_interval_seconds: float = field(default_factory=lambda: _env_float("POLL_INTERVAL_SECONDS", 10.0))
    # 0 disables the cap (poll until the job is terminal)
    max_polls: int = field(default_factory=lambda: _env_int("MAX_POLLS", 90))
    output_dir: str = field(default_factory=lambda: os.getenv("OUTPUT_DIR", "./output"))
    download_timeout_seconds: float = field(default_factory=lambda: _env_float("DOWNLOAD_TIMEOUT_SECONDS", 300.0))

    @property
    def poll_limit(self) -> Optional[int]:
        """Poll cap as the poller expects it (None = unbounded)."""
        return self.max_polls if self.max_polls > 0 else None


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    generation: GenerationConfig = field(default_factory=GenerationConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.api.gemini_api_key:
            issues.append("GEMINI_API_KEY (or GOOGLE_API_KEY) not configured")

        if self.generation.poll_interval_seconds <= 0:
            issues.append("POLL_INTERVAL_SECONDS must be positive")

        if self.generation.max_polls < 0:
            issues.append("MAX_POLLS must be zero (unbounded) or positive")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
