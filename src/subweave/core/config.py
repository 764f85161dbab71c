"""Configuration system for SubWeave.

Layered config loading (lowest to highest priority):
1. config/default.toml (shipped with package)
2. ~/.config/subweave/config.toml (user-level)
3. ./subweave.toml (project-level)
4. Environment variables (SUBWEAVE_LLM__MODEL, SUBWEAVE_TRANSLATION__TARGET_LANGUAGE, etc.)
5. CLI flags
"""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from subweave.pipeline.batching import BatchLimits

_PACKAGE_ROOT = Path(__file__).resolve().parent.parent.parent.parent
_DEFAULT_CONFIG = _PACKAGE_ROOT / "config" / "default.toml"
_USER_CONFIG = Path.home() / ".config" / "subweave" / "config.toml"
_PROJECT_CONFIG = Path("subweave.toml")


class LLMConfig(BaseModel):
    model: str = "ollama_chat/qwen3:8b"  # any LiteLLM model string
    api_base: str | None = "http://localhost:11434"
    api_key: str | None = None  # falls back to the provider's env var (OPENAI_API_KEY, ...)
    temperature: float = 0.3
    max_tokens: int = 8192
    timeout: float = 600.0  # seconds per request
    json_mode: bool = True


class TranslationConfig(BaseModel):
    source_language: str = "auto"
    target_language: str = "en"
    max_cues_per_batch: int | None = Field(default=40, ge=1)
    max_chars_per_batch: int | None = Field(default=6000, ge=1)
    max_tokens_per_batch: int | None = Field(default=None, ge=1)
    batch_count: int | None = Field(default=None, ge=1)
    validation_retries: int = Field(default=2, ge=0)
    max_concurrent_files: int = Field(default=2, ge=1)

    @property
    def limits(self) -> BatchLimits:
        return BatchLimits(
            max_cues=self.max_cues_per_batch,
            max_chars=self.max_chars_per_batch,
            max_tokens=self.max_tokens_per_batch,
            batch_count=self.batch_count,
        )


class RetryConfig(BaseModel):
    """Transport-level retry policy for provider calls."""

    max_attempts: int = Field(default=3, ge=1)
    initial_delay: float = Field(default=1.0, ge=0)
    backoff_factor: float = Field(default=2.0, ge=1)
    max_delay: float = Field(default=60.0, ge=0)


class SubweaveConfig(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SUBWEAVE_",
        env_nested_delimiter="__",
    )

    llm: LLMConfig = LLMConfig()
    translation: TranslationConfig = TranslationConfig()
    retry: RetryConfig = RetryConfig()

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # TOML layers arrive as init values; environment variables beat them.
        return env_settings, init_settings, dotenv_settings, file_secret_settings


@dataclass(frozen=True)
class TranslationSettings:
    """The configuration one translation job ran with.

    Frozen so it can be stored on immutable translation versions.
    """

    source_language: str
    target_language: str
    model: str
    limits: BatchLimits = BatchLimits()
    validation_retries: int = 2

    @classmethod
    def from_config(cls, config: SubweaveConfig) -> TranslationSettings:
        return cls(
            source_language=config.translation.source_language,
            target_language=config.translation.target_language,
            model=config.llm.model,
            limits=config.translation.limits,
            validation_retries=config.translation.validation_retries,
        )


def _load_toml(path: Path) -> dict:
    """Load a TOML file if it exists, return empty dict otherwise."""
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base."""
    merged = base.copy()
    for key, value in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(**cli_overrides: object) -> SubweaveConfig:
    """Load configuration from all layers and merge.

    Args:
        **cli_overrides: Direct overrides from CLI flags. Keys can be
            dot-separated (e.g. translation.target_language="de").
            None values are ignored.
    """
    config_data: dict = {}
    for path in (_DEFAULT_CONFIG, _USER_CONFIG, _PROJECT_CONFIG):
        config_data = _deep_merge(config_data, _load_toml(path))

    # Env vars are handled by Pydantic BaseSettings
    config = SubweaveConfig(**config_data)

    cli_data: dict = {}
    for key, value in cli_overrides.items():
        if value is None:
            continue
        parts = key.split(".")
        target = cli_data
        for part in parts[:-1]:
            target = target.setdefault(part, {})
        target[parts[-1]] = value
    if not cli_data:
        return config

    merged = _deep_merge(config.model_dump(), cli_data)
    return config.model_copy(
        update={
            section: type(getattr(config, section)).model_validate(merged[section])
            for section in cli_data
        }
    )
