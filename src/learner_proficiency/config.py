"""Application configuration using pydantic-settings."""

import functools
from enum import StrEnum
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


class FluencySource(StrEnum):
    """Where the fluency sub-score comes from."""

    CONFIDENCE = "confidence"  # recognizer confidence * 100
    ACCURACY_OFFSET = "accuracy_offset"  # accuracy - 10, floored at 0
    WORD_PATTERN = "word_pattern"  # length, repetition and completeness penalties


class PronunciationRule(StrEnum):
    """How the pronunciation sub-score is derived."""

    ACCURACY = "accuracy"
    SCALED_OVERALL = "scaled_overall"


class OverallLevelRule(StrEnum):
    """How per-module levels are combined into one overall level."""

    MEDIAN = "median"
    MODE = "mode"


class ScoringFields(BaseModel):
    """Scoring constants shared by ``ScoringConfig`` and ``Settings``."""

    mistake_limit: int = Field(default=5, ge=0)
    similar_word_threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    partial_match_credit: float = Field(default=0.6, ge=0.0, le=1.0)
    case_only_match_credit: float = Field(default=0.8, ge=0.0, le=1.0)
    length_penalty_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    case_sensitive: bool = False
    fluency_source: FluencySource = FluencySource.CONFIDENCE
    pronunciation_rule: PronunciationRule = PronunciationRule.ACCURACY


class ScoringConfig(ScoringFields):
    """Constants used by the text similarity scorer and pronunciation evaluator."""

    model_config = ConfigDict(frozen=True)


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path(__file__).resolve().parent.parent.parent


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        return flatten_yaml_settings(data)


def flatten_yaml_settings(data: dict[str, Any]) -> dict[str, Any]:
    """Flatten the nested settings.yaml structure to match Settings field names."""
    flattened: dict[str, Any] = {}
    scoring = data.get('scoring') or {}
    for key in ScoringConfig.model_fields:
        flattened[key] = scoring.get(key)
    if 'assessment' in data:
        flattened['overall_level_rule'] = data['assessment'].get('overall_level_rule')
    if 'logging' in data:
        flattened['env'] = data['logging'].get('env')

    # Remove None values
    return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings, ScoringFields):
    """Application settings loaded from environment and config files.

    Scoring constants come from ``ScoringFields`` and keep their flat names
    (``MISTAKE_LIMIT=3`` in the environment).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Assessment
    overall_level_rule: OverallLevelRule = Field(default=OverallLevelRule.MEDIAN)

    # Logging
    env: str = Field(default="development")

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def is_production(self) -> bool:
        return self.env.lower() == "production"

    def scoring_config(self) -> ScoringConfig:
        """Build the immutable scoring constants from these settings."""
        return ScoringConfig(
            **{key: getattr(self, key) for key in ScoringConfig.model_fields}
        )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()
