"""Configuration models and YAML loader for the candidate dashboard."""

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from candidate_ai.llm import available_providers

# Gemini models offered for evaluation, mapped to their display labels.
AI_MODELS: dict[str, str] = {
    "gemini-3-flash-preview": "Gemini 3 Flash (Fast)",
    "gemini-3-pro-preview": "Gemini 3 Pro (High Quality)",
    "gemini-flash-lite-latest": "Gemini Flash Lite (Efficient)",
}

DEFAULT_MODEL = "gemini-3-flash-preview"


class DatabaseConfig(BaseModel):
    """Database configuration."""

    path: str = "data/candidate_ai.db"


class EvaluationConfig(BaseModel):
    """AI evaluation settings."""

    provider: str = "gemini"
    model: str = DEFAULT_MODEL
    auto_evaluate: bool = False
    max_concurrency: int = Field(default=4, ge=1)

    @field_validator("provider")
    @classmethod
    def provider_registered(cls, v: str) -> str:
        name = v.strip().lower()
        if not name:
            msg = "provider must not be empty"
            raise ValueError(msg)
        if name not in available_providers():
            msg = f"provider must be one of {available_providers()}, got '{name}'"
            raise ValueError(msg)
        return name

    @model_validator(mode="after")
    def model_in_catalogue(self) -> "EvaluationConfig":
        if self.provider == "gemini" and self.model not in AI_MODELS:
            msg = f"model must be one of {sorted(AI_MODELS)}, got '{self.model}'"
            raise ValueError(msg)
        if self.provider != "gemini" and self.model in AI_MODELS:
            msg = f"model '{self.model}' is a Gemini model; set a model for provider '{self.provider}'"
            raise ValueError(msg)
        return self


class MockDataConfig(BaseModel):
    """Synthetic candidate generation."""

    candidate_count: int = Field(default=40, ge=1, le=500)
    seed: int | None = None


class UIConfig(BaseModel):
    """Presentation preferences kept alongside the data settings."""

    theme: Literal["light", "dark"] = "light"
    notifications: bool = True


class Settings(BaseModel):
    """Top-level settings loaded from YAML."""

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    evaluation: EvaluationConfig = Field(default_factory=EvaluationConfig)
    mock: MockDataConfig = Field(default_factory=MockDataConfig)
    ui: UIConfig = Field(default_factory=UIConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Settings":
        """Load settings from a YAML file."""
        path = Path(path)
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)
        raw: dict[str, Any] = yaml.safe_load(path.read_text()) or {}
        return cls.model_validate(raw)

    def to_yaml(self, path: str | Path) -> None:
        """Write settings to a YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.dump(self.model_dump(), default_flow_style=False, sort_keys=False))
