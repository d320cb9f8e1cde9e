"""Configuration loader for the prompt lab."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, PositiveInt, field_validator


CONFIG_PATH = Path(__file__).resolve().parent / "settings.yaml"


class LLMSettings(BaseModel):
    """Classifier fallback model."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_name: str = Field("gpt-4o-mini", alias="model_name")
    temperature: float = 0.0
    max_tokens: PositiveInt = 128
    enable_classifier: bool = False


class RefineSettings(BaseModel):
    max_input_chars: PositiveInt = 8000
    max_output_tokens: PositiveInt = 512
    temperature: float = 0.3

    @field_validator("temperature")
    @classmethod
    def validate_temperature(cls, value: float) -> float:
        if not 0.0 <= value <= 2.0:
            raise ValueError("temperature must be between 0 and 2")
        return value


class RoutingSettings(BaseModel):
    alt_model: str = "anthropic/claude-3.5-haiku"
    coding_model: str = "qwen/qwen-2.5-coder-32b-instruct"
    low_tier_model: str = "meta-llama/llama-3.1-8b-instruct"
    default_model: str = "openai/gpt-4o-mini"
    low_tier_plans: List[str] = Field(default_factory=lambda: ["free", "light"])


class LabSettings(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    batch_limit: PositiveInt = 20
    max_batch_size: PositiveInt = 200
    model_name: str = "openrouter"
    eval_plan: str = "pro"
    eval_variant: str = "control"
    output_dir: str = "data/lab"

    @field_validator("eval_variant")
    @classmethod
    def validate_variant(cls, value: str) -> str:
        if value not in ("control", "alt"):
            raise ValueError("eval_variant must be 'control' or 'alt'")
        return value


class Settings(BaseModel):
    llm: LLMSettings = Field(default_factory=LLMSettings)
    refine: RefineSettings = Field(default_factory=RefineSettings)
    routing: RoutingSettings = Field(default_factory=RoutingSettings)
    lab: LabSettings = Field(default_factory=LabSettings)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Settings file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


@lru_cache(maxsize=4)
def get_settings(path: Optional[Path] = None) -> Settings:
    """Load and cache application settings."""

    target_path = Path(path) if path else CONFIG_PATH
    raw = _load_yaml(target_path)
    return Settings.model_validate(raw)
