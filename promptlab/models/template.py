"""Dataclasses describing templates and classification output."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional

TemplateCategory = Literal[
    "coding",
    "writing",
    "planning",
    "research",
    "communication",
    "creative",
    "general",
]
PlanName = Literal["free", "builder", "pro"]
TemplateStatus = Literal["lab", "experimental", "beta", "ga"]

CATEGORIES = ("coding", "writing", "planning", "research", "communication", "creative", "general")


@dataclass(slots=True, frozen=True)
class TemplateBehavior:
    """How a template biases the refinement model."""

    base_role: str
    goal_type: str
    context_hints: Optional[str] = None
    output_hints: Optional[str] = None
    quality_rules: Optional[str] = None


@dataclass(slots=True, frozen=True)
class TemplateDescriptor:
    """Catalog entry for a single template."""

    id: str
    category: str
    label: str
    description: str
    min_plan: str = "free"
    status: str = "ga"
    version: str = "1.0.0"
    behavior: Optional[TemplateBehavior] = None


@dataclass(slots=True, frozen=True)
class ClassificationResult:
    """Template guess for a piece of raw text."""

    template_id: str
    category: str
    confidence: float

    def to_dict(self) -> dict:
        return {
            "templateId": self.template_id,
            "category": self.category,
            "confidence": self.confidence,
        }
