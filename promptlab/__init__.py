"""Prompt lab: template classification, model routing, prompt refinement and heuristic scoring."""

from .classifier import TemplateClassifier, classify
from .pipeline import LabRunner
from .plan import is_template_available, normalize_plan
from .refine import RefineEngine, RefineRequest, RefineResponse
from .router import resolve_model
from .scoring import ScoreResult, score

__all__ = [
    "LabRunner",
    "RefineEngine",
    "RefineRequest",
    "RefineResponse",
    "ScoreResult",
    "TemplateClassifier",
    "classify",
    "is_template_available",
    "normalize_plan",
    "resolve_model",
    "score",
]
