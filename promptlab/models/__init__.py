"""Shared dataclasses and type definitions for the prompt lab."""

from .lab import BatchResult, LabRun, LabScore, LabTask, SampleTask, SyntheticTask
from .template import ClassificationResult, TemplateBehavior, TemplateDescriptor

__all__ = [
    "BatchResult",
    "ClassificationResult",
    "LabRun",
    "LabScore",
    "LabTask",
    "SampleTask",
    "SyntheticTask",
    "TemplateBehavior",
    "TemplateDescriptor",
]
