"""Pipeline entry points."""

from .lab_runner import LabRunner

__all__ = ["LabRunner"]
