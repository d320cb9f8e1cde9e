"""Dataclasses for lab tasks, runs and scores."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Literal, Mapping, Optional, Union

from promptlab.errors import InvalidStatusTransition

TaskType = Literal["synthetic", "sample"]
RunStatus = Literal["pending", "done", "error"]

DEFAULT_CATEGORY = "general"


@dataclass(slots=True, frozen=True)
class SyntheticTask:
    """Task generated upstream for evaluation."""

    id: str
    category: str
    input_text: str
    template_slug: str
    template_version: str
    type: Literal["synthetic"] = "synthetic"


@dataclass(slots=True, frozen=True)
class SampleTask:
    """Task taken from a curated prompt sample."""

    id: str
    category: str
    input_text: str
    template_slug: str
    template_version: str
    type: Literal["sample"] = "sample"


LabTask = Union[SyntheticTask, SampleTask]


@dataclass(slots=True)
class LabRun:
    """One refinement attempt for a task."""

    template_slug: str
    template_version: str
    task_type: str
    source_task_id: str
    model_name: str
    status: str = "pending"
    raw_refined_prompt: Optional[str] = None
    error_message: Optional[str] = None
    id: Optional[str] = None

    def apply(self, changes: Mapping[str, Any]) -> None:
        """Apply a partial update, refusing to move a finished run to another status."""

        new_status = changes.get("status")
        if new_status is not None and new_status != self.status:
            if self.status != "pending":
                raise InvalidStatusTransition(
                    f"lab run {self.id} is {self.status}; cannot move to {new_status}"
                )
            if new_status not in ("done", "error"):
                raise InvalidStatusTransition(f"unknown lab run status: {new_status}")
        for key, value in changes.items():
            if not hasattr(self, key) or key == "id":
                raise AttributeError(f"LabRun has no updatable field {key!r}")
            setattr(self, key, value)


@dataclass(slots=True, frozen=True)
class LabScore:
    """Heuristic score attached to a finished run."""

    lab_run_id: str
    structure_score: float
    contract_score: float
    domain_score: float
    overall_score: float
    metrics_json: Dict[str, Any] = field(default_factory=dict)
    id: Optional[str] = None


@dataclass(slots=True, frozen=True)
class BatchResult:
    """Counts reported back to the batch caller."""

    runs_created: int
    scores_created: int

    def to_dict(self) -> Dict[str, int]:
        return {"runsCreated": self.runs_created, "scoresCreated": self.scores_created}
