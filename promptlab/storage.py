"""Persistence for lab runs and scores."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Tuple
from uuid import uuid4

import pandas as pd

from promptlab.errors import InvalidStatusTransition, LabRecordNotFound
from promptlab.models.lab import LabRun, LabScore

logger = logging.getLogger(__name__)

RUNS_FILE = "lab_runs.csv"
SCORES_FILE = "lab_scores.csv"


class LabStore(Protocol):
    """Write side of the lab tables."""

    def create_run(self, run: LabRun) -> str:
        ...

    def update_run(self, run_id: str, **changes: Any) -> LabRun:
        ...

    def create_score(self, score: LabScore) -> str:
        ...


class InMemoryLabStore:
    """Dict-backed store; also the source for CSV export."""

    def __init__(self) -> None:
        self.runs: Dict[str, LabRun] = {}
        self.scores: Dict[str, LabScore] = {}

    def create_run(self, run: LabRun) -> str:
        run_id = run.id or str(uuid4())
        run.id = run_id
        self.runs[run_id] = run
        return run_id

    def get_run(self, run_id: str) -> LabRun:
        try:
            return self.runs[run_id]
        except KeyError:
            raise LabRecordNotFound(f"lab run not found: {run_id}") from None

    def update_run(self, run_id: str, **changes: Any) -> LabRun:
        run = self.get_run(run_id)
        run.apply(changes)
        return run

    def create_score(self, score: LabScore) -> str:
        run = self.get_run(score.lab_run_id)
        if run.status != "done":
            raise InvalidStatusTransition(f"cannot score lab run {run.id} with status {run.status}")
        if any(existing.lab_run_id == run.id for existing in self.scores.values()):
            raise InvalidStatusTransition(f"lab run {run.id} already has a score")
        score_id = score.id or str(uuid4())
        self.scores[score_id] = replace(score, id=score_id)
        return score_id

    def scores_for(self, run_id: str) -> List[LabScore]:
        return [score for score in self.scores.values() if score.lab_run_id == run_id]

    def to_frames(self) -> Tuple[pd.DataFrame, pd.DataFrame]:
        runs = pd.DataFrame(
            [asdict(run) for run in self.runs.values()],
            columns=[
                "id",
                "template_slug",
                "template_version",
                "task_type",
                "source_task_id",
                "model_name",
                "status",
                "raw_refined_prompt",
                "error_message",
            ],
        )
        score_rows = []
        for score in self.scores.values():
            row = asdict(score)
            row["metrics_json"] = json.dumps(row["metrics_json"], ensure_ascii=False, sort_keys=True)
            score_rows.append(row)
        scores = pd.DataFrame(
            score_rows,
            columns=[
                "id",
                "lab_run_id",
                "structure_score",
                "contract_score",
                "domain_score",
                "overall_score",
                "metrics_json",
            ],
        )
        return runs, scores

    def export_csv(self, output_dir: Path) -> Tuple[Path, Path]:
        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)
        runs, scores = self.to_frames()
        runs_path = output_dir / RUNS_FILE
        scores_path = output_dir / SCORES_FILE
        runs.to_csv(runs_path, index=False)
        scores.to_csv(scores_path, index=False)
        logger.info("Exported %d runs to %s and %d scores to %s", len(runs), runs_path, len(scores), scores_path)
        return runs_path, scores_path

    def summary(self) -> Dict[str, Optional[float]]:
        _, scores = self.to_frames()
        statuses = pd.Series([run.status for run in self.runs.values()], dtype=object)
        return {
            "runs": len(self.runs),
            "done": int((statuses == "done").sum()),
            "error": int((statuses == "error").sum()),
            "scores": len(scores),
            "mean_overall": float(scores["overall_score"].mean()) if len(scores) else None,
        }
