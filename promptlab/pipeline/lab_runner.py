"""Batch lab runner: refine and score a mix of synthetic tasks and curated samples."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple
from uuid import uuid4

from promptlab.errors import BatchLimitExceeded
from promptlab.models.lab import BatchResult, LabRun, LabScore, LabTask
from promptlab.refine import RefineRequest, Refiner
from promptlab.scoring import score
from promptlab.sources import TaskSource, load_tasks
from promptlab.storage import LabStore
from promptlab.templates import get_template, slug_to_template_id

logger = logging.getLogger(__name__)

REFINE_FAILED = "refine_failed"
SCORE_FAILED = "score_failed"


class LabRunner:
    """Runs one evaluation batch. Every failure except the batch ceiling stays inside its task."""

    def __init__(
        self,
        refiner: Refiner,
        synthetic_source: TaskSource,
        sample_source: TaskSource,
        store: LabStore,
        max_batch_size: int = 200,
        eval_plan: str = "pro",
        eval_variant: str = "control",
        default_model_name: str = "openrouter",
    ) -> None:
        self.refiner = refiner
        self.synthetic_source = synthetic_source
        self.sample_source = sample_source
        self.store = store
        self.max_batch_size = max_batch_size
        self.eval_plan = eval_plan
        self.eval_variant = eval_variant
        self.default_model_name = default_model_name

    def pick_tasks(self, limit: int) -> List[LabTask]:
        """Half synthetic tasks (at least one), the rest curated samples."""

        limit = max(1, int(limit))
        half = max(1, limit // 2)

        try:
            synthetic = load_tasks("synthetic", self.synthetic_source, half)
        except Exception:
            logger.exception("Failed to fetch synthetic tasks")
            synthetic = []

        try:
            samples = load_tasks("sample", self.sample_source, limit - len(synthetic))
        except Exception:
            logger.exception("Failed to fetch prompt samples")
            samples = []

        return (synthetic + samples)[:limit]

    def run_batch(self, limit: int, model_name: Optional[str] = None, dry_run: bool = False) -> BatchResult:
        limit = max(1, int(limit))
        if limit > self.max_batch_size:
            raise BatchLimitExceeded(limit, self.max_batch_size)

        tasks = self.pick_tasks(limit)
        logger.info("Picked %d lab tasks (limit=%d, dry_run=%s)", len(tasks), limit, dry_run)

        runs_created = 0
        scores_created = 0
        for task in tasks:
            run_created, score_created = self._run_task(task, model_name or self.default_model_name, dry_run)
            runs_created += int(run_created)
            scores_created += int(score_created)

        logger.info("Lab batch finished: runs=%d scores=%d", runs_created, scores_created)
        return BatchResult(runs_created=runs_created, scores_created=scores_created)

    def _run_task(self, task: LabTask, model_name: str, dry_run: bool) -> Tuple[bool, bool]:
        template_id = slug_to_template_id(task.template_slug, task.category)
        category = get_template(template_id).category
        context = (task.id, task.type, task.template_slug, task.template_version)

        run = LabRun(
            template_slug=task.template_slug,
            template_version=task.template_version,
            task_type=task.type,
            source_task_id=task.id,
            model_name=model_name,
        )
        try:
            if dry_run:
                run.id = f"dryrun-{uuid4().hex[:12]}"
                logger.info(
                    "DRY RUN - would create lab run %s for task=%s type=%s slug=%s version=%s",
                    run.id,
                    *context,
                )
                run_id = run.id
            else:
                run_id = self.store.create_run(run)
        except Exception:
            logger.exception("Failed to create lab run for task=%s type=%s slug=%s version=%s", *context)
            return False, False

        try:
            response = self.refiner.refine(
                RefineRequest(
                    text=task.input_text,
                    template_id=template_id,
                    category=category,
                    user_plan=self.eval_plan,
                    ab_test_variant=self.eval_variant,
                )
            )
            refined = response.refined_text
        except Exception:
            logger.exception("Lab run failed for task=%s type=%s slug=%s version=%s", *context)
            self._update(run, run_id, dry_run, "mark error", status="error", error_message=REFINE_FAILED)
            return True, False

        if not self._update(run, run_id, dry_run, "mark done", status="done", raw_refined_prompt=refined, error_message=None):
            return True, False

        try:
            result = score(category, task.template_slug, task.template_version, task.input_text, refined)
            lab_score = LabScore(
                lab_run_id=run_id,
                structure_score=result.structure_score,
                contract_score=result.contract_score,
                domain_score=result.domain_score,
                overall_score=result.overall_score,
                metrics_json=result.metrics,
            )
            if dry_run:
                logger.info("DRY RUN - would create lab score for %s overall=%.3f", run_id, result.overall_score)
            else:
                self.store.create_score(lab_score)
        except Exception:
            logger.exception("Failed to create lab score for %s (task=%s type=%s slug=%s version=%s)", run_id, *context)
            self._update(run, run_id, dry_run, "annotate score failure", error_message=SCORE_FAILED)
            return True, False

        return True, True

    def _update(self, run: LabRun, run_id: str, dry_run: bool, action: str, **changes) -> bool:
        if dry_run:
            run.apply(changes)
            logger.info("DRY RUN - would %s on lab run %s", action, run_id)
            return True
        try:
            self.store.update_run(run_id, **changes)
        except Exception:
            logger.exception("Failed to %s on lab run %s", action, run_id)
            return False
        return True
