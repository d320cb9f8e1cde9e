from typing import Any, Dict, List, Optional, Set

import pytest

from promptlab.errors import BatchLimitExceeded, LabRecordNotFound, RefineError
from promptlab.pipeline import LabRunner
from promptlab.pipeline import lab_runner
from promptlab.refine import RefineRequest, RefineResponse
from promptlab.sources import InMemoryTaskSource
from promptlab.storage import InMemoryLabStore

REFINED = """You are an expert. Your goal is to help.
Context:
- Key facts go here
1. First do this
2. Then do that
Return only JSON with the fields "a" and "b"."""


class FakeRefiner:
    def __init__(self, fail_on: Optional[Set[str]] = None) -> None:
        self.fail_on = fail_on or set()
        self.requests: List[RefineRequest] = []

    def refine(self, request: RefineRequest) -> RefineResponse:
        self.requests.append(request)
        if request.text in self.fail_on:
            raise RefineError("upstream 502", model="m")
        return RefineResponse(
            refined_text=REFINED,
            template_id_used=request.template_id,
            category_used=request.category,
            model="m",
            latency_ms=1,
        )


class BrokenSource:
    def find_recent(self, limit: int) -> List[Dict[str, Any]]:
        raise ConnectionError("db down")


def synthetic_rows(n: int) -> List[Dict[str, Any]]:
    return [{"id": f"syn-{i}", "category": "coding", "input_text": f"synthetic {i}"} for i in range(1, n + 1)]


def sample_rows(n: int) -> List[Dict[str, Any]]:
    return [
        {"id": f"smp-{i}", "category": "writing", "raw_text": f"sample {i}", "template_slug": "writing_email_default"}
        for i in range(1, n + 1)
    ]


def make_runner(refiner, store, synthetic=None, samples=None, **kwargs) -> LabRunner:
    return LabRunner(
        refiner,
        synthetic if synthetic is not None else InMemoryTaskSource(synthetic_rows(5)),
        samples if samples is not None else InMemoryTaskSource(sample_rows(5)),
        store,
        **kwargs,
    )


def test_refine_failure_is_isolated_to_its_task() -> None:
    store = InMemoryLabStore()
    runner = make_runner(FakeRefiner(fail_on={"sample 1"}), store)

    result = runner.run_batch(3)

    assert result.to_dict() == {"runsCreated": 3, "scoresCreated": 2}
    by_task = {run.source_task_id: run for run in store.runs.values()}
    assert [run.source_task_id for run in store.runs.values()] == ["syn-1", "smp-1", "smp-2"]
    assert by_task["smp-1"].status == "error"
    assert by_task["smp-1"].error_message == "refine_failed"
    for task_id in ("syn-1", "smp-2"):
        run = by_task[task_id]
        assert run.status == "done"
        assert run.raw_refined_prompt == REFINED
        assert len(store.scores_for(run.id)) == 1


def test_task_mix_and_refine_request() -> None:
    refiner = FakeRefiner()
    runner = make_runner(refiner, InMemoryLabStore())

    tasks = runner.pick_tasks(5)
    assert [task.type for task in tasks] == ["synthetic", "synthetic", "sample", "sample", "sample"]

    runner.run_batch(2)
    synthetic_req, sample_req = refiner.requests
    assert synthetic_req.template_id == "coding_feature"
    assert sample_req.template_id == "writing_email"
    assert sample_req.category == "writing"
    assert sample_req.user_plan == "pro"
    assert sample_req.ab_test_variant == "control"


def test_failing_source_contributes_nothing() -> None:
    runner = make_runner(FakeRefiner(), InMemoryLabStore(), synthetic=BrokenSource())
    tasks = runner.pick_tasks(4)
    assert [task.id for task in tasks] == ["smp-1", "smp-2", "smp-3", "smp-4"]


def test_batch_ceiling_rejects_before_any_work() -> None:
    refiner = FakeRefiner()
    store = InMemoryLabStore()
    runner = make_runner(refiner, store, max_batch_size=10)

    with pytest.raises(BatchLimitExceeded):
        runner.run_batch(11)
    assert refiner.requests == []
    assert store.runs == {}


def test_dry_run_persists_nothing() -> None:
    store = InMemoryLabStore()
    result = make_runner(FakeRefiner(), store).run_batch(4, dry_run=True)

    assert result.runs_created == 4
    assert result.scores_created == 4
    assert store.runs == {}
    assert store.scores == {}


def test_model_name_is_recorded() -> None:
    store = InMemoryLabStore()
    runner = make_runner(FakeRefiner(), store)

    runner.run_batch(1)
    runner.run_batch(1, model_name="openai/gpt-4o-mini")

    assert [run.model_name for run in store.runs.values()] == ["openrouter", "openai/gpt-4o-mini"]


def test_score_failure_keeps_run_done(monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_score(*args, **kwargs):
        raise ValueError("bad metrics")

    monkeypatch.setattr(lab_runner, "score", broken_score)
    store = InMemoryLabStore()

    result = make_runner(FakeRefiner(), store).run_batch(2)

    assert result.to_dict() == {"runsCreated": 2, "scoresCreated": 0}
    for run in store.runs.values():
        assert run.status == "done"
        assert run.error_message == "score_failed"


def test_failed_done_update_skips_scoring() -> None:
    class LosingStore(InMemoryLabStore):
        def update_run(self, run_id: str, **changes: Any):
            raise LabRecordNotFound(f"lab run not found: {run_id}")

    store = LosingStore()
    result = make_runner(FakeRefiner(), store).run_batch(2)

    assert result.to_dict() == {"runsCreated": 2, "scoresCreated": 0}
    assert store.scores == {}
    assert all(run.status == "pending" for run in store.runs.values())


def test_failed_run_creation_skips_only_that_task() -> None:
    class FlakyStore(InMemoryLabStore):
        def create_run(self, run):
            if run.source_task_id == "smp-1":
                raise ConnectionError("insert failed")
            return super().create_run(run)

    refiner = FakeRefiner()
    store = FlakyStore()

    result = make_runner(refiner, store).run_batch(3)

    assert result.to_dict() == {"runsCreated": 2, "scoresCreated": 2}
    assert [run.source_task_id for run in store.runs.values()] == ["syn-1", "smp-2"]
    assert [request.text for request in refiner.requests] == ["synthetic 1", "sample 2"]
