from pathlib import Path

import pandas as pd
import pytest

from promptlab.models.lab import SampleTask, SyntheticTask
from promptlab.sources import CsvTaskSource, InMemoryTaskSource, load_tasks, normalize_task


def test_normalize_synthetic_uses_category_default() -> None:
    task = normalize_task(
        "synthetic",
        {"id": "s1", "category": "Coding", "inputText": "fix it", "template_slug": "writing_blog"},
    )
    assert isinstance(task, SyntheticTask)
    assert task.type == "synthetic"
    assert task.category == "coding"
    assert task.template_slug == "coding_feature"
    assert task.template_version == "1.0.0"
    assert task.input_text == "fix it"


def test_normalize_sample_keeps_its_slug_and_version() -> None:
    task = normalize_task(
        "sample",
        {"id": "p1", "category": "writing", "raw_text": "draft", "template_slug": "writing_email_default", "template_version": "2.0.0"},
    )
    assert isinstance(task, SampleTask)
    assert task.template_slug == "writing_email_default"
    assert task.template_version == "2.0.0"


def test_normalize_sample_without_slug_falls_back() -> None:
    task = normalize_task("sample", {"id": "p2", "category": None, "input_text": "hello"})
    assert task.category == "general"
    assert task.template_slug == "general_general"


def test_normalize_rejects_bad_rows() -> None:
    with pytest.raises(ValueError):
        normalize_task("sample", {"id": "p3", "category": "writing"})
    with pytest.raises(ValueError):
        normalize_task("other", {"id": "p4", "input_text": "x"})


def test_load_tasks_skips_bad_rows() -> None:
    source = InMemoryTaskSource(
        [
            {"id": "a", "category": "writing", "input_text": "one"},
            {"id": "b", "category": "writing"},
            {"id": "c", "category": "writing", "input_text": "three"},
        ]
    )
    tasks = load_tasks("sample", source, 3)
    assert [task.id for task in tasks] == ["a", "c"]
    assert load_tasks("sample", source, 0) == []


def test_csv_source_orders_newest_first(tmp_path: Path) -> None:
    csv_path = tmp_path / "samples.csv"
    pd.DataFrame(
        [
            {"id": "old", "category": "coding", "raw_text": "old text", "created_at": "2024-01-01"},
            {"id": "new", "category": "research", "raw_text": "new text", "created_at": "2024-03-01", "template_slug": "research_compare"},
        ]
    ).to_csv(csv_path, index=False)

    rows = CsvTaskSource(csv_path).find_recent(5)
    assert [row["id"] for row in rows] == ["new", "old"]
    assert rows[1]["template_slug"] is None

    tasks = load_tasks("sample", CsvTaskSource(csv_path), 1)
    assert tasks[0].template_slug == "research_compare"


def test_csv_source_validates_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        CsvTaskSource(tmp_path / "missing.csv").find_recent(1)

    bad = tmp_path / "bad.csv"
    pd.DataFrame([{"id": "x", "category": "coding"}]).to_csv(bad, index=False)
    with pytest.raises(ValueError):
        CsvTaskSource(bad).find_recent(1)
