"""Task sources for the lab runner: synthetic tasks and curated prompt samples."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence

import pandas as pd

from promptlab.models.lab import DEFAULT_CATEGORY, LabTask, SampleTask, SyntheticTask
from promptlab.templates import (
    get_category_default_template,
    get_template_slug,
    get_template_version,
    slug_to_template_id,
)

logger = logging.getLogger(__name__)

TEXT_COLUMNS = ("input_text", "inputText", "raw_text")


class TaskSource(Protocol):
    """Returns the most recent task rows, newest first."""

    def find_recent(self, limit: int) -> Sequence[Mapping[str, Any]]:
        ...


def _is_missing(value: object) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and pd.isna(value):
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def _require_str(value: Optional[object], field: str) -> str:
    if _is_missing(value):
        raise ValueError(f"{field} is empty")
    return str(value).strip()


def _optional_str(value: Optional[object]) -> Optional[str]:
    if _is_missing(value):
        return None
    return str(value).strip()


def normalize_task(kind: str, row: Mapping[str, Any]) -> LabTask:
    """Turn a raw source row into a typed lab task.

    Accepts ``input_text``, ``inputText`` or ``raw_text`` for the text. Synthetic
    tasks always use their category's default template; a sample without a
    template slug falls back to it with a warning.
    """

    if kind not in ("synthetic", "sample"):
        raise ValueError(f"unknown task kind: {kind}")

    task_id = _require_str(row.get("id"), "id")
    category = (_optional_str(row.get("category")) or DEFAULT_CATEGORY).lower()
    text = next((row.get(column) for column in TEXT_COLUMNS if not _is_missing(row.get(column))), None)
    input_text = _require_str(text, "input_text")

    slug = _optional_str(row.get("template_slug")) if kind == "sample" else None
    if slug is None:
        if kind == "sample":
            logger.warning("Sample %s has no template slug; using the %s default", task_id, category)
        slug = get_template_slug(get_category_default_template(category))
    row_version = _optional_str(row.get("template_version")) if kind == "sample" else None
    version = row_version or get_template_version(
        slug_to_template_id(slug, category)
    )

    task_cls = SyntheticTask if kind == "synthetic" else SampleTask
    return task_cls(
        id=task_id,
        category=category,
        input_text=input_text,
        template_slug=slug,
        template_version=version,
    )


def load_tasks(kind: str, source: TaskSource, limit: int) -> List[LabTask]:
    """Fetch and normalize up to ``limit`` tasks; bad rows are logged and skipped."""

    if limit <= 0:
        return []
    tasks: List[LabTask] = []
    for idx, row in enumerate(source.find_recent(limit), start=1):
        try:
            tasks.append(normalize_task(kind, row))
        except ValueError as exc:
            logger.warning("Skipping %s row %d: %s", kind, idx, exc)
    return tasks[:limit]


class InMemoryTaskSource:
    """Rows held in a list, in newest-first order."""

    def __init__(self, rows: Optional[Sequence[Mapping[str, Any]]] = None) -> None:
        self._rows: List[Dict[str, Any]] = [dict(row) for row in rows or []]

    def add(self, row: Mapping[str, Any]) -> None:
        self._rows.insert(0, dict(row))

    def find_recent(self, limit: int) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._rows[: max(0, limit)]]


class CsvTaskSource:
    """Rows read from a CSV file. A ``created_at`` column, when present, orders them newest first."""

    REQUIRED_COLUMNS = {"id"}

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def find_recent(self, limit: int) -> List[Dict[str, Any]]:
        df = self._read_csv()
        if "created_at" in df.columns:
            df = df.assign(_created=pd.to_datetime(df["created_at"], errors="coerce"))
            df = df.sort_values("_created", ascending=False, kind="stable").drop(columns="_created")
        rows = df.head(max(0, limit)).to_dict(orient="records")
        return [{key: (None if _is_missing(value) else value) for key, value in row.items()} for row in rows]

    def _read_csv(self) -> pd.DataFrame:
        if not self.path.exists():
            raise FileNotFoundError(f"Task CSV not found: {self.path}")

        df = pd.read_csv(self.path, dtype=str, keep_default_na=True)
        missing = self.REQUIRED_COLUMNS.difference(df.columns)
        if missing:
            raise ValueError(f"Missing required columns: {', '.join(sorted(missing))}")
        if not any(column in df.columns for column in TEXT_COLUMNS):
            raise ValueError(f"Missing a text column (one of {', '.join(TEXT_COLUMNS)})")
        return df
