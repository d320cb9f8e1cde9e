"""
CLI entrypoint for the prompt lab batch.

Example:
    python -m promptlab.runner --limit 20 --tasks-csv data/synthetic.csv --samples-csv data/samples.csv
    python -m promptlab.runner --classify "Fix this bug: TypeError in login"
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from config import Settings, get_settings
from promptlab.classifier import TemplateClassifier
from promptlab.errors import BatchLimitExceeded
from promptlab.llm_service import OpenAIBackend
from promptlab.pipeline import LabRunner
from promptlab.refine import RefineEngine
from promptlab.router import RoutingTable
from promptlab.sources import CsvTaskSource, InMemoryTaskSource
from promptlab.storage import InMemoryLabStore

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring non-integer %s=%r", name, raw)
        return default


def parse_args(argv: Optional[list] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Prompt lab: refine and score an evaluation batch")
    parser.add_argument("--limit", type=int, default=None, help="Number of tasks to run (env LAB_BATCH_LIMIT)")
    parser.add_argument("--model-name", default=None, help="Model name recorded on lab runs (env LAB_MODEL_NAME)")
    parser.add_argument("--dry-run", action="store_true", help="Refine and score without persisting (env LAB_DRY_RUN)")
    parser.add_argument("--tasks-csv", type=Path, default=None, help="CSV of synthetic tasks")
    parser.add_argument("--samples-csv", type=Path, default=None, help="CSV of curated prompt samples")
    parser.add_argument("--output-dir", type=Path, default=None, help="Directory for lab_runs.csv / lab_scores.csv")
    parser.add_argument("--settings", type=Path, default=None, help="Path to settings.yaml")
    parser.add_argument("--classify", metavar="TEXT", default=None, help="Classify TEXT and exit")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_routing(settings: Settings) -> RoutingTable:
    routing = settings.routing
    return RoutingTable(
        alt_model=routing.alt_model,
        coding_model=routing.coding_model,
        low_tier_model=routing.low_tier_model,
        default_model=routing.default_model,
        low_tier_plans=frozenset(routing.low_tier_plans),
    )


def build_classifier(settings: Settings) -> TemplateClassifier:
    enabled = settings.llm.enable_classifier or _env_flag("ENABLE_LLM_CLASSIFIER")
    llm = OpenAIBackend() if enabled else None
    return TemplateClassifier(llm=llm, model=settings.llm.model_name, max_tokens=settings.llm.max_tokens)


def build_runner(settings: Settings, args: argparse.Namespace, store: InMemoryLabStore) -> LabRunner:
    engine = RefineEngine(
        OpenAIBackend.for_openrouter(),
        routing=build_routing(settings),
        max_input_chars=settings.refine.max_input_chars,
        max_output_tokens=settings.refine.max_output_tokens,
        temperature=settings.refine.temperature,
        default_variant=settings.lab.eval_variant,
    )
    synthetic = CsvTaskSource(args.tasks_csv) if args.tasks_csv else InMemoryTaskSource()
    samples = CsvTaskSource(args.samples_csv) if args.samples_csv else InMemoryTaskSource()
    return LabRunner(
        engine,
        synthetic,
        samples,
        store,
        max_batch_size=_env_int("LAB_MAX_SAFE", settings.lab.max_batch_size),
        eval_plan=settings.lab.eval_plan,
        eval_variant=settings.lab.eval_variant,
        default_model_name=settings.lab.model_name,
    )


def main(argv: Optional[list] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
    )
    settings = get_settings(args.settings)

    if args.classify is not None:
        result = build_classifier(settings).classify(args.classify)
        print(json.dumps(result.to_dict(), ensure_ascii=False))
        return 0

    limit = args.limit if args.limit is not None else _env_int("LAB_BATCH_LIMIT", settings.lab.batch_limit)
    model_name = args.model_name or os.getenv("LAB_MODEL_NAME") or None
    dry_run = args.dry_run or _env_flag("LAB_DRY_RUN")

    store = InMemoryLabStore()
    runner = build_runner(settings, args, store)
    try:
        result = runner.run_batch(limit, model_name=model_name, dry_run=dry_run)
    except BatchLimitExceeded as exc:
        logging.error("%s", exc)
        return 2

    logging.info("Lab batch result: %s", result.to_dict())
    if not dry_run:
        logging.info("Store summary: %s", store.summary())
        store.export_csv(args.output_dir or Path(settings.lab.output_dir))
    print(json.dumps(result.to_dict()))
    return 0


if __name__ == "__main__":
    sys.exit(main())
