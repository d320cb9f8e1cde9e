"""Plan normalization and template plan gating."""

from __future__ import annotations

from typing import Optional

from promptlab.templates import get_template

PLAN_KEYS = ("free", "light", "pro", "admin")

# Catalog plans (``min_plan``) ordered from cheapest to most expensive.
_PLAN_RANK = {"free": 0, "builder": 1, "light": 1, "pro": 2, "admin": 3}


def normalize_plan(raw_plan: Optional[str]) -> str:
    """Map a stored plan name onto the canonical plan keys."""

    plan = (raw_plan or "").strip().lower()
    if plan == "builder":
        return "light"
    if plan in PLAN_KEYS:
        return plan
    return "free"


def plan_label(plan: str) -> str:
    return {"admin": "Admin", "pro": "Pro", "light": "Light"}.get(plan, "Free")


def is_template_available(template_id: str, plan: Optional[str]) -> bool:
    """Whether a user on ``plan`` may use the template."""

    template = get_template(template_id)
    user_rank = _PLAN_RANK[normalize_plan(plan)]
    return user_rank >= _PLAN_RANK.get(template.min_plan, 0)
