"""Model routing for refine calls.

Maps ``(domain, user plan, A/B variant)`` to an OpenRouter model id with a
fixed precedence: alt variant, then coding domain, then low-tier plans, then
the default model.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Literal, Optional

RefineDomain = Literal["default", "coding", "writing", "planning", "research"]
ABVariant = Literal["control", "alt"]

DEFAULT_DOMAIN = "default"
_ROUTED_DOMAINS = ("coding", "writing", "planning", "research")


@dataclass(frozen=True)
class RoutingTable:
    alt_model: str = "anthropic/claude-3.5-haiku"
    coding_model: str = "qwen/qwen-2.5-coder-32b-instruct"
    low_tier_model: str = "meta-llama/llama-3.1-8b-instruct"
    default_model: str = "openai/gpt-4o-mini"
    low_tier_plans: FrozenSet[str] = frozenset({"free", "light"})


DEFAULT_ROUTING = RoutingTable()


def infer_domain(category: Optional[str] = None, template_id: Optional[str] = None) -> str:
    """Derive a routing domain from a category or a template-id prefix."""

    cat = (category or "").lower()
    tid = (template_id or "").lower()
    for domain in _ROUTED_DOMAINS:
        if cat == domain or tid.startswith(f"{domain}_"):
            return domain
    return DEFAULT_DOMAIN


def resolve_model(
    domain: Optional[str],
    user_plan: Optional[str],
    ab_variant: Optional[str],
    table: RoutingTable = DEFAULT_ROUTING,
) -> str:
    """Pick the model for a refine call. Pure; exactly one rule applies."""

    if ab_variant == "alt":
        return table.alt_model
    if domain == "coding":
        return table.coding_model
    if (user_plan or "unknown") in table.low_tier_plans:
        return table.low_tier_model
    return table.default_model


def resolve_refine_model(
    template_id: Optional[str] = None,
    category: Optional[str] = None,
    domain: Optional[str] = None,
    user_plan: Optional[str] = None,
    ab_variant: Optional[str] = None,
    table: RoutingTable = DEFAULT_ROUTING,
) -> str:
    """Same as :func:`resolve_model`, inferring the domain when it is not given."""

    if not domain or domain == DEFAULT_DOMAIN:
        domain = infer_domain(category, template_id)
    return resolve_model(domain, user_plan, ab_variant, table)
