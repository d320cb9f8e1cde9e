"""Refine engine: turns raw notes into a refined prompt via a routed model."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Dict, Optional, Protocol

from promptlab.errors import RefineError
from promptlab.llm_service import LLMBackend
from promptlab.plan import is_template_available
from promptlab.prompt_builder import MAX_INPUT_CHARS, build_messages
from promptlab.router import DEFAULT_ROUTING, RoutingTable, infer_domain, resolve_model
from promptlab.templates import (
    DEFAULT_TEMPLATE_ID,
    get_category_default_template,
    get_template,
    is_template_id,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class RefineRequest:
    text: str
    template_id: Optional[str] = None
    category: Optional[str] = None
    model_style: Optional[str] = None
    user_plan: Optional[str] = None
    ab_test_variant: Optional[str] = None


@dataclass(slots=True, frozen=True)
class RefineResponse:
    refined_text: str
    template_id_used: str
    category_used: str
    model: str
    latency_ms: int
    usage: Dict[str, Optional[int]] = field(default_factory=dict)


class Refiner(Protocol):
    """Anything the lab runner can hand a task to for refinement."""

    def refine(self, request: RefineRequest) -> RefineResponse:
        ...


class RefineEngine:
    """Builds the system instruction, routes the model and calls the backend."""

    def __init__(
        self,
        backend: LLMBackend,
        routing: RoutingTable = DEFAULT_ROUTING,
        max_input_chars: int = MAX_INPUT_CHARS,
        max_output_tokens: int = 512,
        temperature: float = 0.3,
        default_variant: str = "control",
    ) -> None:
        self.backend = backend
        self.routing = routing
        self.max_input_chars = max_input_chars
        self.max_output_tokens = max_output_tokens
        self.temperature = temperature
        self.default_variant = default_variant

    def refine(self, request: RefineRequest) -> RefineResponse:
        start = time.perf_counter()

        if is_template_id(request.template_id):
            template_id = request.template_id
        else:
            template_id = get_category_default_template(request.category)
        if request.user_plan and not is_template_available(template_id, request.user_plan):
            gated = template_id
            template_id = get_category_default_template(get_template(gated).category)
            if not is_template_available(template_id, request.user_plan):
                template_id = DEFAULT_TEMPLATE_ID
            logger.info("Template %s needs a higher plan than %s; using %s", gated, request.user_plan, template_id)
        category = get_template(template_id).category

        variant = request.ab_test_variant or self.default_variant
        domain = infer_domain(category, template_id)
        model = resolve_model(domain, request.user_plan or "unknown", variant, self.routing)
        logger.debug(
            "Routing template=%s category=%s domain=%s plan=%s variant=%s model=%s",
            template_id,
            category,
            domain,
            request.user_plan,
            variant,
            model,
        )

        messages = build_messages(request.text, template_id, request.model_style, self.max_input_chars)
        try:
            refined = self.backend.complete(
                messages,
                model=model,
                temperature=self.temperature,
                max_tokens=self.max_output_tokens,
            )
        except Exception as exc:
            raise RefineError(f"refine call failed for model {model}: {exc}", model=model) from exc

        if not refined or not refined.strip():
            raise RefineError(f"model {model} returned no text", model=model)

        usage = getattr(self.backend, "last_usage", None) or {}
        return RefineResponse(
            refined_text=refined.strip(),
            template_id_used=template_id,
            category_used=category,
            model=model,
            latency_ms=int((time.perf_counter() - start) * 1000),
            usage={
                "input_tokens": usage.get("prompt_tokens"),
                "output_tokens": usage.get("completion_tokens"),
            },
        )
