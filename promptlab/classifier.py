"""Template classifier.

Maps raw user text to a template via an ordered keyword cascade. Only when no
rule fires, and an LLM backend has been supplied, is a single closed-vocabulary
model call made. Every failure on that path degrades to the general template.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from promptlab.llm_service import LLMBackend
from promptlab.models.template import ClassificationResult
from promptlab.templates import DEFAULT_TEMPLATE_ID, TEMPLATE_REGISTRY, get_template

logger = logging.getLogger(__name__)

RULE_CONFIDENCE = 0.9
FALLBACK_CONFIDENCE = 0.5

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


@dataclass(frozen=True)
class KeywordRule:
    """Fires when any keyword is a substring of the lower-cased text."""

    template_id: str
    category: str
    keywords: Tuple[str, ...]

    def matches(self, lowered: str) -> bool:
        return any(keyword in lowered for keyword in self.keywords)


_CODING_CONTEXT = (
    "code",
    "script",
    "typescript",
    "javascript",
    "node.js",
    "next.js",
    "react",
    "api",
    "function",
    "class",
    "component",
    "bug",
    "error",
    "stack trace",
    "sql",
    "query",
)

# Evaluated top to bottom; the first rule that fires wins.
RULES: Tuple[KeywordRule, ...] = (
    # coding: tests before debug before refactor before the generic catch-all
    KeywordRule("coding_tests", "coding", ("test", "unit test", "jest", "vitest", "playwright", "cypress")),
    KeywordRule("coding_debug", "coding", ("debug", "fix", "bug", "error", "stack trace")),
    KeywordRule("coding_refactor", "coding", ("refactor", "clean up", "rewrite", "optimize")),
    KeywordRule("coding_feature", "coding", _CODING_CONTEXT),
    # writing
    KeywordRule("writing_twitter_thread", "writing", ("twitter thread", "thread on twitter", "x.com", "tweet thread")),
    KeywordRule("writing_blog", "writing", ("blog post", "article")),
    KeywordRule("writing_linkedin_post", "writing", ("linkedin post", "linkedin")),
    KeywordRule("writing_email", "writing", ("email", "cold email", "outreach email")),
    KeywordRule("writing_landing_page", "writing", ("landing page", "hero section")),
    # planning
    KeywordRule("planning_meeting_notes", "planning", ("meeting notes", "action items", "agenda", "minutes")),
    KeywordRule("planning_feature_spec", "planning", ("feature spec", "specification", "prd", "requirements")),
    KeywordRule("planning_roadmap", "planning", ("roadmap", "plan", "milestones", "timeline")),
    # research
    KeywordRule("research_summarize", "research", ("summarize", "summary", "tl;dr")),
    KeywordRule("research_compare", "research", ("compare", "pros and cons")),
    KeywordRule("research_extract_points", "research", ("extract key points", "key takeaways")),
    # communication
    KeywordRule(
        "communication_reply",
        "communication",
        ("reply to this", "respond to this", "answer this email", "answer this message"),
    ),
    KeywordRule(
        "communication_tone_adjust",
        "communication",
        ("more polite", "more formal", "more casual", "adjust tone"),
    ),
    # creative
    KeywordRule("creative_story", "creative", ("story", "scene", "character", "worldbuilding", "plot")),
    KeywordRule("creative_brainstorm", "creative", ("brainstorm ideas", "ideas for", "concepts for")),
)


class LLMClassification(BaseModel):
    """JSON object the fallback model is asked to return."""

    model_config = ConfigDict(populate_by_name=True)

    template_id: str = Field(..., alias="templateId")
    confidence: Optional[float] = None

    @field_validator("confidence", mode="before")
    @classmethod
    def drop_non_numeric_confidence(cls, value: Any) -> Optional[float]:
        # Anything but a finite JSON number falls back to the default confidence.
        if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
            return None
        return float(value)


def match_rules(text: str, rules: Sequence[KeywordRule] = RULES) -> Optional[ClassificationResult]:
    """Run the keyword cascade only; ``None`` when nothing fires."""

    lowered = (text or "").lower()
    for rule in rules:
        if rule.matches(lowered):
            return ClassificationResult(
                template_id=rule.template_id,
                category=rule.category,
                confidence=RULE_CONFIDENCE,
            )
    return None


def default_result() -> ClassificationResult:
    return ClassificationResult(
        template_id=DEFAULT_TEMPLATE_ID,
        category=TEMPLATE_REGISTRY[DEFAULT_TEMPLATE_ID].category,
        confidence=FALLBACK_CONFIDENCE,
    )


def build_classifier_instruction() -> str:
    """System instruction with the closed vocabulary of template ids."""

    grouped: Dict[str, List[str]] = {}
    for template in TEMPLATE_REGISTRY.values():
        grouped.setdefault(template.category, []).append(f'"{template.id}"')
    allowed = "\n".join(f"- {', '.join(ids)}" for ids in grouped.values())
    return (
        "You are a classifier that maps user instructions to a templateId.\n\n"
        "You MUST respond with exactly one JSON object, no extra text, in this form:\n"
        '{"templateId": "...", "confidence": 0.0-1.0}\n\n'
        "Allowed templateId values:\n"
        f"{allowed}\n\n"
        "Guidance:\n"
        '- Writing code, scripts, APIs, debugging, tests, or refactoring -> a "coding_*" template.\n'
        '- A blog/article, email, social post, or marketing copy -> a "writing_*" template.\n'
        '- Summarizing, extracting points, or comparing -> a "research_*" template.\n'
        '- Plans, specs, roadmaps, or meeting notes -> a "planning_*" template.\n'
        f'- Only use "{DEFAULT_TEMPLATE_ID}" when none of the more specific templates clearly applies.\n'
        "- Do not invent new templateId values."
    )


def parse_llm_classification(content: str) -> ClassificationResult:
    """Parse the model reply; anything unusable becomes the default result."""

    payload: Any = None
    try:
        payload = json.loads(content)
    except (TypeError, ValueError):
        match = _JSON_OBJECT.search(content or "")
        if match:
            try:
                payload = json.loads(match.group(0))
            except ValueError:
                payload = None
    if not isinstance(payload, dict):
        return default_result()

    try:
        parsed = LLMClassification.model_validate(payload)
    except ValidationError:
        return default_result()

    if parsed.template_id not in TEMPLATE_REGISTRY:
        return default_result()

    confidence = FALLBACK_CONFIDENCE if parsed.confidence is None else parsed.confidence
    return ClassificationResult(
        template_id=parsed.template_id,
        category=get_template(parsed.template_id).category,
        confidence=max(0.0, min(1.0, float(confidence))),
    )


class TemplateClassifier:
    """Heuristic cascade with an optional LLM fallback."""

    def __init__(
        self,
        llm: Optional[LLMBackend] = None,
        model: str = "gpt-4o-mini",
        max_tokens: int = 128,
        rules: Sequence[KeywordRule] = RULES,
    ) -> None:
        self.llm = llm
        self.model = model
        self.max_tokens = max_tokens
        self.rules = tuple(rules)

    def classify(self, text: str) -> ClassificationResult:
        result = match_rules(text, self.rules)
        if result is not None:
            return result
        if self.llm is None:
            return default_result()
        return self._classify_with_llm(text)

    def _classify_with_llm(self, text: str) -> ClassificationResult:
        messages = [
            {"role": "system", "content": build_classifier_instruction()},
            {"role": "user", "content": text},
        ]
        try:
            content = self.llm.complete(messages, model=self.model, temperature=0.0, max_tokens=self.max_tokens)
        except Exception:
            logger.warning("LLM classifier call failed; using default template", exc_info=True)
            return default_result()
        return parse_llm_classification(content)


def classify(text: str) -> ClassificationResult:
    """Heuristic-only classification (no LLM configured)."""

    return TemplateClassifier().classify(text)
