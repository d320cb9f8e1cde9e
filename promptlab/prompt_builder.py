"""Refinement prompt builder."""

from __future__ import annotations

from typing import List, Optional

from promptlab import snippets
from promptlab.templates import get_template, get_template_behavior

DEFAULT_MODEL_STYLE = "a general-purpose LLM"
MAX_INPUT_CHARS = 8000


def _template_guidance(template_id: str, model_style: Optional[str]) -> str:
    template = get_template(template_id)
    behavior = get_template_behavior(template_id)
    lines = [
        "Template context (format guidance, not a content mandate):",
        f"- Template: {template.label}",
        f"- Target model: {model_style or DEFAULT_MODEL_STYLE}",
        f"- Suggested role for the downstream model: {behavior.base_role}",
        f"- Typical goal type: {behavior.goal_type}",
    ]
    if behavior.context_hints:
        lines.append(f"- Context to preserve: {behavior.context_hints}")
    if behavior.output_hints:
        lines.append(f"- Output format guidance (adapt to the user's request): {behavior.output_hints}")
    if behavior.quality_rules:
        lines.append(f"- Quality rules for this domain: {behavior.quality_rules}")
    return "\n".join(lines)


def build_instruction_layers(template_id: str, model_style: Optional[str] = None) -> List[str]:
    template = get_template(template_id)
    return [
        "\n\n".join([snippets.CORE_CONTRACT, snippets.TASK_EXECUTION_GUARD]),
        snippets.USER_PRIORITY_RULES,
        snippets.CONTEXT_PACKAGING_RULES,
        snippets.QUALITY_BAR,
        snippets.domain_snippet(template.category),
        _template_guidance(template.id, model_style),
        snippets.CLOSING_DIRECTIVE,
    ]


def build_instruction(template_id: str, model_style: Optional[str] = None) -> str:
    """System instruction for the refinement model, layers in fixed order."""

    return "\n\n".join(build_instruction_layers(template_id, model_style))


def truncate_input(text: str, max_chars: int = MAX_INPUT_CHARS) -> str:
    """Keep the tail of over-long input; the latest notes matter most."""

    if not text or len(text) <= max_chars:
        return text or ""
    return text[-max_chars:]


def build_messages(
    text: str,
    template_id: str,
    model_style: Optional[str] = None,
    max_input_chars: int = MAX_INPUT_CHARS,
) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": build_instruction(template_id, model_style)},
        {"role": "user", "content": truncate_input(text, max_input_chars)},
    ]
