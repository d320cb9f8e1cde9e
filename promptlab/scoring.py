"""Heuristic scoring for refined prompts.

Pure string analysis: deterministic, no network calls. Eight sub-scores, each
in ``[0, 1]``, are combined with fixed weights into ``overall_score``. The
three legacy fields (structure, contract, domain) stay at the top level for
existing consumers; everything else goes into ``metrics``.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

import numpy as np

WEIGHTS: Dict[str, float] = {
    "structure": 0.20,
    "contract": 0.10,
    "domain": 0.10,
    "context_handling": 0.15,
    "constraint_clarity": 0.15,
    "guidance": 0.10,
    "readability": 0.10,
    "efficiency": 0.10,
}

_FLAGS = re.IGNORECASE | re.MULTILINE

# structure
SECTION_PATTERNS: Dict[str, re.Pattern] = {
    "role": re.compile(
        r"\byou are\b|\bact as\b|\byour role\b|\bas an? (?:expert|senior|experienced|specialist|professional)\b",
        _FLAGS,
    ),
    "goal": re.compile(r"\byour (?:goal|task|job|objective)\b|\bgoal\b|\bobjective\b|\bthe aim\b", _FLAGS),
    "context": re.compile(r"\bcontext\b|\bbackground\b|\bkey ideas\b|\bgiven that\b", _FLAGS),
    "instructions": re.compile(
        r"\binstructions?\b|\bsteps?\b|\bfollow(?:ing)? these\b|^\s*\d+[.)]\s", _FLAGS
    ),
    "constraints": re.compile(
        r"\bconstraints?\b|\bmust(?: not)?\b|\bdo not\b|\bdon't\b|\bnever\b|\bavoid\b|\bno more than\b|\bat most\b",
        _FLAGS,
    ),
    "output_format": re.compile(
        r"\boutput\b|\bformat\b|\brespond with\b|\breturn\b|\bdeliverable\b|\bjson\b|\bmarkdown\b|\btable\b",
        _FLAGS,
    ),
}

# context handling
CONTEXT_LABEL = re.compile(
    r"^\s*(?:#{1,6}\s*|\*\*)?(?:context|background|key ideas)\b[^\n]{0,40}$|\b(?:context|background|key ideas)\s*:",
    _FLAGS,
)
ATTACHMENT_MARKER = re.compile(r"\b(?:FILE|CODE|IMAGE|ERROR)\s*:|```|\bstack trace\b|\battached\b", _FLAGS)
SUMMARY_HINT = re.compile(
    r"\bsummar(?:y|ies|ize|ise|izing|ising)\b|\btl;dr\b|\bkey (?:points|takeaways)\b|\bin brief\b|\bcondense\b",
    _FLAGS,
)
CONTEXT_WEIGHTS = {"label": 0.6, "attachment": 0.25, "summary": 0.15}

# constraint clarity
MEASURABLE_CONSTRAINTS: Sequence[re.Pattern] = (
    re.compile(
        r"\b\d+(?:\s*(?:-|to)\s*\d+)?\s*(?:words?|characters?|chars|sentences?|paragraphs?|bullets?|bullet points|"
        r"items?|tweets?|lines?|pages?|sections?|examples?|minutes?|seconds?|hours?|days?|weeks?|ms|tokens?)\b",
        _FLAGS,
    ),
    re.compile(
        r"\b(?:under|at most|at least|no more than|no fewer than|maximum|minimum|exactly|up to|within|limit(?:ed)? to)\b",
        _FLAGS,
    ),
    re.compile(r"\b(?:must not|must|do not|don't|never|always|only)\b", _FLAGS),
)
VAGUE_PHRASES = (
    "be concise",
    "be good",
    "be clear",
    "be creative",
    "do your best",
    "make it good",
    "make it better",
    "as appropriate",
)
VAGUE_PENALTY = 0.15

# guidance and readability
NUMBERED_LINE = re.compile(r"^\s*\d+[.)]\s+\S", re.MULTILINE)
BULLET_LINE = re.compile(r"^\s*[-*•]\s+\S", re.MULTILINE)
TRANSITION_WORD = re.compile(
    r"\b(?:first|then|next|finally|afterwards|after that|subsequently|step \d+)\b", _FLAGS
)
HEADING_LINE = re.compile(r"^\s*(?:#{1,6}\s+\S|\*\*[^*]+\*\*:?\s*$|[A-Z][A-Za-z /&()-]{2,40}:\s*$)")
GUIDANCE_SATURATION = 8.0
LONG_LINE_CHARS = 200
HUGE_LINE_CHARS = 500

# domain
DOMAIN_TERMS: Dict[str, Sequence[str]] = {
    "coding": (
        "edge case",
        "test",
        "error handling",
        "step-by-step",
        "constraint",
        "diff",
        "function",
        "stack trace",
        "acceptance criteria",
        "file",
    ),
    "writing": (
        "tone",
        "audience",
        "length",
        "style",
        "voice",
        "reading level",
        "hook",
        "call to action",
        "headline",
    ),
    "research": (
        "compare",
        "pros and cons",
        "sources",
        "citations",
        "evidence",
        "trade-off",
        "uncertainty",
        "recommendation",
    ),
    "planning": (
        "timeline",
        "milestone",
        "phase",
        "dependencies",
        "risk",
        "owner",
        "deliverable",
        "acceptance criteria",
    ),
    "communication": (
        "tone",
        "recipient",
        "relationship",
        "formal",
        "concise",
        "next steps",
        "reply",
    ),
    "general": (
        "role",
        "goal",
        "context",
        "constraints",
        "output",
        "audience",
        "tone",
        "format",
    ),
}

# contract
FORMAT_SIGNALS: Dict[str, re.Pattern] = {
    "json": re.compile(r"\bjson\b", _FLAGS),
    "markdown": re.compile(r"\bmarkdown\b", _FLAGS),
    "table": re.compile(r"\btables?\b", _FLAGS),
    "bullets": re.compile(r"\bbullet(?:s|ed| points?)?\b", _FLAGS),
    "return_only": re.compile(r"\breturn only\b|\boutput only\b|\brespond only\b|\bonly return\b", _FLAGS),
}
# Narrative intent only counts against JSON; it never adds to the base.
NARRATIVE_INTENT = re.compile(
    r"\b(?:essays?|narrative|prose|flowing paragraphs|long-form|storytelling)\b", _FLAGS
)
SCHEMA_VOCABULARY = re.compile(r"\bschema\b|\bfields?\b|\bproperties\b|\bkeys\b|\"[A-Za-z_]+\"\s*:", _FLAGS)
FORMAT_SIGNAL_WEIGHT = 0.5
CONTRADICTION_PENALTY = 0.5
SCHEMA_BONUS = 0.25


@dataclass(frozen=True)
class ScoreResult:
    structure_score: float
    contract_score: float
    domain_score: float
    overall_score: float
    metrics: Dict[str, Any] = field(default_factory=dict)

    @property
    def sub_scores(self) -> Dict[str, float]:
        return dict(self.metrics.get("scores", {}))


def _clamp01(value: float) -> float:
    if value is None or math.isnan(value):
        return 0.0
    return max(0.0, min(1.0, float(value)))


def _non_empty_lines(text: str) -> List[str]:
    return [line for line in text.splitlines() if line.strip()]


def structure_score(refined: str) -> tuple[float, List[str]]:
    sections = [name for name, pattern in SECTION_PATTERNS.items() if pattern.search(refined)]
    return _clamp01(len(sections) / len(SECTION_PATTERNS)), sections


def context_handling_score(refined: str) -> tuple[float, Dict[str, bool]]:
    found = {
        "label": bool(CONTEXT_LABEL.search(refined)),
        "attachment": bool(ATTACHMENT_MARKER.search(refined)),
        "summary": bool(SUMMARY_HINT.search(refined)),
    }
    total = sum(CONTEXT_WEIGHTS[key] for key, present in found.items() if present)
    return _clamp01(total), found


def constraint_clarity_score(refined: str) -> tuple[float, int, List[str]]:
    hits = sum(len(pattern.findall(refined)) for pattern in MEASURABLE_CONSTRAINTS)
    if hits == 0:
        score = 0.0
    elif hits <= 2:
        score = 0.4
    elif hits <= 5:
        score = 0.7
    else:
        score = 1.0
    lowered = refined.lower()
    vague = [phrase for phrase in VAGUE_PHRASES if phrase in lowered]
    if vague:
        score = max(0.0, score - VAGUE_PENALTY)
    return _clamp01(score), hits, vague


def guidance_score(refined: str) -> tuple[float, Dict[str, int]]:
    counts = {
        "numbered": len(NUMBERED_LINE.findall(refined)),
        "bullets": len(BULLET_LINE.findall(refined)),
        "transitions": len(TRANSITION_WORD.findall(refined)),
    }
    weighted = counts["numbered"] * 1.0 + counts["bullets"] * 0.75 + counts["transitions"] * 0.5
    return _clamp01(weighted / GUIDANCE_SATURATION), counts


def readability_score(refined: str) -> tuple[float, Dict[str, Any]]:
    lines = _non_empty_lines(refined)
    if not lines:
        return 0.0, {"lines": 0, "structured_lines": 0, "avg_line_length": 0.0, "long_lines": 0, "max_line_length": 0}

    structured = sum(
        1
        for line in lines
        if HEADING_LINE.match(line) or BULLET_LINE.match(line) or NUMBERED_LINE.match(line)
    )
    lengths = np.array([len(line) for line in lines], dtype=float)
    avg_length = float(lengths.mean())
    long_lines = int((lengths > LONG_LINE_CHARS).sum())
    max_length = int(lengths.max())

    score = 0.2
    score += 0.4 * min(1.0, (structured / len(lines)) * 2)
    if 20 <= avg_length < 120:
        score += 0.4
    elif 120 <= avg_length < 200:
        score += 0.2
    elif avg_length < 20:
        score += 0.1
    score -= min(0.3, 0.05 * long_lines)
    if max_length > HUGE_LINE_CHARS:
        score -= 0.2

    details = {
        "lines": len(lines),
        "structured_lines": structured,
        "avg_line_length": round(avg_length, 2),
        "long_lines": long_lines,
        "max_line_length": max_length,
    }
    return _clamp01(score), details


def efficiency_from_ratio(ratio: Optional[float]) -> float:
    """Peaks at 1.0 for ratio 2; 0.5 at ratios 1 and 4; 0 from ratio 6 on."""

    if ratio is None or ratio <= 0:
        return 0.0
    if ratio < 1:
        return _clamp01(0.5 * ratio)
    if ratio <= 2:
        return _clamp01(0.5 + 0.5 * (ratio - 1))
    if ratio <= 4:
        return _clamp01(1.0 - 0.25 * (ratio - 2))
    if ratio < 6:
        return _clamp01(0.25 * (6 - ratio))
    return 0.0


def efficiency_score(raw: str, refined: str) -> tuple[float, Optional[float]]:
    if not raw:
        return 0.0, None
    ratio = len(refined) / len(raw)
    return efficiency_from_ratio(ratio), ratio


def domain_score(category: str, refined: str) -> tuple[float, int, int]:
    terms = DOMAIN_TERMS.get(category, DOMAIN_TERMS["general"])
    lowered = refined.lower()
    hits = sum(1 for term in terms if term in lowered)
    denominator = max(3, min(len(terms), 8))
    return _clamp01(hits / denominator), hits, len(terms)


def contract_score(refined: str) -> tuple[float, Dict[str, Any]]:
    signals = sorted(name for name, pattern in FORMAT_SIGNALS.items() if pattern.search(refined))
    score = min(1.0, FORMAT_SIGNAL_WEIGHT * len(signals))
    narrative = bool(NARRATIVE_INTENT.search(refined))
    contradiction = "json" in signals and narrative
    if contradiction:
        score = max(0.0, score - CONTRADICTION_PENALTY)
    schema = bool(SCHEMA_VOCABULARY.search(refined))
    if schema:
        score += SCHEMA_BONUS
    return _clamp01(score), {
        "signals": signals,
        "narrative": narrative,
        "contradiction": contradiction,
        "schema": schema,
    }


def combine(sub_scores: Dict[str, float]) -> float:
    """Weighted sum of the eight sub-scores."""

    names = list(WEIGHTS)
    weights = np.array([WEIGHTS[name] for name in names], dtype=float)
    values = np.array([sub_scores[name] for name in names], dtype=float)
    return _clamp01(float(np.dot(weights, values)))


def score(
    category: str,
    template_slug: str,
    template_version: str,
    raw_text: str,
    refined_text: str,
) -> ScoreResult:
    """Score a ``(raw, refined)`` pair."""

    raw = raw_text or ""
    refined = refined_text or ""
    category_key = (category or "").strip().lower()

    structure, sections = structure_score(refined)
    context, context_found = context_handling_score(refined)
    constraints, constraint_hits, vague = constraint_clarity_score(refined)
    guidance, guidance_counts = guidance_score(refined)
    readability, readability_details = readability_score(refined)
    efficiency, ratio = efficiency_score(raw, refined)
    domain, domain_hits, domain_terms = domain_score(category_key, refined)
    contract, contract_details = contract_score(refined)

    sub_scores = {
        "structure": structure,
        "contract": contract,
        "domain": domain,
        "context_handling": context,
        "constraint_clarity": constraints,
        "guidance": guidance,
        "readability": readability,
        "efficiency": efficiency,
    }
    overall = combine(sub_scores)

    metrics: Dict[str, Any] = {
        "scores": sub_scores,
        "weights": dict(WEIGHTS),
        "sections_found": sections,
        "context": context_found,
        "constraint_hits": constraint_hits,
        "vague_phrases": vague,
        "guidance": guidance_counts,
        "readability": readability_details,
        "length_ratio": None if ratio is None else round(ratio, 4),
        "raw_length": len(raw),
        "refined_length": len(refined),
        "domain_hits": domain_hits,
        "domain_terms": domain_terms,
        "contract": contract_details,
        "category": category_key,
        "template_slug": template_slug,
        "template_version": template_version,
    }

    return ScoreResult(
        structure_score=structure,
        contract_score=contract,
        domain_score=domain,
        overall_score=overall,
        metrics=metrics,
    )
