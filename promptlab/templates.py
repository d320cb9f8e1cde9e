"""Static template catalog.

Templates are behavior presets: each one carries a category, a plan gate and
the hints that bias the refinement model. The catalog is built once at import
time and never mutated.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from promptlab.models.template import CATEGORIES, TemplateBehavior, TemplateDescriptor

DEFAULT_TEMPLATE_ID = "general_general"
DEFAULT_TEMPLATE_VERSION = "1.0.0"
SLUG_SUFFIX = "_default"


def _template(
    template_id: str,
    category: str,
    label: str,
    description: str,
    min_plan: str,
    behavior: TemplateBehavior,
) -> TemplateDescriptor:
    return TemplateDescriptor(
        id=template_id,
        category=category,
        label=label,
        description=description,
        min_plan=min_plan,
        behavior=behavior,
    )


_TEMPLATES: List[TemplateDescriptor] = [
    # Coding
    _template(
        "coding_feature",
        "coding",
        "Implement feature",
        "Help implement a new feature or component",
        "free",
        TemplateBehavior(
            base_role="a senior software engineer who writes clean, maintainable, production-ready code",
            goal_type="implement a new feature or component",
            context_hints="Preserve file paths, function names, component names, API signatures, and tech stack details",
            output_hints="Expect working code with clear file structure, comments where non-obvious, and consideration of edge cases",
            quality_rules="Code should be idiomatic for the specified language/framework. Include error handling. Consider testability.",
        ),
    ),
    _template(
        "coding_debug",
        "coding",
        "Debug / fix bug",
        "Diagnose and fix defects",
        "free",
        TemplateBehavior(
            base_role="a senior debugging specialist who systematically diagnoses and fixes issues",
            goal_type="diagnose and fix a bug or error",
            context_hints="Preserve error messages, stack traces, file names, line numbers, and reproduction steps verbatim",
            output_hints="Provide root cause analysis, the fix, and verification steps. Include code changes as diffs or complete files.",
            quality_rules="Explain the root cause. Propose minimal, targeted fixes. Avoid introducing new issues.",
        ),
    ),
    _template(
        "coding_refactor",
        "coding",
        "Refactor / improve",
        "Refactor for readability, performance, or maintainability",
        "builder",
        TemplateBehavior(
            base_role="a senior engineer focused on code quality, readability, and maintainability",
            goal_type="refactor code for better structure, performance, or clarity",
            context_hints="Preserve existing behavior contracts and API surfaces unless explicitly changing them",
            output_hints="Provide refactored code with explanations of what changed and why. Preserve tests or update them.",
            quality_rules="Maintain backward compatibility unless told otherwise. Improve without over-engineering.",
        ),
    ),
    _template(
        "coding_tests",
        "coding",
        "Write tests",
        "Create unit/integration tests",
        "builder",
        TemplateBehavior(
            base_role="a test engineer who writes comprehensive, maintainable test suites",
            goal_type="write tests for code",
            context_hints="Preserve function signatures, expected behaviors, and edge cases from the source code",
            output_hints="Provide complete test files with clear test names, setup, assertions, and edge case coverage",
            quality_rules="Tests should be isolated, fast, and deterministic. Cover happy paths and edge cases.",
        ),
    ),
    _template(
        "coding_explain",
        "coding",
        "Explain code",
        "Explain what code does and why",
        "free",
        TemplateBehavior(
            base_role="a senior engineer who explains complex code clearly to developers of varying levels",
            goal_type="explain what code does and how it works",
            context_hints="Preserve code structure and key implementation details for reference",
            output_hints="Provide clear explanations with sections for overview, key components, and important details",
            quality_rules="Explain the 'why' not just the 'what'. Use concrete examples. Adapt depth to audience.",
        ),
    ),
    # Writing: the subject always comes from the user's notes.
    _template(
        "writing_blog",
        "writing",
        "Blog post",
        "Draft a blog post with outline-first approach",
        "free",
        TemplateBehavior(
            base_role="a skilled technical or content writer who creates engaging, well-structured articles about the subject provided by the user",
            goal_type="write a blog post or article about the user's specified topic",
            context_hints="Preserve the user's subject matter, key messages, examples, and audience context. The topic must come from the user's notes.",
            output_hints="First outline, then draft. Include intro, body sections, and conclusion. Specify word count if given.",
            quality_rules="No fluff. Use concrete examples from the user's notes. Match specified tone. Hook the reader early.",
        ),
    ),
    _template(
        "writing_twitter_thread",
        "writing",
        "Twitter/X thread",
        "Compose a concise thread",
        "free",
        TemplateBehavior(
            base_role="a social content strategist who understands platform dynamics, attention psychology, and concise persuasive storytelling",
            goal_type="write X/Twitter content (thread or single post, depending on the request) about the subject in the user's top-level instruction",
            context_hints="Reference docs are context to mine, not the task. Preserve product names, key concepts and slogans. A request for a single post means exactly one post.",
            output_hints="Default: numbered tweets, first hooks, last has CTA, each under 280 chars. Include a key ideas block with 3-5 concept definitions from the user's material.",
            quality_rules="Punchy hook. Scannable, no filler. Never replace the user's subject with a generic topic.",
        ),
    ),
    _template(
        "writing_linkedin_post",
        "writing",
        "LinkedIn post",
        "Professional short-form writing",
        "free",
        TemplateBehavior(
            base_role="a professional content creator who writes engaging LinkedIn content about the subject provided by the user",
            goal_type="write a LinkedIn post about the user's specified topic",
            context_hints="Preserve the user's subject matter, professional context, key achievements or insights, and audience details.",
            output_hints="Hook in first line. Use line breaks for readability. End with engagement prompt or CTA.",
            quality_rules="Professional but human. Avoid corporate jargon. Value-first, promotion-second.",
        ),
    ),
    _template(
        "writing_email",
        "writing",
        "Email",
        "Draft a clear email with purpose and tone",
        "free",
        TemplateBehavior(
            base_role="a clear, effective communicator who writes emails that get results",
            goal_type="write an email about the user's specified purpose",
            context_hints="Preserve recipient context, relationship, purpose, and any constraints on tone or length.",
            output_hints="Subject line, greeting, body with clear ask, professional close. Note formality level.",
            quality_rules="Clear purpose in first paragraph. One clear ask. Easy to skim. Appropriate formality.",
        ),
    ),
    _template(
        "writing_landing_page",
        "writing",
        "Landing page copy",
        "Persuasive page content with structure",
        "builder",
        TemplateBehavior(
            base_role="a conversion-focused copywriter who writes persuasive landing pages for the product or service specified by the user",
            goal_type="write landing page copy for the user's specified product or service",
            context_hints="Preserve the product or service name and details, target audience, key benefits, and brand voice guidelines.",
            output_hints="Hero headline + subhead, problem/solution sections, features/benefits, social proof, CTA.",
            quality_rules="Benefits over features. Clear value prop in 5 seconds. Strong CTA. Address objections.",
        ),
    ),
    # Research
    _template(
        "research_summarize",
        "research",
        "Summarize",
        "Structured summaries for skimmability",
        "free",
        TemplateBehavior(
            base_role="a research analyst who distills complex information into clear summaries",
            goal_type="summarize content for quick understanding",
            context_hints="Preserve source attribution and key data points. Note summary purpose (decision, learning, sharing)",
            output_hints="Executive summary followed by key points as bullets. Include takeaways and action items if relevant.",
            quality_rules="Accuracy first. Preserve nuance on important points. Make it skimmable.",
        ),
    ),
    _template(
        "research_compare",
        "research",
        "Compare options",
        "Pros/cons comparison and recommendation",
        "builder",
        TemplateBehavior(
            base_role="an analyst who objectively evaluates options and provides recommendations",
            goal_type="compare options and provide a recommendation",
            context_hints="Preserve all options being compared, evaluation criteria, and any constraints",
            output_hints="Comparison table or structured breakdown. Pros/cons for each. Clear recommendation with rationale.",
            quality_rules="Fair comparison. Acknowledge trade-offs. Recommendation should match stated criteria.",
        ),
    ),
    _template(
        "research_extract_points",
        "research",
        "Extract key points",
        "Pull out bullets, facts, and action items",
        "free",
        TemplateBehavior(
            base_role="a detail-oriented analyst who extracts actionable information from content",
            goal_type="extract key points, facts, and action items",
            context_hints="Preserve source context and what types of points to prioritize (facts, decisions, action items)",
            output_hints="Categorized bullet lists: key facts, decisions made, action items with owners, open questions",
            quality_rules="Be comprehensive but not redundant. Attribute claims. Highlight uncertainties.",
        ),
    ),
    # Planning
    _template(
        "planning_roadmap",
        "planning",
        "Roadmap / plan",
        "Milestones, scope, risks, dependencies",
        "free",
        TemplateBehavior(
            base_role="a project lead who creates clear, actionable project plans",
            goal_type="create a roadmap or project plan",
            context_hints="Preserve scope, timeline constraints, dependencies, and any existing milestones",
            output_hints="Phases with milestones, key deliverables, dependencies, risks, and success criteria",
            quality_rules="Realistic timelines. Clear ownership. Explicit dependencies. Acknowledge risks.",
        ),
    ),
    _template(
        "planning_feature_spec",
        "planning",
        "Feature spec",
        "Structured specification for a feature",
        "builder",
        TemplateBehavior(
            base_role="a product manager who writes clear, complete feature specifications",
            goal_type="write a feature specification",
            context_hints="Preserve user stories, requirements, constraints, and any technical considerations",
            output_hints="Problem statement, proposed solution, requirements (functional + non-functional), acceptance criteria, out of scope",
            quality_rules="Testable acceptance criteria. Clear scope boundaries. Consider edge cases.",
        ),
    ),
    _template(
        "planning_meeting_notes",
        "planning",
        "Meeting notes",
        "Action items, owners, blockers, follow-ups",
        "free",
        TemplateBehavior(
            base_role="an organized professional who captures meetings clearly and completely",
            goal_type="create structured meeting notes",
            context_hints="Preserve attendees, decisions made, action items, and any blockers discussed",
            output_hints="Attendees, agenda items discussed, decisions made, action items (who/what/when), follow-ups",
            quality_rules="Action items must have owners and deadlines. Decisions should have rationale. Be concise.",
        ),
    ),
    # Communication
    _template(
        "communication_reply",
        "communication",
        "Reply",
        "Draft a response with desired tone",
        "free",
        TemplateBehavior(
            base_role="a thoughtful communicator who crafts appropriate responses",
            goal_type="draft a reply to a message",
            context_hints="Preserve the original message context, relationship, and any specific points to address",
            output_hints="Reply that addresses all points raised. Match appropriate tone and length.",
            quality_rules="Address all points. Appropriate formality. Clear next steps if applicable.",
        ),
    ),
    _template(
        "communication_tone_adjust",
        "communication",
        "Adjust tone",
        "Rewrite keeping content, change tone",
        "free",
        TemplateBehavior(
            base_role="a skilled editor who adjusts tone while preserving meaning",
            goal_type="rewrite content with a different tone",
            context_hints="Preserve the core message and all key information. Note target tone clearly.",
            output_hints="Rewritten content with the new tone. Same information, different delivery.",
            quality_rules="Don't lose information. Match target tone consistently. Preserve intent.",
        ),
    ),
    # Creative
    _template(
        "creative_story",
        "creative",
        "Story / scene",
        "Narrative generation with constraints",
        "free",
        TemplateBehavior(
            base_role="a creative writer who crafts engaging narratives",
            goal_type="write a story, scene, or narrative content",
            context_hints="Preserve character details, setting, plot points, and any style/genre constraints",
            output_hints="Narrative prose following the specified format (scene, chapter, short story, etc.)",
            quality_rules="Show don't tell. Consistent voice. Respect genre conventions. Honor creative constraints.",
        ),
    ),
    _template(
        "creative_brainstorm",
        "creative",
        "Brainstorm ideas",
        "Divergent idea generation",
        "free",
        TemplateBehavior(
            base_role="a creative strategist who generates diverse, innovative ideas",
            goal_type="brainstorm ideas or concepts",
            context_hints="Preserve the problem space, constraints, and any direction for the ideas",
            output_hints="List of distinct ideas with brief descriptions. Variety in approach and feasibility.",
            quality_rules="Quantity and variety. Include obvious and non-obvious ideas. Brief 'why it could work' for each.",
        ),
    ),
    # General
    _template(
        DEFAULT_TEMPLATE_ID,
        "general",
        "General prompt",
        "Default general-purpose prompting",
        "free",
        TemplateBehavior(
            base_role="a prompt designer who manufactures reusable, domain-agnostic system prompts (never the final answers)",
            goal_type="produce a self-contained system prompt that directs a downstream model to accomplish the user's goal",
            context_hints="Infer domain and task type from the user's top-level instruction; mine appended documents for key concepts. Always embed a short context block (3-10 bullets) with actual content.",
            output_hints="Define role, goal, constraints, and a concrete output contract for the downstream model (format, sections, length bounds).",
            quality_rules="Never perform the task yourself. On minimal-input tasks, do not invent domain-specific facts or statistics; express structure rather than factual claims the user did not provide.",
        ),
    ),
]

TEMPLATE_REGISTRY: Mapping[str, TemplateDescriptor] = MappingProxyType(
    {template.id: template for template in _TEMPLATES}
)

_CATEGORY_DEFAULTS: Dict[str, str] = {
    "coding": "coding_feature",
    "writing": "writing_blog",
    "research": "research_summarize",
    "planning": "planning_roadmap",
    "communication": "communication_reply",
    "creative": "creative_brainstorm",
    "general": DEFAULT_TEMPLATE_ID,
}


def is_template_id(value: Optional[str]) -> bool:
    return bool(value) and value in TEMPLATE_REGISTRY


def get_template(template_id: Optional[str]) -> TemplateDescriptor:
    """Look up a template, falling back to the general template for unknown ids."""

    if template_id and template_id in TEMPLATE_REGISTRY:
        return TEMPLATE_REGISTRY[template_id]
    return TEMPLATE_REGISTRY[DEFAULT_TEMPLATE_ID]


def get_template_behavior(template_id: Optional[str]) -> TemplateBehavior:
    template = get_template(template_id)
    return template.behavior or TEMPLATE_REGISTRY[DEFAULT_TEMPLATE_ID].behavior


def get_templates_for_category(category: str) -> List[TemplateDescriptor]:
    return [template for template in _TEMPLATES if template.category == category]


def get_category_default_template(category: Optional[str]) -> str:
    key = (category or "").strip().lower()
    return _CATEGORY_DEFAULTS.get(key, DEFAULT_TEMPLATE_ID)


def get_template_slug(template_id: str) -> str:
    """Slug stored on lab rows for a template."""

    return get_template(template_id).id


def get_template_version(template_id: str) -> str:
    return get_template(template_id).version or DEFAULT_TEMPLATE_VERSION


def slug_to_template_id(slug: Optional[str], category: Optional[str] = None) -> str:
    """Resolve a stored slug back to a template id.

    Tries the slug with its conventional ``_default`` suffix removed, then the
    raw slug, then the category default, and finally the general template.
    """

    cleaned = (slug or "").strip()
    if cleaned:
        if cleaned.endswith(SLUG_SUFFIX):
            stripped = cleaned[: -len(SLUG_SUFFIX)]
            if is_template_id(stripped):
                return stripped
        if is_template_id(cleaned):
            return cleaned
    if category and category.strip().lower() in CATEGORIES:
        return get_category_default_template(category)
    return DEFAULT_TEMPLATE_ID


__all__ = [
    "DEFAULT_TEMPLATE_ID",
    "DEFAULT_TEMPLATE_VERSION",
    "TEMPLATE_REGISTRY",
    "get_category_default_template",
    "get_template",
    "get_template_behavior",
    "get_template_slug",
    "get_template_version",
    "get_templates_for_category",
    "is_template_id",
    "slug_to_template_id",
]
