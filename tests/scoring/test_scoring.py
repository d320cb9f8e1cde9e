import pytest

from promptlab.scoring import (
    WEIGHTS,
    constraint_clarity_score,
    contract_score,
    context_handling_score,
    domain_score,
    efficiency_from_ratio,
    efficiency_score,
    guidance_score,
    readability_score,
    score,
    structure_score,
)

WELL_FORMED = """You are an expert backend engineer. Your goal is to fix the login crash.

Context:
- The app uses Flask 2.3 and SQLAlchemy
- ERROR: TypeError: 'NoneType' object is not subscriptable
- Summary of the issue: the session lookup returns None after logout

Instructions:
1. First reproduce the crash with a failing test
2. Then trace the stack trace to the failing function
3. Finally propose a minimal diff

Constraints:
- Do not change the public API
- Keep the answer under 300 words

Output format: a markdown list of steps followed by the diff."""

RAW = "login crashes with TypeError after logout, fix it please, flask app"


def test_weights_sum_to_one() -> None:
    assert sum(WEIGHTS.values()) == pytest.approx(1.0)


def test_overall_is_the_weighted_sum() -> None:
    result = score("coding", "coding_debug", "1.0.0", RAW, WELL_FORMED)
    subs = result.sub_scores

    assert set(subs) == set(WEIGHTS)
    assert result.overall_score == pytest.approx(sum(WEIGHTS[name] * subs[name] for name in WEIGHTS))
    assert result.structure_score == subs["structure"]
    assert result.metrics["template_slug"] == "coding_debug"
    assert result.metrics["category"] == "coding"


@pytest.mark.parametrize(
    "raw,refined",
    [
        ("", ""),
        ("abc", ""),
        ("", WELL_FORMED),
        (RAW, "x" * 5000),
        (RAW, WELL_FORMED * 20),
        (RAW, "json essay narrative table bullets markdown return only schema"),
    ],
)
def test_scores_stay_in_unit_interval(raw: str, refined: str) -> None:
    result = score("writing", "writing_blog", "1.0.0", raw, refined)
    for value in list(result.sub_scores.values()) + [result.overall_score]:
        assert 0.0 <= value <= 1.0


def test_scoring_is_deterministic() -> None:
    first = score("coding", "coding_debug", "1.0.0", RAW, WELL_FORMED)
    second = score("coding", "coding_debug", "1.0.0", RAW, WELL_FORMED)
    assert first == second


def test_structure_counts_sections() -> None:
    assert structure_score(WELL_FORMED)[0] == pytest.approx(1.0)
    assert structure_score("")[0] == 0.0


def test_context_handling_weights() -> None:
    assert context_handling_score(WELL_FORMED)[0] == pytest.approx(1.0)
    assert context_handling_score("Background: we ship weekly.")[0] == pytest.approx(0.6)
    assert context_handling_score("nothing here")[0] == 0.0


def test_constraint_clarity_steps_and_vague_penalty() -> None:
    assert constraint_clarity_score("Keep it under 200 words.")[0] == pytest.approx(0.4)
    assert constraint_clarity_score("Keep it under 200 words. Be concise.")[0] == pytest.approx(0.25)
    assert constraint_clarity_score("Be concise.")[0] == 0.0
    many = "Must cite sources. Never guess. Always link. Only use 3 examples. Do not exceed 2 pages."
    assert constraint_clarity_score(many)[0] == pytest.approx(1.0)


def test_guidance_weighting() -> None:
    value, counts = guidance_score("1. Read the file\n2. Write the patch\n- Keep it small\n")
    assert counts == {"numbered": 2, "bullets": 1, "transitions": 0}
    assert value == pytest.approx(2.75 / 8)


def test_readability() -> None:
    structured = (
        "## Review checklist for release\n"
        "- Confirm every migration is reversible\n"
        "- Verify rollout flags default to off\n"
    )
    assert readability_score(structured)[0] == pytest.approx(1.0)
    assert readability_score("a" * 600)[0] == 0.0
    assert readability_score("")[0] == 0.0


@pytest.mark.parametrize(
    "ratio,expected",
    [
        (0.0, 0.0),
        (0.5, 0.25),
        (1.0, 0.5),
        (1.5, 0.75),
        (2.0, 1.0),
        (3.0, 0.75),
        (4.0, 0.5),
        (5.0, 0.25),
        (6.0, 0.0),
        (9.0, 0.0),
    ],
)
def test_efficiency_curve(ratio: float, expected: float) -> None:
    assert efficiency_from_ratio(ratio) == pytest.approx(expected)


def test_efficiency_with_empty_raw() -> None:
    assert efficiency_score("", "anything") == (0.0, None)
    assert efficiency_score("abcd", "abcdefgh") == (1.0, 2.0)


def test_domain_uses_category_terms() -> None:
    value, hits, _ = domain_score("coding", "Handle each edge case and add a test for the function.")
    assert hits == 3
    assert value == pytest.approx(3 / 8)
    assert domain_score("unknown", "Define the role and goal.")[1] == 2


def test_json_plus_narrative_is_penalised() -> None:
    head = (
        "You are a data analyst. Your goal is to summarize the quarterly report.\n"
        "Return the result as JSON:\n"
        '```json\n{"summary": "...", "risks": []}\n```\n'
    )
    json_only = score("research", "research_summarize", "1.0.0", RAW, head)
    mixed = score("research", "research_summarize", "1.0.0", RAW, head + "Write it as a flowing narrative essay.")

    assert json_only.metrics["contract"]["contradiction"] is False
    assert mixed.metrics["contract"]["contradiction"] is True
    assert mixed.contract_score < json_only.contract_score
    assert json_only.contract_score == pytest.approx(0.75)
    assert mixed.contract_score == pytest.approx(0.25)


def test_narrative_alone_adds_nothing_to_contract() -> None:
    assert contract_score("Respond in JSON.")[0] == pytest.approx(0.5)
    assert contract_score("Respond in JSON. Write it as an essay.")[0] == 0.0
    assert contract_score("Write it as an essay.")[0] == 0.0
