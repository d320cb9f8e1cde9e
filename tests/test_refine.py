from typing import Any, Dict, List, Optional, Sequence

import pytest

from promptlab import snippets
from promptlab.errors import RefineError
from promptlab.refine import RefineEngine, RefineRequest
from promptlab.router import DEFAULT_ROUTING


class FakeBackend:
    def __init__(self, reply: str = "You are a senior engineer.", error: Optional[Exception] = None) -> None:
        self.reply = reply
        self.error = error
        self.calls: List[Dict[str, Any]] = []
        self.last_usage = {"prompt_tokens": 120, "completion_tokens": 40}

    def complete(
        self,
        messages: Sequence[Dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> str:
        self.calls.append(
            {"messages": list(messages), "model": model, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.error is not None:
            raise self.error
        return self.reply


def test_refine_routes_and_builds_messages() -> None:
    backend = FakeBackend(reply="  You are a senior engineer.  ")
    engine = RefineEngine(backend, max_input_chars=5)

    response = engine.refine(RefineRequest(text="0123456789", template_id="coding_debug", user_plan="pro"))

    call = backend.calls[0]
    assert call["model"] == DEFAULT_ROUTING.coding_model
    assert call["temperature"] == 0.3
    assert call["max_tokens"] == 512
    assert call["messages"][0]["content"].startswith(snippets.CORE_CONTRACT)
    assert call["messages"][1]["content"] == "56789"
    assert response.refined_text == "You are a senior engineer."
    assert response.template_id_used == "coding_debug"
    assert response.category_used == "coding"
    assert response.usage == {"input_tokens": 120, "output_tokens": 40}


def test_unknown_template_uses_category_default() -> None:
    backend = FakeBackend()
    response = RefineEngine(backend).refine(RefineRequest(text="notes", template_id="nope", category="writing"))

    assert response.template_id_used == "writing_blog"
    assert backend.calls[0]["model"] == DEFAULT_ROUTING.default_model


def test_alt_variant_routes_to_alt_model() -> None:
    backend = FakeBackend()
    RefineEngine(backend).refine(RefineRequest(text="notes", template_id="coding_debug", ab_test_variant="alt"))
    assert backend.calls[0]["model"] == DEFAULT_ROUTING.alt_model


def test_backend_failure_raises_refine_error() -> None:
    engine = RefineEngine(FakeBackend(error=ConnectionError("boom")))
    with pytest.raises(RefineError) as excinfo:
        engine.refine(RefineRequest(text="notes", template_id="general_general", user_plan="pro"))
    assert excinfo.value.model == DEFAULT_ROUTING.default_model


def test_empty_output_raises_refine_error() -> None:
    with pytest.raises(RefineError):
        RefineEngine(FakeBackend(reply="   ")).refine(RefineRequest(text="notes"))


def test_plan_gate_falls_back_to_category_default() -> None:
    backend = FakeBackend()
    engine = RefineEngine(backend)

    gated = engine.refine(RefineRequest(text="notes", template_id="coding_refactor", user_plan="free"))
    allowed = engine.refine(RefineRequest(text="notes", template_id="coding_refactor", user_plan="builder"))

    assert gated.template_id_used == "coding_feature"
    assert allowed.template_id_used == "coding_refactor"
