from promptlab import snippets
from promptlab.prompt_builder import build_instruction, build_instruction_layers, build_messages, truncate_input


def test_layers_keep_their_order() -> None:
    instruction = build_instruction("coding_debug")
    positions = [
        instruction.index(snippets.CORE_CONTRACT),
        instruction.index(snippets.USER_PRIORITY_RULES),
        instruction.index(snippets.CONTEXT_PACKAGING_RULES),
        instruction.index(snippets.QUALITY_BAR),
        instruction.index(snippets.DOMAIN_SNIPPETS["coding"]),
        instruction.index(snippets.CLOSING_DIRECTIVE),
    ]
    assert positions == sorted(positions)


def test_domain_snippet_follows_template_category() -> None:
    layers = build_instruction_layers("writing_email")
    assert layers[4] == snippets.DOMAIN_SNIPPETS["writing"]
    assert build_instruction_layers("nope")[4] == snippets.DOMAIN_SNIPPETS["general"]


def test_model_style_appears_in_guidance() -> None:
    assert "Target model: Claude" in build_instruction("general_general", model_style="Claude")


def test_truncate_keeps_tail() -> None:
    assert truncate_input("abcdef", max_chars=3) == "def"
    assert truncate_input("abc", max_chars=3) == "abc"
    assert truncate_input(None) == ""


def test_build_messages() -> None:
    messages = build_messages("x" * 10, "coding_debug", max_input_chars=4)
    assert [m["role"] for m in messages] == ["system", "user"]
    assert messages[1]["content"] == "xxxx"
