from promptlab.plan import is_template_available, normalize_plan, plan_label


def test_normalize_plan() -> None:
    assert normalize_plan("builder") == "light"
    assert normalize_plan(" PRO ") == "pro"
    assert normalize_plan("enterprise") == "free"
    assert normalize_plan(None) == "free"


def test_plan_label() -> None:
    assert plan_label("light") == "Light"
    assert plan_label("free") == "Free"


def test_min_plan_gate() -> None:
    assert is_template_available("coding_debug", "free")
    assert not is_template_available("coding_refactor", "free")
    assert is_template_available("coding_refactor", "builder")
    assert is_template_available("coding_refactor", "pro")
