from quiz_backend.client.selector import SelectorGroup, SelectorOption


def _group(**kwargs):
    options = [
        SelectorOption(value="a", label="A"),
        SelectorOption(value="b", label="B", disabled=True),
        SelectorOption(value="c", label="C"),
    ]
    return SelectorGroup(options, **kwargs)


def test_first_enabled_option_is_tab_stop_without_value():
    states = _group().option_states()
    assert [s.tabindex for s in states] == [0, -1, -1]
    assert not any(s.checked for s in states)


def test_selected_option_is_tab_stop():
    group = _group()
    assert group.select("c")
    states = group.option_states()
    assert [s.tabindex for s in states] == [-1, -1, 0]
    assert [s.checked for s in states] == [False, False, True]


def test_disabled_option_cannot_be_selected():
    group = _group()
    assert not group.select("b")
    assert not group.select("missing")
    assert group.value is None


def test_arrow_keys_wrap_and_skip_disabled():
    group = _group()
    assert group.handle_key("ArrowDown")
    assert group.value == "a"
    group.handle_key("ArrowRight")
    assert group.value == "c"
    group.handle_key("ArrowDown")
    assert group.value == "a"
    group.handle_key("ArrowUp")
    assert group.value == "c"
    group.handle_key("Home")
    assert group.value == "a"
    group.handle_key("End")
    assert group.value == "c"
    assert not group.handle_key("Enter")


def test_disabled_group_ignores_keys():
    group = _group(disabled=True)
    assert not group.handle_key("ArrowDown")
    assert all(s.disabled for s in group.option_states())


def test_result_marks():
    group = _group(value="a", correct_value="c")
    assert [s.state for s in group.option_states()] == ["incorrect", None, "correct"]

    group = _group(value="c", correct_value="c")
    assert [s.state for s in group.option_states()] == [None, None, "correct"]


def test_no_marks_before_selection():
    assert all(s.state is None for s in _group(correct_value="c").option_states())
