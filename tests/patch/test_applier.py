from fuzzpatch.patch import MatchTier, Operation, apply_operations, parse_patch


def test_exact_round_trip():
    res = apply_operations("foo baz", [Operation("foo", "bar")])

    assert res.modified == "bar baz"
    assert res.success
    assert res.errors == []
    assert res.matches == [MatchTier.EXACT]


def test_whitespace_resilience():
    res = apply_operations("  foo  \nbaz", [Operation("foo", "bar")])

    assert res.success
    assert res.errors == []
    assert res.modified == "  bar  \nbaz"
    assert res.matches == [MatchTier.EXACT]


def _script(path: str, search: str, replace: str) -> str:
    return "\n".join(
        [
            f"### File: {path}",
            "<<<<<<< SEARCH",
            search,
            "=======",
            replace,
            ">>>>>>> REPLACE",
            "",
        ]
    )


def test_space_indented_script_on_tab_indented_file():
    original = "def f():\n\tif x:\n\t\treturn 1\n"
    script = _script(
        "f.py",
        "    if x:\n        return 1",
        "    if y:\n        return 2",
    )

    (patch,) = parse_patch(script)
    res = apply_operations(original, patch.operations)

    assert res.matches == [MatchTier.FUZZY]
    assert res.modified == "def f():\n\tif y:\n        return 2\n"
    assert "\tif y:" in res.modified.splitlines()


def test_indented_script_matches_exactly_after_parse():
    original = "def f():\n    if x:\n        return 1\n"
    script = _script(
        "f.py",
        "    if x:\n        return 1",
        "    if y:\n        return 2",
    )

    (patch,) = parse_patch(script)
    res = apply_operations(original, patch.operations)

    assert res.matches == [MatchTier.EXACT]
    assert res.modified == "def f():\n    if y:\n        return 2\n"


def test_fuzzy_multiline_keeps_file_indentation():
    original = (
        "class A:\n"
        "    def f(self):\n"
        "        return  1\n"
        "\n"
        "    def g(self):\n"
        "        pass\n"
    )
    op = Operation("def f(self):\n    return 1", "def f(self):\n        return 2")

    res = apply_operations(original, [op])

    assert res.matches == [MatchTier.FUZZY]
    assert res.modified == (
        "class A:\n"
        "    def f(self):\n"
        "        return 2\n"
        "\n"
        "    def g(self):\n"
        "        pass\n"
    )


def test_failure_isolation():
    ops = [Operation("qux", "X"), Operation("baz", "Y")]

    res = apply_operations("foo baz", ops)

    assert not res.success
    assert len(res.errors) == 1
    assert "qux" in res.errors[0]
    assert res.modified == "foo Y"
    assert res.matches == [None, MatchTier.EXACT]
    assert res.applied_count == 1


def test_operations_see_previous_results():
    res = apply_operations("foo", [Operation("foo", "bar"), Operation("bar", "baz")])

    assert res.modified == "baz"
    assert res.success


def test_newline_normalization_is_sticky():
    ops = [Operation("a\nb", "A\nB"), Operation("c\r\n", "C\r\n")]

    res = apply_operations("a\r\nb\r\nc\r\n", ops)

    assert res.success
    assert res.modified == "A\nB\nC\n"
    assert res.matches == [MatchTier.NEWLINE, MatchTier.NEWLINE]


def test_error_contains_truncated_preview():
    search = "x" * 80

    res = apply_operations("nothing here", [Operation(search, "y")])

    assert res.modified == "nothing here"
    assert len(res.errors) == 1
    assert "x" * 50 + "..." in res.errors[0]
    assert "x" * 51 not in res.errors[0]


def test_apply_is_independent_between_calls():
    ops = [Operation("a", "b")]

    first = apply_operations("a a", ops)
    second = apply_operations("a a", ops)

    assert first == second
    assert first.modified == "b a"


def test_scenario_single_line_patch():
    script = "\n".join(
        [
            "### File: a.txt",
            "<<<<<<< SEARCH",
            "function foo() {",
            "=======",
            "function foo() { // patched",
            ">>>>>>> REPLACE",
        ]
    )
    original = "function foo() {\n  return 1;\n}\n"

    (patch,) = parse_patch(script)
    res = apply_operations(original, patch.operations)

    assert patch.file_path == "a.txt"
    assert res.success
    assert res.modified.count("function foo() { // patched") == 1
    assert res.modified == "function foo() { // patched\n  return 1;\n}\n"
