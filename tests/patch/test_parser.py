from fuzzpatch.patch import (
    DEFAULT_FILE_PATH,
    FilePatch,
    Operation,
    extract_operations,
    parse_patch,
)


def _hunk(search: str, replace: str) -> str:
    return "\n".join(
        ["<<<<<<< SEARCH", search, "=======", replace, ">>>>>>> REPLACE"]
    )


def test_single_file_single_hunk():
    text = "\n".join(["### File: a.txt", _hunk("foo", "bar")])

    patches = parse_patch(text)

    assert patches == [FilePatch(file_path="a.txt", operations=[Operation("foo", "bar")])]


def test_repeated_headers_accumulate_in_encounter_order():
    text = "\n".join(
        [
            "### File: a.txt",
            _hunk("one", "1"),
            "### File: b.txt",
            _hunk("two", "2"),
            "### File: a.txt",
            _hunk("three", "3"),
            _hunk("four", "4"),
        ]
    )

    patches = parse_patch(text)

    assert [p.file_path for p in patches] == ["a.txt", "b.txt"]
    assert [op.original_block for op in patches[0].operations] == ["one", "three", "four"]
    assert patches[1].operations == [Operation("two", "2")]


def test_headerless_script_uses_placeholder_path():
    patches = parse_patch("Here is the change:\n" + _hunk("foo", "bar") + "\nThanks")

    assert len(patches) == 1
    assert patches[0].file_path == DEFAULT_FILE_PATH
    assert patches[0].operations == [Operation("foo", "bar")]


def test_no_blocks_yields_empty_list():
    assert parse_patch("") == []
    assert parse_patch("just some prose\nand more") == []
    assert parse_patch("### File: a.txt\nnothing to do here") == []


def test_header_without_blocks_does_not_block_later_same_path():
    text = "\n".join(
        [
            "### File: a.txt",
            "I will now edit a.txt",
            "### File: a.txt",
            _hunk("x", "y"),
        ]
    )

    assert parse_patch(text) == [FilePatch("a.txt", [Operation("x", "y")])]


def test_text_before_first_header_is_ignored():
    text = "\n".join([_hunk("early", "E"), "## File: a.txt", _hunk("late", "L")])

    assert parse_patch(text) == [FilePatch("a.txt", [Operation("late", "L")])]


def test_header_variants():
    text = "\n".join(
        [
            "file: plain.txt",
            _hunk("a", "b"),
            "# FILE:   spaced/path name.py   ",
            _hunk("c", "d"),
            "###File:src/x.ts",
            _hunk("e", "f"),
        ]
    )

    assert [p.file_path for p in parse_patch(text)] == [
        "plain.txt",
        "spaced/path name.py",
        "src/x.ts",
    ]


def test_four_hashes_is_not_a_header():
    text = "#### File: a.txt\n" + _hunk("foo", "bar")

    patches = parse_patch(text)

    assert [p.file_path for p in patches] == [DEFAULT_FILE_PATH]


def test_fence_variants_are_case_insensitive():
    text = "\n".join(
        [
            "<<<<<<<<<<search",
            "foo",
            "==========",
            "bar",
            ">>>>>   Replace",
        ]
    )

    assert extract_operations(text) == [Operation("foo", "bar")]


def test_unterminated_hunk_is_dropped():
    text = "\n".join(
        [
            "<<<<<<< SEARCH",
            "lost",
            "=======",
            "never closed",
            _hunk("foo", "bar"),
            "<<<<<<< SEARCH",
            "no divider either",
        ]
    )

    assert extract_operations(text) == [Operation("foo", "bar")]


def test_missing_divider_is_dropped():
    text = "\n".join(["<<<<<<< SEARCH", "foo", ">>>>>>> REPLACE"])

    assert extract_operations(text) == []


def test_whitespace_next_to_fences_is_excluded():
    text = "\n".join(
        [
            "<<<<<<< SEARCH",
            "",
            "    def foo():",
            "        pass",
            "",
            "=======",
            "\tdef bar():  ",
            "\t\treturn  1",
            "",
            "",
            ">>>>>>> REPLACE",
        ]
    )

    assert extract_operations(text) == [
        Operation("def foo():\n        pass", "def bar():  \n\t\treturn  1")
    ]


def test_interior_text_is_verbatim():
    text = _hunk("a  =  1\n\n\tb = 2", "x\r\n  y")

    assert extract_operations(text) == [Operation("a  =  1\n\n\tb = 2", "x\r\n  y")]


def test_whitespace_only_block_becomes_empty():
    text = "\n".join(["<<<<<<< SEARCH", "   ", "\t", "=======", "new", ">>>>>>> REPLACE"])

    assert extract_operations(text) == [Operation("", "new")]


def test_empty_search_block():
    text = "\n".join(["<<<<<<< SEARCH", "=======", "new", ">>>>>>> REPLACE"])

    assert extract_operations(text) == [Operation("", "new")]


def test_crlf_script():
    text = "### File: a.txt\r\n" + _hunk("foo", "bar").replace("\n", "\r\n") + "\r\n"

    assert parse_patch(text) == [FilePatch("a.txt", [Operation("foo", "bar")])]


def test_parse_is_idempotent():
    text = "\n".join(
        ["### File: a.txt", _hunk("x", "y"), "### File: b.txt", _hunk("z", "w")]
    )

    assert parse_patch(text) == parse_patch(text)
