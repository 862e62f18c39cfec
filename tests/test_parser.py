"""Tests for the tree-sitter TSX parser adapter."""

import logging
from pathlib import Path

from leakwatch.parser import (
    ParseFailure,
    ParseSuccess,
    create_parser,
    get_tsx_language,
    parse,
    parse_bytes,
    utf16_column,
)


def test_get_tsx_language_returns_language():
    """get_tsx_language() returns a tree-sitter Language object."""
    lang = get_tsx_language()
    assert lang is not None


def test_create_parser_returns_parser():
    """create_parser() returns a configured Parser."""
    parser = create_parser()
    assert parser is not None
    assert parser.language is not None


def test_parse_bytes_success(caplog):
    """Parsing valid source succeeds and logs."""
    source = b"const add = (a, b) => a + b;"
    with caplog.at_level(logging.DEBUG):
        tree = parse_bytes(source, parser=create_parser())
    assert not tree.root_node.has_error
    assert tree.root_node.type == "program"
    assert "Parse succeeded" in caplog.text


def test_parse_bytes_invalid_logs_warning(caplog):
    """Parsing broken source still yields a tree, and logs a warning."""
    with caplog.at_level(logging.WARNING):
        tree = parse_bytes(b"const x = ;")
    assert tree.root_node.has_error
    assert "errors" in caplog.text


def test_parse_plain_javascript():
    result = parse("function add(a, b) { return a + b; }\nconsole.log(add(2, 3));\n")
    assert isinstance(result, ParseSuccess)


def test_parse_type_annotations():
    result = parse(
        "interface Point { x: number; y: number }\n"
        "const add = (a: number, b: number): number => a + b;\n"
        "const p: Point = { x: 1, y: 2 };\n"
    )
    assert isinstance(result, ParseSuccess)


def test_parse_jsx_elements():
    result = parse(
        "const App = () => {\n"
        "  return <View><Text style={styles.title}>Hello</Text></View>;\n"
        "};\n"
    )
    assert isinstance(result, ParseSuccess)


def test_parse_success_carries_utf8_source():
    text = 'const s = "héllo";'
    result = parse(text)
    assert isinstance(result, ParseSuccess)
    assert result.source == text.encode("utf-8")


def test_parse_syntax_error_returns_failure(caplog):
    """Syntax errors come back as a ParseFailure value, never an exception."""
    with caplog.at_level(logging.WARNING):
        result = parse("const ok = 1;\nconst x = ;\n")
    assert isinstance(result, ParseFailure)
    assert result.line == 1
    assert result.message
    assert "AST parsing failed" in caplog.text


def test_parse_unclosed_call_returns_failure():
    result = parse("useEffect(() => {\n  start();\n")
    assert isinstance(result, ParseFailure)


def test_parse_refuses_oversized_source(caplog):
    with caplog.at_level(logging.WARNING):
        result = parse("const a = 1;\n" * 10, max_source_bytes=16)
    assert isinstance(result, ParseFailure)
    assert "limit" in result.message
    assert result.line is None
    assert "too large" in caplog.text


def test_parse_empty_text():
    assert isinstance(parse(""), ParseSuccess)


def test_parse_sample_tsx():
    """Parser parses the sample component file successfully."""
    sample_path = Path(__file__).parent / "sample.tsx"
    assert sample_path.exists(), "tests/sample.tsx must exist"
    result = parse(sample_path.read_text(encoding="utf-8"))
    assert isinstance(result, ParseSuccess)
    assert result.tree.root_node.type == "program"


def test_utf16_column_counts_astral_characters_twice():
    source = "x(\"\U0001F600\", y);".encode("utf-8")
    byte_offset = source.index(b"y")
    assert utf16_column(source, byte_offset, byte_offset) == 8


def test_error_column_is_utf16():
    """An emoji takes the same two columns as two ASCII characters."""
    with_emoji = parse("const s = \"\U0001F600\"; const x = ;")
    with_ascii = parse("const s = \"ab\"; const x = ;")
    assert isinstance(with_emoji, ParseFailure)
    assert isinstance(with_ascii, ParseFailure)
    assert with_emoji.column == with_ascii.column
    assert with_emoji.column > 14
