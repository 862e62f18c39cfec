"""Tests for leakwatch.context: AnalysisContext, create_context, load_contexts, spans and walks."""

import logging
from pathlib import Path

import leakwatch.context as context_module
from leakwatch.context import (
    AnalysisContext,
    count_tree_stats,
    create_context,
    get_source_span,
    load_contexts,
    node_span,
    read_source,
    walk,
)
from leakwatch.parser import create_parser, parse_bytes


def _first_call(ctx: AnalysisContext):
    return next(n for n in ctx.walk() if n.type == "call_expression")


def test_count_tree_stats():
    tree = parse_bytes(b"f(); g(h());", parser=create_parser())
    nodes, calls = count_tree_stats(tree.root_node)
    assert nodes > 3
    assert calls == 3


def test_count_tree_stats_honors_max_nodes():
    tree = parse_bytes(b"f(); g(h());", parser=create_parser())
    nodes, _ = count_tree_stats(tree.root_node, max_nodes=4)
    assert nodes == 4


def test_debug_stats_walk_honors_max_nodes(monkeypatch, caplog):
    sizes = []
    real_walk = context_module.walk

    def counting_walk(node, max_nodes=None):
        visited = list(real_walk(node, max_nodes))
        sizes.append(len(visited))
        return iter(visited)

    monkeypatch.setattr(context_module, "walk", counting_walk)
    with caplog.at_level(logging.DEBUG):
        create_context("a();\n" * 200, max_nodes=10)
    assert sizes == [10]
    assert "Parsed <text>" in caplog.text


def test_stats_skipped_without_debug(monkeypatch, caplog):
    calls = []
    monkeypatch.setattr(context_module, "count_tree_stats", lambda *a, **k: calls.append(a) or (0, 0))
    with caplog.at_level(logging.INFO):
        create_context("a();\n" * 200)
    assert calls == []


def test_create_context_valid_source():
    ctx = create_context("const a = 1;\n")
    assert ctx.tree is not None
    assert ctx.root_node is not None
    assert ctx.parse_error is None
    assert ctx.source == b"const a = 1;\n"
    assert ctx.path is None


def test_create_context_malformed_has_no_tree():
    ctx = create_context("const x = ;", path=Path("bad.ts"))
    assert ctx.tree is None
    assert ctx.root_node is None
    assert ctx.parse_error is not None
    assert ctx.text == "const x = ;"
    assert list(ctx.walk()) == []


def test_walk_is_document_order():
    ctx = create_context("a(); b(); c();")
    callees = [get_source_span(ctx, n.child_by_field_name("function")) for n in ctx.walk() if n.type == "call_expression"]
    assert callees == ["a", "b", "c"]


def test_walk_stops_at_max_nodes(caplog):
    tree = parse_bytes(b"a(); b(); c();")
    with caplog.at_level(logging.WARNING):
        visited = list(walk(tree.root_node, max_nodes=3))
    assert len(visited) == 3
    assert visited[0].type == "program"
    assert "stopped after 3 nodes" in caplog.text


def test_context_walk_honors_max_nodes():
    ctx = create_context("a(); b(); c();", max_nodes=2)
    assert len(list(ctx.walk())) == 2


def test_get_source_span():
    ctx = create_context("const x = foo(42);")
    assert get_source_span(ctx, _first_call(ctx)) == "foo(42)"


def test_node_span_single_line():
    ctx = create_context("x = foo(1, 2);")
    span = node_span(ctx, _first_call(ctx))
    assert (span.start_line, span.start_column) == (0, 4)
    assert (span.end_line, span.end_column) == (0, 13)


def test_node_span_multiline():
    ctx = create_context("run(\n  1,\n  2\n);")
    span = node_span(ctx, _first_call(ctx))
    assert (span.start_line, span.start_column) == (0, 0)
    assert (span.end_line, span.end_column) == (3, 1)


def test_node_span_counts_characters_not_bytes():
    """Columns after multi-byte characters are character offsets."""
    ctx = create_context('const s = "é"; foo();')
    span = node_span(ctx, _first_call(ctx))
    assert span.start_column == 15
    assert span.end_column == 20


def test_node_span_counts_utf16_units():
    """Characters outside the BMP take two columns, as in editors."""
    ctx = create_context("const s = '\U0001F600'; useEffect(() => { go(); }, []);")
    span = node_span(ctx, _first_call(ctx))
    assert span.start_column == 16
    assert span.end_column == 46


def test_read_source(tmp_path):
    f = tmp_path / "a.ts"
    f.write_text("let a = 1;\n", encoding="utf-8")
    assert read_source(f) == "let a = 1;\n"


def test_read_source_missing(caplog):
    with caplog.at_level(logging.ERROR):
        assert read_source(Path("/nonexistent/a.ts")) is None
    assert "Failed to read" in caplog.text


def test_load_contexts(tmp_path):
    a = tmp_path / "a.js"
    b = tmp_path / "b.tsx"
    a.write_text("const a = 1;\n")
    b.write_text("export const B = () => <div />;\n")
    contexts = load_contexts([a, b])
    assert [c.path for c in contexts] == [a, b]
    assert all(c.tree is not None for c in contexts)


def test_load_contexts_skips_unreadable(tmp_path):
    a = tmp_path / "a.js"
    a.write_text("const a = 1;\n")
    contexts = load_contexts([a, tmp_path / "missing.js"])
    assert len(contexts) == 1
    assert contexts[0].path == a


def test_load_contexts_keeps_malformed(tmp_path):
    bad = tmp_path / "bad.js"
    bad.write_text("function (\n")
    contexts = load_contexts([bad])
    assert len(contexts) == 1
    assert contexts[0].parse_error is not None
