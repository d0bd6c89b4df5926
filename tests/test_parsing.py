from __future__ import annotations

import pytest

from css_concat.core import StylesheetSyntaxError
from css_concat.parsing import parse_stylesheet, render_excerpt, walk


def test_parse_keeps_rules_comments_and_whitespace() -> None:
    parsed = parse_stylesheet("/* head */\n.a{color:red}\n@media print{.b{x:y}}\n", "a.css")
    types = [n.type for n in parsed.nodes]
    assert types == ["comment", "whitespace", "qualified-rule", "whitespace", "at-rule", "whitespace"]
    assert parsed.reference == "a.css"
    assert parsed.is_url is False
    assert parsed.text.startswith("/* head */")


def test_walk_visits_nested_values() -> None:
    parsed = parse_stylesheet(".a{background:url(x.png) rgb(1,2,3)}", "a.css")
    kinds = {n.type for n in walk(parsed.nodes)}
    assert {"qualified-rule", "url", "function", "number"} <= kinds


@pytest.mark.parametrize(
    "css",
    [
        ".a{}",
        ".a{} /* trailing */",
        "@import url(b.css);",
        "@media screen{.a{color:red}}\n",
        ".a{content:'}'}",
        ".a{color:red}\n/* legacy /* note */\n",
        "@media x{.a{}/* a /* b */}",
        ".a{}\r\n/* crlf\r\n comment */\r\n",
        "",
    ],
)
def test_valid_sources_parse(css: str) -> None:
    parse_stylesheet(css, "ok.css")


def test_unclosed_rule_is_reported_with_position() -> None:
    with pytest.raises(StylesheetSyntaxError) as ei:
        parse_stylesheet(".a{}\n.b{color:red", "b.css")

    err = ei.value
    assert err.reference == "b.css"
    assert err.reason == "Unclosed block"
    assert (err.line, err.column) == (2, 1)
    assert str(err).startswith("CSS syntax error: b.css:2:1: Unclosed block")
    assert "> 2 | .b{color:red" in err.excerpt


def test_unclosed_outer_block_behind_closed_inner_block() -> None:
    with pytest.raises(StylesheetSyntaxError) as ei:
        parse_stylesheet("@media screen { .a{} ", "m.css")
    assert ei.value.reason == "Unclosed block"
    assert (ei.value.line, ei.value.column) == (1, 1)


def test_unclosed_comment() -> None:
    with pytest.raises(StylesheetSyntaxError) as ei:
        parse_stylesheet(".a{}\n/* never ends", "c.css")
    assert ei.value.reason == "Unclosed comment"
    assert ei.value.line == 2


def test_comment_text_does_not_hide_unclosed_block() -> None:
    with pytest.raises(StylesheetSyntaxError) as ei:
        parse_stylesheet(".a{color:red /* x /* y */", "d.css")
    assert ei.value.reason == "Unclosed block"
    assert (ei.value.line, ei.value.column) == (1, 1)


@pytest.mark.parametrize(
    "css",
    [
        ".a color:red",
        '.a{content:"abc',
        ".a{color:rgb(1,2,3",
    ],
)
def test_malformed_sources_raise(css: str) -> None:
    with pytest.raises(StylesheetSyntaxError):
        parse_stylesheet(css, "bad.css")


def test_render_excerpt_marks_line_and_column() -> None:
    text = "a{}\n.b{color:red\n.c{}\n"
    assert render_excerpt(text, 2, 4) == "\n".join(
        [
            "  1 | a{}",
            "> 2 | .b{color:red",
            "    |    ^",
            "  3 | .c{}",
        ]
    )


def test_render_excerpt_limits_context() -> None:
    text = "\n".join(f"l{i}" for i in range(1, 11))
    out = render_excerpt(text, 5, 1)
    assert out.splitlines()[0] == "  3 | l3"
    assert out.splitlines()[-1] == "  7 | l7"
