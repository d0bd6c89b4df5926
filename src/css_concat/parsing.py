from __future__ import annotations

from typing import Iterable, Iterator, Sequence

import tinycss2
from tinycss2.ast import Node, ParseError
from tinycss2.bytes import decode_stylesheet_bytes

from css_concat.core.errors import StylesheetSyntaxError
from css_concat.model import ParsedStylesheet

_TRIVIA = ("whitespace", "comment")
_CLOSERS = {
    "qualified-rule": "}",
    "at-rule": "}",
    "{} block": "}",
    "() block": ")",
    "function": ")",
    "[] block": "]",
}


def children(node: Node) -> Iterator[Node]:
    """Direct child component values of a node (empty for leaf tokens)."""
    if node.type in ("qualified-rule", "at-rule"):
        yield from node.prelude
        if node.content is not None:
            yield from node.content
    elif node.type in ("{} block", "() block", "[] block", "function"):
        yield from node.arguments


def walk(nodes: Iterable[Node]) -> Iterator[Node]:
    """Depth-first, document-order traversal."""
    for node in nodes:
        yield node
        yield from walk(children(node))


def _block_contents(node: Node) -> Sequence[Node] | None:
    if node.type in ("qualified-rule", "at-rule"):
        return node.content
    if node.type in ("{} block", "() block", "[] block", "function"):
        return node.arguments
    return None


def _last_significant(nodes: Sequence[Node]) -> Node | None:
    for node in reversed(nodes):
        if node.type not in _TRIVIA:
            return node
    return None


def normalize_newlines(text: str) -> str:
    # tinycss2 token values are taken from the input after this rewrite
    return text.replace("\r\n", "\n").replace("\r", "\n").replace("\f", "\n")


def _trailing_trivia_length(nodes: Sequence[Node]) -> int:
    total = 0
    for node in reversed(nodes):
        if node.type == "whitespace":
            total += len(node.value)
        elif node.type == "comment":
            total += len(node.value) + 4
        else:
            break
    return total


def _tail_closes(text: str, chain: Sequence[Node], containers: Sequence[Sequence[Node]]) -> bool:
    end = len(text)
    for node, container in zip(chain, containers):
        end -= _trailing_trivia_length(container)
        if end <= 0 or text[end - 1] != _CLOSERS[node.type]:
            return False
        end -= 1
    return True


def find_unclosed_block(nodes: Sequence[Node], text: str) -> Node | None:
    """
    tinycss2 silently closes blocks at end of input. Only the trailing chain
    of blocks can be affected, so walk it and check the source tail really
    ends with the matching closing characters.
    """
    text = normalize_newlines(text)
    chain: list[Node] = []
    # containers[i] is the node list chain[i] is the last significant node of
    containers: list[Sequence[Node]] = []
    current: Sequence[Node] | None = nodes
    while current:
        last = _last_significant(current)
        if last is None or last.type not in _CLOSERS:
            break
        contents = _block_contents(last)
        if contents is None:
            # at-rule terminated by ';'
            break
        chain.append(last)
        containers.append(current)
        current = contents

    # Closers present at the tail belong to the innermost blocks, so find the
    # longest inner suffix of the chain that is closed.
    n = len(chain)
    for closed in range(n, 0, -1):
        if _tail_closes(text, chain[n - closed :], containers[n - closed :]):
            return None if closed == n else chain[n - closed - 1]
    return chain[-1] if chain else None


def find_unclosed_comment(nodes: Sequence[Node], text: str) -> Node | None:
    for node in reversed(nodes):
        if node.type == "whitespace":
            continue
        if node.type == "comment" and not normalize_newlines(text).rstrip().endswith(f"/*{node.value}*/"):
            return node
        return None
    return None


def render_excerpt(text: str, line: int, column: int, *, context: int = 2) -> str:
    """
    Render the source around (line, column) with a gutter and a caret:

        1 | .a{}
      > 2 | .b{color:red
          |  ^
    """
    lines = text.splitlines() or [""]
    line = min(max(line, 1), len(lines))
    start = max(1, line - context)
    end = min(len(lines), line + context)
    width = len(str(end))

    out: list[str] = []
    for n in range(start, end + 1):
        gutter = f"{n:>{width}} | "
        if n == line:
            out.append(f"> {gutter}{lines[n - 1]}")
            out.append(f"  {' ' * width} | {' ' * max(column - 1, 0)}^")
        else:
            out.append(f"  {gutter}{lines[n - 1]}")
    return "\n".join(out)


def _syntax_error(
    reference: str, text: str, node: Node, reason: str
) -> StylesheetSyntaxError:
    line = node.source_line
    column = node.source_column
    return StylesheetSyntaxError(
        reference=reference,
        line=line,
        column=column,
        reason=reason,
        excerpt=render_excerpt(text, line, column),
    )


def check_syntax(reference: str, text: str, nodes: Sequence[Node]) -> None:
    for node in walk(nodes):
        if isinstance(node, ParseError):
            raise _syntax_error(reference, text, node, node.message)

    unclosed = find_unclosed_comment(nodes, text)
    if unclosed is not None:
        raise _syntax_error(reference, text, unclosed, "Unclosed comment")

    unclosed = find_unclosed_block(nodes, text)
    if unclosed is not None:
        reason = "Unclosed block" if _CLOSERS[unclosed.type] == "}" else "Unclosed bracket"
        raise _syntax_error(reference, text, unclosed, reason)


def parse_stylesheet(text: str, reference: str, *, is_url: bool = False) -> ParsedStylesheet:
    """
    Parse CSS text into a ParsedStylesheet, keeping comments and whitespace.

    Raises StylesheetSyntaxError when tinycss2 reports an error anywhere in
    the tree or when the input ends inside a block or comment.
    """
    nodes = tinycss2.parse_stylesheet(text, skip_comments=False, skip_whitespace=False)
    check_syntax(reference, text, nodes)
    return ParsedStylesheet(reference=reference, nodes=tuple(nodes), text=text, is_url=is_url)


def decode_stylesheet(data: bytes, *, protocol_encoding: str | None = None) -> str:
    """
    Decode stylesheet bytes the way browsers do: BOM first, then the
    transport charset, then a leading @charset rule, else UTF-8. The BOM
    is not kept in the result.
    """
    text, _encoding = decode_stylesheet_bytes(data, protocol_encoding=protocol_encoding)
    return text
