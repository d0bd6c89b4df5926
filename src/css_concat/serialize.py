from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from tinycss2.ast import Node
from tinycss2.serializer import serialize_identifier

from css_concat.core import relpath_posix
from css_concat.model import ParsedStylesheet, Stylesheet
from css_concat.parsing import normalize_newlines
from css_concat.sourcemap import SourceMapBuilder, utf16_length

_OPEN_CLOSE = {
    "{} block": ("{", "}"),
    "() block": ("(", ")"),
    "[] block": ("[", "]"),
}


@dataclass(frozen=True, slots=True)
class SerializedOutput:
    css: str
    map: SourceMapBuilder


class _PositionWriter:
    """
    Collects output text while tracking the 0-based line and UTF-16 column
    of its end.
    """

    def __init__(self) -> None:
        self.parts: list[str] = []
        self.line = 0
        self.column = 0

    def write(self, text: str) -> None:
        if not text:
            return
        self.parts.append(text)
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = utf16_length(text[text.rfind("\n") + 1 :])
        else:
            self.column += utf16_length(text)

    def ends_with_newline(self) -> bool:
        return not self.parts or self.parts[-1].endswith("\n")

    def getvalue(self) -> str:
        return "".join(self.parts)


def is_map_annotation(node: Node) -> bool:
    return node.type == "comment" and node.value.lstrip().startswith(
        ("# sourceMappingURL=", "@ sourceMappingURL=")
    )


def map_source_name(parsed: ParsedStylesheet, output: Path) -> str:
    if parsed.is_url:
        return parsed.reference
    return relpath_posix(Path(parsed.reference), Path(output).parent)


class _TreeSerializer:
    def __init__(self, builder: SourceMapBuilder) -> None:
        self.out = _PositionWriter()
        self.builder = builder
        self.source: int | None = 0
        self.lines: list[str] = []

    def _mark(self, node: Node) -> None:
        line = getattr(node, "source_line", None)
        column = getattr(node, "source_column", None)
        if self.source is None or not line or not column:
            return
        self.builder.add_mapping(
            generated_line=self.out.line,
            generated_column=self.out.column,
            source=self.source,
            original_line=line - 1,
            original_column=self._original_column(line, column),
        )

    def _original_column(self, line: int, column: int) -> int:
        # tinycss2 columns count code points
        if line > len(self.lines):
            return column - 1
        return utf16_length(self.lines[line - 1][: column - 1])

    def write_list(self, nodes: Iterable[Node]) -> None:
        for node in nodes:
            self.write_node(node)

    def write_node(self, node: Node) -> None:
        write = self.out.write
        t = node.type
        if t == "whitespace":
            write(node.serialize())
            return

        self._mark(node)
        if t == "qualified-rule":
            self.write_list(node.prelude)
            write("{")
            self.write_list(node.content)
            write("}")
        elif t == "at-rule":
            write("@" + serialize_identifier(node.at_keyword))
            self.write_list(node.prelude)
            if node.content is None:
                write(";")
            else:
                write("{")
                self.write_list(node.content)
                write("}")
        elif t in _OPEN_CLOSE:
            opening, closing = _OPEN_CLOSE[t]
            write(opening)
            self.write_list(node.arguments)
            write(closing)
        elif t == "function":
            write(serialize_identifier(node.name) + "(")
            self.write_list(node.arguments)
            write(")")
        else:
            write(node.serialize())


def serialize(sheet: Stylesheet, *, output: Path) -> SerializedOutput:
    """
    Render the tree to CSS text and build a source map pointing every
    token back to its origin. Source map annotations found in the inputs
    are dropped.
    """
    builder = SourceMapBuilder(file=Path(output).name)
    index = {
        parsed.reference: builder.add_source(map_source_name(parsed, output), parsed.text)
        for parsed in sheet.sources
    }
    lines = {parsed.reference: normalize_newlines(parsed.text).split("\n") for parsed in sheet.sources}

    ser = _TreeSerializer(builder)
    previous: str | None = None
    for sn in sheet.nodes:
        if is_map_annotation(sn.node):
            continue
        if previous is not None and sn.source != previous and not ser.out.ends_with_newline():
            ser.out.write("\n")
        # nodes added by plugins may carry a reference with no source entry
        ser.source = index.get(sn.source)
        ser.lines = lines.get(sn.source, [])
        ser.write_node(sn.node)
        previous = sn.source

    return SerializedOutput(css=ser.out.getvalue(), map=builder)
