from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any

from css_concat.core import compact_json

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_BASE = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_BASE - 1
_VLQ_CONTINUATION = _VLQ_BASE


def utf16_length(text: str) -> int:
    """Length in UTF-16 code units, the unit source map columns are counted in."""
    if text.isascii():
        return len(text)
    return len(text.encode("utf-16-le")) // 2


def vlq_encode(value: int) -> str:
    """Base64 VLQ as used by source map v3 'mappings'."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


def vlq_decode(segment: str) -> list[int]:
    values: list[int] = []
    shift = 0
    acc = 0
    for ch in segment:
        digit = _B64.index(ch)
        acc += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        values.append(-(acc >> 1) if acc & 1 else acc >> 1)
        acc = 0
        shift = 0
    return values


@dataclass(frozen=True, slots=True)
class Mapping:
    generated_line: int  # 0-based
    generated_column: int  # 0-based
    source: int
    original_line: int  # 0-based
    original_column: int  # 0-based


@dataclass(slots=True)
class SourceMapBuilder:
    file: str
    sources: list[str] = field(default_factory=list)
    sources_content: list[str | None] = field(default_factory=list)
    mappings: list[Mapping] = field(default_factory=list)

    def add_source(self, name: str, content: str | None = None) -> int:
        if name in self.sources:
            return self.sources.index(name)
        self.sources.append(name)
        self.sources_content.append(content)
        return len(self.sources) - 1

    def add_mapping(
        self,
        *,
        generated_line: int,
        generated_column: int,
        source: int,
        original_line: int,
        original_column: int,
    ) -> None:
        m = Mapping(generated_line, generated_column, source, original_line, original_column)
        if self.mappings and self.mappings[-1] == m:
            return
        self.mappings.append(m)

    def encode_mappings(self) -> str:
        lines: list[str] = []
        prev_source = prev_orig_line = prev_orig_col = 0
        current_line = 0
        segments: list[str] = []
        prev_gen_col = 0

        for m in sorted(self.mappings, key=lambda x: (x.generated_line, x.generated_column)):
            while current_line < m.generated_line:
                lines.append(",".join(segments))
                segments = []
                prev_gen_col = 0
                current_line += 1
            segments.append(
                vlq_encode(m.generated_column - prev_gen_col)
                + vlq_encode(m.source - prev_source)
                + vlq_encode(m.original_line - prev_orig_line)
                + vlq_encode(m.original_column - prev_orig_col)
            )
            prev_gen_col = m.generated_column
            prev_source = m.source
            prev_orig_line = m.original_line
            prev_orig_col = m.original_column

        lines.append(",".join(segments))
        return ";".join(lines)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": 3,
            "file": self.file,
            "sources": list(self.sources),
            "sourcesContent": list(self.sources_content),
            "names": [],
            "mappings": self.encode_mappings(),
        }

    def to_json(self) -> str:
        return compact_json(self.to_dict())


def inline_annotation(map_json: str) -> str:
    b64 = base64.b64encode(map_json.encode("utf-8")).decode("ascii")
    return f"/*# sourceMappingURL=data:application/json;base64,{b64} */"


def file_annotation(map_name: str) -> str:
    return f"/*# sourceMappingURL={map_name} */"


def decode_mappings(mappings: str) -> list[list[tuple[int, ...]]]:
    """
    Decode a 'mappings' string into absolute segments per generated line:
    (generated_column, source, original_line, original_column).
    """
    out: list[list[tuple[int, ...]]] = []
    source = orig_line = orig_col = 0
    for line in mappings.split(";"):
        gen_col = 0
        segments: list[tuple[int, ...]] = []
        for seg in filter(None, line.split(",")):
            values = vlq_decode(seg)
            gen_col += values[0]
            if len(values) >= 4:
                source += values[1]
                orig_line += values[2]
                orig_col += values[3]
                segments.append((gen_col, source, orig_line, orig_col))
            else:
                segments.append((gen_col,))
        out.append(segments)
    return out
