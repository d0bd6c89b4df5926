from __future__ import annotations

import asyncio
from enum import Enum
from pathlib import Path

from css_concat.core import InputError, WriteError, atomic_write_text

from .context import ConcatContext
from .serialize import SerializedOutput
from .sourcemap import file_annotation, inline_annotation


class SourceMapMode(str, Enum):
    INLINE = "inline"
    FILE = "file"

    @classmethod
    def coerce(cls, value: "SourceMapMode | str") -> "SourceMapMode":
        try:
            return cls(value)
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise InputError(
                f"Unknown source map mode {value!r} (expected one of: {allowed})"
            ) from None


def map_path_for(output: Path) -> Path:
    return output.with_name(output.name + ".map")


async def _write(path: Path, text: str) -> None:
    try:
        await asyncio.to_thread(atomic_write_text, path, text)
    except OSError as e:
        raise WriteError(path=str(path), reason=str(e)) from e


async def write_output(
    ctx: ConcatContext, result: SerializedOutput, mode: SourceMapMode
) -> Path | None:
    """
    Persist the CSS (always) and the map sidecar (file mode only).
    Both writes run concurrently; any failure fails the whole call and
    a file already written is left in place.

    Returns the sidecar path in file mode, else None.
    """
    output = ctx.output
    map_json = result.map.to_json()

    if mode is SourceMapMode.INLINE:
        css = _with_annotation(result.css, inline_annotation(map_json))
        await _write(output, css)
        ctx.record_artifact(path=output, kind="css")
        return None

    map_path = map_path_for(output)
    css = _with_annotation(result.css, file_annotation(map_path.name))
    outcomes = await asyncio.gather(
        _write(output, css), _write(map_path, map_json), return_exceptions=True
    )
    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            raise outcome
    ctx.record_artifact(path=output, kind="css")
    ctx.record_artifact(path=map_path, kind="map")
    return map_path


def _with_annotation(css: str, annotation: str) -> str:
    if css and not css.endswith("\n"):
        css += "\n"
    return css + annotation
