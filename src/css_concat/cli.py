from __future__ import annotations

import argparse
from dataclasses import dataclass

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from css_concat.core import ConcatError, bind, configure_logging, get_logger, load_settings
from css_concat.pipeline import concat_sync
from css_concat.writer import SourceMapMode

console = Console()


@dataclass(frozen=True, slots=True)
class _Args:
    output: str
    stylesheets: list[str]
    source_map: str


def _build_parser(default_mode: str) -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="css-concat",
        description="Concatenate stylesheets (paths or URLs) into one file with a source map.",
    )
    p.add_argument("output", help="Destination CSS file")
    p.add_argument(
        "stylesheets",
        nargs="+",
        help="Stylesheets to concatenate, in order (local paths or absolute URLs)",
    )
    p.add_argument(
        "--source-map",
        choices=[m.value for m in SourceMapMode],
        default=default_mode,
        help="Embed the map in the CSS (inline, default) or write OUTPUT.map (file).",
    )
    return p


def _parse(argv: list[str] | None, default_mode: str) -> _Args:
    args = _build_parser(default_mode).parse_args(argv)
    return _Args(
        output=str(args.output),
        stylesheets=list(args.stylesheets),
        source_map=str(args.source_map),
    )


def main(argv: list[str] | None = None) -> int:
    s = load_settings()
    args = _parse(argv, s.source_map)

    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("css_concat")
    bind(command="concat", output=args.output)

    console.print(
        Panel.fit(
            Text(
                f"css-concat - {len(args.stylesheets)} stylesheet(s)\n"
                f"output={args.output}\nsource_map={args.source_map}",
                style="bold",
            ),
            title="Run",
        )
    )

    try:
        with console.status("[bold]concat[/]", spinner="dots"):
            report = concat_sync(
                args.stylesheets,
                args.output,
                source_map=args.source_map,
                settings=s,
                logger=log,
            )
    except ConcatError as e:
        console.print(f"[red]failed[/red] {type(e).__name__}")
        console.print(Text(str(e)))
        return 1

    tbl = Table(title="Result", show_header=True, box=None)
    tbl.add_column("kind")
    tbl.add_column("path")
    tbl.add_column("bytes", justify="right")
    for art in report.artifacts:
        tbl.add_row(art.kind, art.path, str(art.bytes))
    tbl.add_row("status", "[green]ok[/green]", "")
    console.print(tbl)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
