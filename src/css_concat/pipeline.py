from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Sequence

import httpx

from css_concat.cache import StylesheetCache, default_cache
from css_concat.core import (
    ILogger,
    InputError,
    Settings,
    get_logger,
    load_settings,
    monotonic_ms,
    new_run_id,
)

from .builder import concat_stylesheets
from .context import ConcatContext
from .events import EventType
from .fetch import fetch_all, make_http_client
from .report import ConcatReport
from .serialize import serialize
from .stage import format_duration_ms, run_stage
from .transforms import AssetLocalizer, Transform, run_transforms, validate_transforms
from .writer import SourceMapMode, write_output


async def concat(
    stylesheets: Sequence[str],
    output: str | Path,
    *,
    source_map: SourceMapMode | str = SourceMapMode.INLINE,
    plugins: Sequence[Transform] = (),
    cache: StylesheetCache | None = None,
    client: httpx.AsyncClient | None = None,
    settings: Settings | None = None,
    logger: ILogger | None = None,
) -> ConcatReport:
    """
    Concatenate `stylesheets` (paths or absolute URLs) into `output`.

    Sources are fetched concurrently and assembled in the order given.
    url()-referenced assets are copied next to the output under
    content-hashed names, then `plugins` run in order. The source map is
    embedded in the CSS (`inline`) or written to `<output>.map` (`file`).
    """
    if not stylesheets:
        raise InputError("No stylesheets provided")
    if isinstance(stylesheets, str):
        raise InputError("stylesheets must be a sequence of references, not a string")

    mode = SourceMapMode.coerce(source_map)
    extra = validate_transforms(plugins)
    s = settings or load_settings()
    log = logger or get_logger("css_concat")

    references = [str(ref) for ref in stylesheets]
    run_id = new_run_id()
    t0 = monotonic_ms()

    owns_client = client is None
    http = client or make_http_client(settings=s)
    try:
        ctx = ConcatContext(
            run_id=run_id,
            output=Path(output),
            logger=log.bind(run_id=run_id),
            cache=cache if cache is not None else default_cache(),
            client=http,
            settings=s,
        )
        ctx.emit(
            EventType.CONCAT_START,
            sources=references,
            output=str(ctx.output),
            source_map=mode.value,
            plugins=len(extra),
        )

        parsed = await run_stage(ctx, "fetch", fetch_all(ctx, references))
        merged = concat_stylesheets(parsed)

        transforms: list[Transform] = [AssetLocalizer(hash_length=s.asset_hash_length), *extra]
        transformed = await run_stage(ctx, "transform", run_transforms(merged, transforms, ctx))

        result = serialize(transformed, output=ctx.output)
        map_path = await run_stage(ctx, "write", write_output(ctx, result, mode))
    finally:
        if owns_client:
            await http.aclose()

    duration = monotonic_ms() - t0
    ctx.emit(EventType.CONCAT_FINISH, duration_ms=duration, artifacts=len(ctx.artifacts))
    ctx.logger.info(
        "Concat complete",
        output=str(ctx.output),
        sources=len(references),
        artifacts=len(ctx.artifacts),
        duration=format_duration_ms(duration),
    )
    return ConcatReport(
        run_id=run_id,
        output=str(ctx.output),
        map_path=str(map_path) if map_path is not None else None,
        duration_ms=duration,
        sources=references,
        artifacts=list(ctx.artifacts),
    )


def concat_sync(
    stylesheets: Sequence[str], output: str | Path, **kwargs
) -> ConcatReport:
    """Blocking wrapper around concat() for scripts and the CLI."""
    return asyncio.run(concat(stylesheets, output, **kwargs))
