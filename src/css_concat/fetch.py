from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Sequence

import httpx
import structlog

from css_concat.cache import StylesheetCache
from css_concat.core import Settings, SourceUnavailableError
from css_concat.model import ParsedStylesheet
from css_concat.parsing import decode_stylesheet, parse_stylesheet

from .context import ConcatContext
from .events import EventType

log = structlog.get_logger(__name__)

_scheme_re = re.compile(r"^[a-zA-Z][a-zA-Z\d+\-.]*:")
_windows_path_re = re.compile(r"^[a-zA-Z]:\\")


def is_absolute_url(reference: str) -> bool:
    """
    True for `scheme:` references (https://..., file:..., data:...).
    Windows drive paths such as C:\\styles\\a.css are paths, not URLs.
    """
    if _windows_path_re.match(reference):
        return False
    return bool(_scheme_re.match(reference))


def make_http_client(
    *,
    settings: Settings | None = None,
    follow_redirects: bool = True,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    s = settings or Settings()
    return httpx.AsyncClient(
        timeout=httpx.Timeout(s.http_timeout),
        follow_redirects=follow_redirects,
        headers={"User-Agent": s.user_agent},
        transport=transport,
    )


def _body_snippet(resp: httpx.Response, *, limit: int = 200) -> str | None:
    s = (resp.text or "")[:limit].strip()
    return s or None


async def http_get(client: httpx.AsyncClient, url: str, *, reference: str) -> httpx.Response:
    """
    GET `url`, turning transport failures and non-2xx statuses into
    SourceUnavailableError. No retries.
    """
    try:
        resp = await client.get(url)
    except httpx.HTTPError as e:
        raise SourceUnavailableError(reference=reference, reason=repr(e)) from e

    if not resp.is_success:
        reason = f"HTTP {resp.status_code} for GET {url}"
        snippet = _body_snippet(resp)
        if snippet:
            reason += f" (body: {snippet})"
        raise SourceUnavailableError(
            reference=reference, reason=reason, status_code=resp.status_code
        )
    return resp


async def fetch_from_url(
    url: str, *, client: httpx.AsyncClient, cache: StylesheetCache
) -> ParsedStylesheet:
    cached = cache.get(url)
    if cached is not None:
        log.debug(EventType.CACHE_HIT.value, url=url)
        return cached

    log.debug(EventType.CACHE_MISS.value, url=url)
    resp = await http_get(client, url, reference=url)
    text = decode_stylesheet(resp.content, protocol_encoding=resp.charset_encoding)
    parsed = parse_stylesheet(text, url, is_url=True)
    # Last writer wins when two runs race on the same URL.
    cache.set(url, parsed)
    return parsed


async def fetch_from_fs(path: str) -> ParsedStylesheet:
    try:
        data = await asyncio.to_thread(Path(path).read_bytes)
    except OSError as e:
        raise SourceUnavailableError(reference=path, reason=str(e)) from e
    return parse_stylesheet(decode_stylesheet(data), path)


async def fetch_stylesheet(
    reference: str, *, client: httpx.AsyncClient, cache: StylesheetCache
) -> ParsedStylesheet:
    if is_absolute_url(reference):
        return await fetch_from_url(reference, client=client, cache=cache)
    return await fetch_from_fs(reference)


def _discard_outcome(task: asyncio.Future) -> None:
    # Marks exceptions of losing fetches as retrieved; gather reports the first.
    if not task.cancelled():
        task.exception()


async def fetch_all(
    ctx: ConcatContext, references: Sequence[str]
) -> list[ParsedStylesheet]:
    """
    Fetch every reference concurrently. Results come back in input order
    whatever the completion order. The first failure is raised; fetches
    still in flight finish on their own and their results are dropped.
    """
    ctx.emit(EventType.FETCH_PLAN, sources=list(references))

    async def _one(index: int, reference: str) -> ParsedStylesheet:
        ctx.emit(EventType.FETCH_SOURCE_START, index=index, reference=reference)
        parsed = await fetch_stylesheet(reference, client=ctx.client, cache=ctx.cache)
        ctx.emit(
            EventType.FETCH_SOURCE_FINISH,
            index=index,
            reference=reference,
            nodes=len(parsed.nodes),
        )
        return parsed

    tasks = [asyncio.ensure_future(_one(i, ref)) for i, ref in enumerate(references)]
    for task in tasks:
        task.add_done_callback(_discard_outcome)
    return list(await asyncio.gather(*tasks))
