from __future__ import annotations

import asyncio
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

import httpx
import pytest

from css_concat.cache import StylesheetCache
from css_concat.core import Settings


@dataclass
class FakeRemote:
    """
    URL -> (status, body, delay, content type) table served through httpx.MockTransport,
    counting every request.
    """

    routes: dict[str, tuple[int, bytes, float, str]] = field(default_factory=dict)
    calls: Counter = field(default_factory=Counter)

    def add(
        self,
        url: str,
        body: str | bytes,
        *,
        status: int = 200,
        delay: float = 0.0,
        content_type: str = "text/css",
    ) -> None:
        data = body.encode("utf-8") if isinstance(body, str) else body
        self.routes[url] = (status, data, delay, content_type)

    async def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.calls[url] += 1
        if url not in self.routes:
            return httpx.Response(404, content=b"not found")
        status, body, delay, content_type = self.routes[url]
        if delay:
            await asyncio.sleep(delay)
        return httpx.Response(status, content=body, headers={"content-type": content_type})

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def cache() -> StylesheetCache:
    return StylesheetCache()


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    def _write(rel: str, content: str | bytes) -> Path:
        p = tmp_path / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            p.write_bytes(content)
        else:
            p.write_text(content, encoding="utf-8")
        return p

    return _write


@pytest.fixture
def make_ctx(tmp_path: Path, cache: StylesheetCache, remote: FakeRemote, settings: Settings):
    from css_concat.context import ConcatContext
    from css_concat.core import get_logger

    def _make(output: Path | None = None) -> ConcatContext:
        return ConcatContext(
            run_id="test",
            output=output or tmp_path / "dist" / "out.css",
            logger=get_logger("tests"),
            cache=cache,
            client=remote.client(),
            settings=settings,
        )

    return _make
