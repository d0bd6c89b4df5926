from __future__ import annotations

import asyncio
import copy
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable, Iterator, Sequence
from urllib.parse import unquote, urljoin, urlsplit

import structlog
import tinycss2
from tinycss2.ast import Node
from tinycss2.serializer import serialize_string_value, serialize_url

from css_concat.context import ConcatContext
from css_concat.core import (
    AssetNotFoundError,
    SourceUnavailableError,
    atomic_write_bytes,
    hashed_name,
)
from css_concat.events import EventType
from css_concat.fetch import http_get
from css_concat.model import ParsedStylesheet, Stylesheet

log = structlog.get_logger(__name__)

# data:, http:, //cdn, /root-relative, #fragment
_skip_re = re.compile(r"^(?:[a-zA-Z][a-zA-Z\d+\-.]*:|/|#)")

_BLOCKS = ("{} block", "() block", "[] block", "function")


@dataclass(frozen=True, slots=True)
class UrlRef:
    value: str
    quoted: bool


@dataclass(frozen=True, slots=True)
class AssetLocation:
    """Where an asset is read from and how the reference is rewritten."""

    location: str
    remote: bool
    basename: str
    suffix: str  # "?query#fragment" carried over to the new reference


def should_localize(url: str) -> bool:
    url = url.strip()
    return bool(url) and not _skip_re.match(url)


def url_reference(node: Node) -> UrlRef | None:
    """The target of url(x) / url("x"), or None when node is something else."""
    if node.type == "url":
        return UrlRef(node.value, quoted=False)
    if node.type == "function" and node.lower_name == "url":
        args = [a for a in node.arguments if a.type not in ("whitespace", "comment")]
        if len(args) == 1 and args[0].type == "string":
            return UrlRef(args[0].value, quoted=True)
    return None


def _iter_block_urls(nodes: Sequence[Node]) -> Iterator[UrlRef]:
    for node in nodes:
        ref = url_reference(node)
        if ref is not None:
            yield ref
        elif node.type in _BLOCKS:
            yield from _iter_block_urls(node.arguments)
        elif node.type in ("qualified-rule", "at-rule") and node.content is not None:
            yield from _iter_block_urls(node.content)


def iter_urls(node: Node) -> Iterator[UrlRef]:
    """url() references in declaration blocks; at-rule preludes are skipped."""
    if node.type in ("qualified-rule", "at-rule") and node.content is not None:
        yield from _iter_block_urls(node.content)


def _restamp(node: Node, line: int, column: int) -> Node:
    node.source_line = line
    node.source_column = column
    if node.type in _BLOCKS:
        for child in node.arguments:
            _restamp(child, line, column)
    return node


def make_url_token(original: Node, new_url: str, *, quoted: bool) -> Node:
    if quoted:
        text = f'url("{serialize_string_value(new_url)}")'
    else:
        text = f"url({serialize_url(new_url)})"
    token = tinycss2.parse_one_component_value(text)
    return _restamp(token, original.source_line, original.source_column)


def _rewrite_list(
    nodes: list[Node], rewrite: Callable[[UrlRef], str | None]
) -> list[Node]:
    out: list[Node] = []
    changed = False
    for node in nodes:
        new = _rewrite_node(node, rewrite)
        changed = changed or new is not node
        out.append(new)
    return out if changed else nodes


def _rewrite_node(node: Node, rewrite: Callable[[UrlRef], str | None]) -> Node:
    ref = url_reference(node)
    if ref is not None:
        new_url = rewrite(ref)
        if new_url is None:
            return node
        return make_url_token(node, new_url, quoted=ref.quoted)

    if node.type in _BLOCKS:
        args = _rewrite_list(node.arguments, rewrite)
        if args is node.arguments:
            return node
        new = copy.copy(node)
        new.arguments = args
        return new

    if node.type in ("qualified-rule", "at-rule") and node.content is not None:
        content = _rewrite_list(node.content, rewrite)
        if content is node.content:
            return node
        new = copy.copy(node)
        new.content = content
        return new

    return node


def rewrite_urls(node: Node, rewrite: Callable[[UrlRef], str | None]) -> Node:
    """
    Copy-on-write rewrite of url() references inside declaration blocks.
    `rewrite` returns the new URL or None to keep a reference. Untouched
    subtrees are shared with the input; the input is never mutated.
    """
    if node.type in ("qualified-rule", "at-rule"):
        return _rewrite_node(node, rewrite)
    return node


def resolve_asset(source: ParsedStylesheet, url: str) -> AssetLocation:
    parts = urlsplit(url.strip())
    suffix = ""
    if parts.query:
        suffix += "?" + parts.query
    if parts.fragment:
        suffix += "#" + parts.fragment

    basename = unquote(PurePosixPath(parts.path).name)
    if source.is_url:
        target = parts.path + ("?" + parts.query if parts.query else "")
        return AssetLocation(
            location=urljoin(source.reference, target),
            remote=True,
            basename=basename,
            suffix=suffix,
        )
    location = Path(source.reference).parent / unquote(parts.path)
    return AssetLocation(
        location=str(location), remote=False, basename=basename, suffix=suffix
    )


class AssetLocalizer:
    """
    Built-in first transform: copies every url()-referenced asset next to the
    output file under a content-hashed name and points the reference at it.

      url(../img/logo.png?v=2) -> url(logo_1a2b3c4d.png?v=2)
    """

    name = "localize-assets"

    def __init__(self, *, hash_length: int = 8) -> None:
        self.hash_length = hash_length

    async def _load(
        self, ctx: ConcatContext, reference: str, url: str, asset: AssetLocation
    ) -> bytes:
        if asset.remote:
            try:
                resp = await http_get(ctx.client, asset.location, reference=reference)
            except SourceUnavailableError as e:
                raise AssetNotFoundError(
                    reference=reference, url=url, location=asset.location
                ) from e
            return resp.content
        try:
            return await asyncio.to_thread(Path(asset.location).read_bytes)
        except OSError as e:
            raise AssetNotFoundError(
                reference=reference, url=url, location=asset.location
            ) from e

    async def _localize(
        self, ctx: ConcatContext, reference: str, url: str, asset: AssetLocation
    ) -> str:
        data = await self._load(ctx, reference, url, asset)
        name = hashed_name(asset.basename, data, length=self.hash_length)
        dest = ctx.output_dir / name
        await asyncio.to_thread(atomic_write_bytes, dest, data)
        ctx.record_artifact(path=dest, kind="asset")
        ctx.emit(
            EventType.ASSET_LOCALIZED,
            reference=reference,
            url=url,
            location=asset.location,
            name=name,
        )
        return name

    async def __call__(self, sheet: Stylesheet, ctx: ConcatContext) -> Stylesheet:
        # (source reference, url) -> asset location
        wanted: dict[tuple[str, str], AssetLocation] = {}
        for sn in sheet.nodes:
            for ref in iter_urls(sn.node):
                if should_localize(ref.value):
                    key = (sn.source, ref.value)
                    if key not in wanted:
                        wanted[key] = resolve_asset(sheet.source(sn.source), ref.value)

        if not wanted:
            return sheet

        # One load per distinct location, all running concurrently.
        by_location: dict[str, tuple[str, str, AssetLocation]] = {}
        for (source, url), asset in wanted.items():
            by_location.setdefault(asset.location, (source, url, asset))
        names = await asyncio.gather(
            *(self._localize(ctx, *item) for item in by_location.values())
        )
        name_by_location = dict(zip(by_location, names))

        log.debug(
            "assets.localized",
            references=len(wanted),
            files=len(name_by_location),
        )

        def _rewrite_for(source: str) -> Callable[[UrlRef], str | None]:
            def _rewrite(ref: UrlRef) -> str | None:
                asset = wanted.get((source, ref.value))
                if asset is None:
                    return None
                return name_by_location[asset.location] + asset.suffix

            return _rewrite

        return sheet.map_nodes(lambda sn: rewrite_urls(sn.node, _rewrite_for(sn.source)))
