from __future__ import annotations

from pathlib import Path

import pytest

from css_concat.builder import concat_stylesheets
from css_concat.core import AssetNotFoundError, sha256_bytes
from css_concat.parsing import parse_stylesheet
from css_concat.serialize import serialize
from css_concat.transforms import AssetLocalizer, iter_urls, should_localize
from css_concat.transforms.assets import resolve_asset

PNG = b"\x89PNG\r\n\x1a\nfake-one"
FONT = b"wOF2fake-font"


def _h(data: bytes) -> str:
    return sha256_bytes(data)[:8]


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("img/a.png", True),
        ("../fonts/f.woff2?v=1#iefix", True),
        ("", False),
        ("data:image/png;base64,AAAA", False),
        ("https://cdn.test/a.png", False),
        ("//cdn.test/a.png", False),
        ("/static/a.png", False),
        ("#filter", False),
    ],
)
def test_should_localize(url: str, expected: bool) -> None:
    assert should_localize(url) is expected


def test_iter_urls_skips_import_preludes() -> None:
    parsed = parse_stylesheet(
        '@import url(base.css);\n.a{background:url(a.png)}\n'
        '@font-face{src:url("f.woff2") format("woff2")}\n',
        "s.css",
    )
    found = [ref for node in parsed.nodes for ref in iter_urls(node)]
    assert [(r.value, r.quoted) for r in found] == [("a.png", False), ("f.woff2", True)]


def test_resolve_asset_local_and_remote(tmp_path: Path) -> None:
    local = parse_stylesheet(".a{}", str(tmp_path / "css" / "a.css"))
    loc = resolve_asset(local, "../img/logo%20big.png?v=3#x")
    assert loc.remote is False
    assert Path(loc.location) == tmp_path / "css" / "../img/logo big.png"
    assert loc.basename == "logo big.png"
    assert loc.suffix == "?v=3#x"

    remote = parse_stylesheet(".a{}", "https://cdn.test/css/site.css", is_url=True)
    loc = resolve_asset(remote, "../fonts/f.woff2?v=1#iefix")
    assert loc.remote is True
    assert loc.location == "https://cdn.test/fonts/f.woff2?v=1"
    assert loc.suffix == "?v=1#iefix"


@pytest.mark.asyncio
async def test_localizes_local_and_remote_assets(tmp_path: Path, write_file, remote, make_ctx) -> None:
    write_file("src/img/one.png", PNG)
    a = parse_stylesheet(
        ".a{background:url(img/one.png)}\n.a2{background:url(img/one.png)}\n",
        str(tmp_path / "src" / "a.css"),
    )
    remote.add("https://cdn.test/fonts/f.woff2?v=1", FONT)
    b = parse_stylesheet(
        '@font-face{src:url("../fonts/f.woff2?v=1#iefix")}\n',
        "https://cdn.test/css/b.css",
        is_url=True,
    )
    sheet = concat_stylesheets([a, b])

    ctx = make_ctx()
    out = await AssetLocalizer()(sheet, ctx)
    await ctx.client.aclose()

    css = serialize(out, output=ctx.output).css
    png_name = f"one_{_h(PNG)}.png"
    font_name = f"f_{_h(FONT)}.woff2"
    assert css.count(f"url({png_name})") == 2
    assert f'url("{font_name}?v=1#iefix")' in css
    assert (ctx.output_dir / png_name).read_bytes() == PNG
    assert (ctx.output_dir / font_name).read_bytes() == FONT
    assert remote.calls["https://cdn.test/fonts/f.woff2?v=1"] == 1
    assert sorted(a.path for a in ctx.artifacts) == sorted(
        str(ctx.output_dir / n) for n in (png_name, font_name)
    )

    # the input tree is left as it was
    assert "url(img/one.png)" in serialize(sheet, output=ctx.output).css


@pytest.mark.asyncio
async def test_sheet_without_local_refs_is_returned_as_is(tmp_path: Path, make_ctx) -> None:
    a = parse_stylesheet(
        ".a{background:url(data:image/gif;base64,R0lG) url(https://x.test/a.png)}",
        str(tmp_path / "a.css"),
    )
    sheet = concat_stylesheets([a])
    ctx = make_ctx()
    out = await AssetLocalizer()(sheet, ctx)
    await ctx.client.aclose()
    assert out is sheet
    assert ctx.artifacts == []


@pytest.mark.asyncio
async def test_missing_asset(tmp_path: Path, make_ctx) -> None:
    a = parse_stylesheet(".a{background:url(nope.png)}", str(tmp_path / "a.css"))
    ctx = make_ctx()
    with pytest.raises(AssetNotFoundError) as ei:
        await AssetLocalizer()(concat_stylesheets([a]), ctx)
    await ctx.client.aclose()

    assert ei.value.url == "nope.png"
    assert ei.value.reference == str(tmp_path / "a.css")
    assert isinstance(ei.value.__cause__, FileNotFoundError)


@pytest.mark.asyncio
async def test_custom_hash_length(tmp_path: Path, write_file, make_ctx) -> None:
    write_file("one.png", PNG)
    a = parse_stylesheet(".a{background:url(one.png)}", str(tmp_path / "a.css"))
    ctx = make_ctx()
    out = await AssetLocalizer(hash_length=12)(concat_stylesheets([a]), ctx)
    await ctx.client.aclose()
    name = f"one_{sha256_bytes(PNG)[:12]}.png"
    assert f"url({name})" in serialize(out, output=ctx.output).css
