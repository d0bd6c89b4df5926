from __future__ import annotations

from pathlib import Path

from css_concat.core import hashing, json


def test_sha256_helpers(tmp_path: Path) -> None:
    assert (
        hashing.sha256_bytes(b"abc")
        == "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
    )

    f = tmp_path / "data.bin"
    f.write_bytes(b"abc")
    assert hashing.sha256_file(f) == (hashing.sha256_bytes(b"abc"), 3)


def test_hashed_name_appends_short_digest() -> None:
    assert hashing.hashed_name("logo.png", b"abc") == "logo_ba7816bf.png"
    assert hashing.hashed_name("font.woff2", b"abc", length=4) == "font_ba78.woff2"
    assert hashing.hashed_name("LICENSE", b"abc") == "LICENSE_ba7816bf"


def test_compact_json_keeps_order_and_unicode() -> None:
    assert json.compact_json({"version": 3, "sources": ["é.css"]}) == '{"version":3,"sources":["é.css"]}'
