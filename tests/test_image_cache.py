"""Tests for the content-addressed image cache."""

import hashlib
from pathlib import Path

import pytest
from hypothesis import given, strategies as st

from conftest import CountingTransport, image_bytes, oversized_png
from jjtrivia.services.http_client import HttpClientService
from jjtrivia.services.image_cache import (
    ImageCacheService,
    hash_filename,
    is_remote,
    sniff_image_format,
    url_basename,
)

URL = "https://images.example.com/quiz/abe.png"


@given(st.text(max_size=40))
def test_hash_filename_is_32_hex_digits(name: str) -> None:
    digest = hash_filename(name)

    assert len(digest) == 32
    assert digest == hashlib.md5(name.encode("utf-8")).hexdigest()


def test_url_basename_and_remote_detection() -> None:
    assert url_basename("https://a.example.com/x/y/photo.jpg?size=2") == "photo.jpg?size=2"
    assert is_remote("HTTPS://example.com/a.png")
    assert is_remote("http://example.com/a.png")
    assert not is_remote("abe.png")
    assert not is_remote("/tmp/abe.png")


def test_cache_key_ignores_host(tmp_path: Path) -> None:
    """Images are cached by name, so the same file name on two hosts shares an entry."""
    cache = ImageCacheService(tmp_path, HttpClientService(transport=CountingTransport({})))

    assert cache.cache_path("https://one.example.com/a/pic.png") == cache.cache_path("http://two.example.com/pic.png")
    assert cache.cache_path(URL) == tmp_path / hash_filename("abe.png")


@pytest.mark.asyncio
async def test_second_fetch_uses_cache(tmp_path: Path) -> None:
    """Fetching the same URL twice hits the network once."""
    transport = CountingTransport({URL: (200, image_bytes("PNG"))})
    async with HttpClientService(transport=transport) as client:
        cache = ImageCacheService(tmp_path, client)

        first = await cache.ensure_local(URL)
        second = await cache.ensure_local(URL)

    assert first is not None
    assert first == second
    assert first.read_bytes() == image_bytes("PNG")
    assert transport.calls == [URL]


@pytest.mark.asyncio
async def test_failed_fetch_returns_none(tmp_path: Path) -> None:
    transport = CountingTransport({})
    async with HttpClientService(transport=transport) as client:
        cache = ImageCacheService(tmp_path, client)

        assert await cache.ensure_local(URL) is None

    assert not cache.cache_path(URL).exists()


@pytest.mark.asyncio
async def test_local_references(tmp_path: Path) -> None:
    local = tmp_path / "local.png"
    local.write_bytes(image_bytes("PNG"))
    transport = CountingTransport({})
    async with HttpClientService(transport=transport) as client:
        cache = ImageCacheService(tmp_path / "cache", client)

        assert await cache.ensure_local(str(local)) == local
        assert await cache.ensure_local(str(tmp_path / "absent.png")) is None

    assert transport.calls == []


@pytest.mark.parametrize("image_format,extension", [("PNG", "png"), ("JPEG", "jpg"), ("GIF", "gif"), ("BMP", "bmp")])
def test_extension_is_sniffed_from_content(tmp_path: Path, image_format: str, extension: str) -> None:
    cached = tmp_path / "cached"
    cached.write_bytes(image_bytes(image_format))
    cache = ImageCacheService(tmp_path, HttpClientService(transport=CountingTransport({})))

    assert cache.detect_extension("https://example.com/image?id=7", cached) == extension


def test_extension_from_url_name_wins(tmp_path: Path) -> None:
    cached = tmp_path / "cached"
    cached.write_bytes(image_bytes("PNG"))
    cache = ImageCacheService(tmp_path, HttpClientService(transport=CountingTransport({})))

    assert cache.detect_extension("https://example.com/photo.GIF", cached) == "gif"
    assert cache.bundle_filename("https://example.com/photo.gif", cached) == hash_filename("photo.gif") + ".gif"


def test_unknown_content_has_no_extension(tmp_path: Path) -> None:
    cached = tmp_path / "cached"
    cached.write_bytes(b"definitely not an image")
    cache = ImageCacheService(tmp_path, HttpClientService(transport=CountingTransport({})))

    assert sniff_image_format(cached) is None
    assert cache.bundle_filename("https://example.com/blob", cached) == hash_filename("blob")


def test_oversized_image_has_no_extension(tmp_path: Path) -> None:
    cached = tmp_path / "cached"
    cached.write_bytes(oversized_png())

    assert sniff_image_format(cached) is None
