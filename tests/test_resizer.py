"""Tests for the resize orchestration: cache reuse and backend fallback."""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

import httpx
import pytest
import pytest_mock
from PIL import Image

from imagecache.backends import BackendResult, BasicLibraryBackend, NativeLibraryBackend, RemoteResizeBackend
from imagecache.config.settings import Settings
from imagecache.models import ImageEncoding, ResizeRequest, SourceImageRef
from imagecache.services.resizer import ResizeOrchestrator


def _fake_backend(mocker: pytest_mock.MockerFixture, name: str, result: BackendResult):
    backend = mocker.Mock()
    backend.name = name
    backend.resize = mocker.AsyncMock(return_value=result)
    backend.close = mocker.AsyncMock(return_value=None)
    return backend


@pytest.mark.asyncio
async def test_end_to_end_creates_webp_derivative(make_image, settings: Settings, tmp_path: Path) -> None:
    make_image("photos/a.jpg", (600, 400))
    orchestrator = ResizeOrchestrator(settings)

    outcome = await orchestrator.produce(
        ResizeRequest(SourceImageRef("photos/a.jpg"), width=300, encoding=ImageEncoding.WEBP, quality=80),
    )

    assert outcome is not None
    assert outcome.relative_path == "images/hbnimages/w300/photos/a.webp"
    assert (outcome.width, outcome.height) == (300, 200)
    assert outcome.backend == "basic"
    assert not outcome.from_cache
    with Image.open(tmp_path / outcome.relative_path) as img:
        assert img.size == (300, 200)
    assert (tmp_path / "images/hbnimages/w300/photos/index.html").exists()


@pytest.mark.asyncio
async def test_cache_hit_skips_backends_and_reads_size(
    make_image,
    settings: Settings,
    mocker: pytest_mock.MockerFixture,
) -> None:
    make_image("photos/a.jpg", (600, 400))
    first = await ResizeOrchestrator(settings).resize_image("photos/a.jpg", width=300)
    assert first is not None

    backend = _fake_backend(mocker, "basic", BackendResult(success=True, width=1, height=1))
    outcome = await ResizeOrchestrator(settings, backends=[backend]).resize_image("photos/a.jpg", width=300)

    assert outcome is not None
    assert outcome.from_cache
    assert outcome.backend is None
    assert (outcome.width, outcome.height) == (300, 200)
    backend.resize.assert_not_awaited()


@pytest.mark.asyncio
async def test_stale_cache_is_regenerated(make_image, settings: Settings, tmp_path: Path) -> None:
    source = make_image("photos/a.jpg", (600, 400))
    orchestrator = ResizeOrchestrator(settings)
    first = await orchestrator.resize_image("photos/a.jpg", height=100, encoding="png")
    assert first is not None

    cached = tmp_path / first.relative_path
    os.utime(cached, (1000, 1000))
    os.utime(source, (2000, 2000))

    outcome = await orchestrator.resize_image("photos/a.jpg", height=100, encoding="png")

    assert outcome is not None
    assert outcome.relative_path == "images/hbnimages/h100/photos/a.png"
    assert not outcome.from_cache
    assert (outcome.width, outcome.height) == (150, 100)
    assert cached.stat().st_mtime >= 2000


@pytest.mark.asyncio
async def test_fallback_reaches_basic_after_remote_and_native_fail(
    make_image,
    tmp_path: Path,
    mocker: pytest_mock.MockerFixture,
) -> None:
    make_image("photos/a.jpg", (1000, 500))
    mocker.patch("imagecache.backends.native.load_vips", return_value=None)
    settings = Settings(root=str(tmp_path), converter="imaginary", site_url="https://example.test")
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.params["url"])
        return httpx.Response(500, json={"message": "upstream failure"})

    remote = RemoteResizeBackend(settings, transport=httpx.MockTransport(handler))
    native = NativeLibraryBackend()
    basic = BasicLibraryBackend()
    native_resize = mocker.spy(native, "resize")
    basic_resize = mocker.spy(basic, "resize")
    orchestrator = ResizeOrchestrator(settings, backends=[remote, native, basic])

    outcome = await orchestrator.resize_image("photos/a.jpg", width=200)
    await orchestrator.close()

    assert requested == ["https://example.test/photos/a.jpg"]
    assert native_resize.call_count == 1
    assert basic_resize.call_count == 1
    assert outcome is not None
    assert outcome.backend == "basic"
    assert (outcome.width, outcome.height) == (200, 100)


@pytest.mark.asyncio
async def test_first_success_stops_the_chain(make_image, settings: Settings, mocker: pytest_mock.MockerFixture) -> None:
    make_image("a.jpg")
    failing = _fake_backend(mocker, "remote", BackendResult.failed())
    winning = _fake_backend(mocker, "native", BackendResult(success=True, width=64, height=48))
    unused = _fake_backend(mocker, "basic", BackendResult(success=True, width=1, height=1))
    orchestrator = ResizeOrchestrator(settings, backends=[failing, winning, unused])

    outcome = await orchestrator.resize_image("a.jpg", width=64)

    assert outcome is not None
    assert (outcome.width, outcome.height) == (64, 48)
    assert outcome.backend == "native"
    unused.resize.assert_not_awaited()
    job = winning.resize.await_args.args[0]
    assert job.width == 64
    assert job.source_url == "https://example.test/a.jpg"


@pytest.mark.asyncio
async def test_all_backends_failing_returns_none(make_image, settings: Settings, mocker: pytest_mock.MockerFixture) -> None:
    make_image("a.jpg")
    backends = [_fake_backend(mocker, name, BackendResult.failed()) for name in ("remote", "native", "basic")]

    outcome = await ResizeOrchestrator(settings, backends=backends).resize_image("a.jpg", width=10)

    assert outcome is None
    for backend in backends:
        backend.resize.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_source_returns_none(settings: Settings, tmp_path: Path) -> None:
    outcome = await ResizeOrchestrator(settings).resize_image("photos/missing.jpg", width=100)

    assert outcome is None
    assert not (tmp_path / "images").exists()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("width", "height", "encoding", "quality"),
    [(0, 0, "webp", 80), (10, 0, "gif", 80), (10, 0, "webp", 101)],
)
async def test_invalid_requests_return_none(
    make_image,
    settings: Settings,
    tmp_path: Path,
    width: int,
    height: int,
    encoding: str,
    quality: int,
) -> None:
    make_image("a.jpg")

    outcome = await ResizeOrchestrator(settings).resize_image("a.jpg", width, height, encoding, quality)

    assert outcome is None
    assert not (tmp_path / "images").exists()


@pytest.mark.asyncio
async def test_provisioning_failure_returns_none(make_image, settings: Settings, tmp_path: Path, mocker) -> None:
    make_image("a.jpg")
    (tmp_path / "images").write_text("blocked", encoding="utf-8")
    backend = _fake_backend(mocker, "basic", BackendResult(success=True, width=1, height=1))

    outcome = await ResizeOrchestrator(settings, backends=[backend]).resize_image("a.jpg", width=10)

    assert outcome is None
    backend.resize.assert_not_awaited()


@pytest.mark.asyncio
async def test_concurrent_requests_generate_once(make_image, settings: Settings, mocker: pytest_mock.MockerFixture) -> None:
    make_image("a.jpg")
    calls = 0

    async def _resize(job):
        nonlocal calls
        calls += 1
        await asyncio.sleep(0.01)
        Image.new("RGB", (10, 7)).save(job.cache_path, format="WEBP")
        return BackendResult(success=True, width=10, height=7)

    backend = mocker.Mock()
    backend.name = "basic"
    backend.resize = _resize
    orchestrator = ResizeOrchestrator(settings, backends=[backend])

    first, second = await asyncio.gather(
        orchestrator.resize_image("a.jpg", width=10),
        orchestrator.resize_image("a.jpg", width=10),
    )

    assert calls == 1
    assert first is not None and second is not None
    assert {first.from_cache, second.from_cache} == {True, False}
    assert first.relative_path == second.relative_path


def test_cache_file_name_and_dimensions(make_image, settings: Settings) -> None:
    make_image("photos/b.png", (40, 30), image_format="PNG")
    orchestrator = ResizeOrchestrator(settings)

    assert orchestrator.cache_file_name("photos/b.png", 0, 0) is None
    assert orchestrator.cache_file_name("photos/b.png", 0, 15, "jpeg") == "images/hbnimages/h15/photos/b.jpeg"
    assert orchestrator.image_dimensions("/photos/b.png") == (40, 30)
    assert orchestrator.image_dimensions("photos/none.png") is None


@pytest.mark.asyncio
async def test_produce_rejects_unknown_encoding(
    make_image,
    settings: Settings,
    tmp_path: Path,
    mocker: pytest_mock.MockerFixture,
) -> None:
    make_image("a.jpg")
    backend = _fake_backend(mocker, "basic", BackendResult(success=True, width=1, height=1))

    outcome = await ResizeOrchestrator(settings, backends=[backend]).produce(
        ResizeRequest(SourceImageRef("a.jpg"), width=10, encoding="gif"),
    )

    assert outcome is None
    backend.resize.assert_not_awaited()
    assert not (tmp_path / "images").exists()


@pytest.mark.asyncio
async def test_produce_accepts_plain_string_encoding(
    make_image,
    settings: Settings,
    mocker: pytest_mock.MockerFixture,
) -> None:
    make_image("a.jpg")
    backend = _fake_backend(mocker, "remote", BackendResult(success=True, width=10, height=7))

    outcome = await ResizeOrchestrator(settings, backends=[backend]).produce(
        ResizeRequest(SourceImageRef("a.jpg"), width=10, encoding="webp"),
    )

    assert outcome is not None
    assert outcome.relative_path == "images/hbnimages/w10/a.webp"
    job = backend.resize.await_args.args[0]
    assert job.encoding is ImageEncoding.WEBP


@pytest.mark.asyncio
async def test_oversized_source_returns_none(
    make_image,
    settings: Settings,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    make_image("huge.jpg", (100, 50))
    orchestrator = ResizeOrchestrator(settings)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    outcome = await orchestrator.resize_image("huge.jpg", width=10)

    assert outcome is None
    assert orchestrator.image_dimensions("huge.jpg") is None
