"""Tests for the streaming upload writer."""
import pytest

from raindrops.errors import ErrorCode, RaindropsError
from raindrops.storage.uploads import write_stream


async def _chunks(*parts):
    for part in parts:
        yield part


async def _broken_stream():
    yield b"first"
    raise ConnectionResetError("client went away")


@pytest.mark.asyncio
async def test_chunks_are_written_in_order(tmp_path):
    dest = tmp_path / "out.bin"
    written = await write_stream(dest, _chunks(b"abc", b"", b"def"), max_bytes=1024)

    assert written == 6
    assert dest.read_bytes() == b"abcdef"


@pytest.mark.asyncio
async def test_parent_directories_are_created(tmp_path):
    dest = tmp_path / "Album" / "2024" / "pic.jpg"
    await write_stream(dest, _chunks(b"jpeg"), max_bytes=1024)
    assert dest.read_bytes() == b"jpeg"


@pytest.mark.asyncio
async def test_existing_file_is_replaced(tmp_path):
    dest = tmp_path / "report.pdf"
    dest.write_bytes(b"old contents that are longer")

    await write_stream(dest, _chunks(b"new"), max_bytes=1024)
    assert dest.read_bytes() == b"new"


@pytest.mark.asyncio
async def test_empty_body_creates_empty_file(tmp_path):
    dest = tmp_path / "empty.txt"
    assert await write_stream(dest, _chunks(), max_bytes=1024) == 0
    assert dest.exists()
    assert dest.stat().st_size == 0


@pytest.mark.asyncio
async def test_unopenable_destination(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")

    with pytest.raises(RaindropsError) as exc:
        await write_stream(blocker / "child.txt", _chunks(b"x"), max_bytes=1024)
    assert exc.value.code == ErrorCode.UPLOAD_OPEN_FAILED
    assert exc.value.http_status == 500


@pytest.mark.asyncio
async def test_oversized_body_is_rejected(tmp_path):
    dest = tmp_path / "big.bin"
    with pytest.raises(RaindropsError) as exc:
        await write_stream(dest, _chunks(b"12345", b"67890"), max_bytes=8)

    assert exc.value.code == ErrorCode.UPLOAD_TOO_LARGE
    assert exc.value.http_status == 413
    # What fit before the limit stays on disk
    assert dest.read_bytes() == b"12345"


@pytest.mark.asyncio
async def test_interrupted_stream_keeps_partial_file(tmp_path):
    dest = tmp_path / "partial.bin"
    with pytest.raises(RaindropsError) as exc:
        await write_stream(dest, _broken_stream(), max_bytes=1024)

    assert exc.value.code == ErrorCode.UPLOAD_WRITE_FAILED
    assert exc.value.details["bytes_written"] == 5
    assert dest.read_bytes() == b"first"
