from __future__ import annotations

import io

import pytest

import isostream
from isostream.ignition import IGNITION_NAME, build, extract
from isostream.injector import copy_stream, embed_ignition, patch_image

IGNITION = '{"ignition": {"version": "3.1.0"}}'


def _check_patched(original, patched, area, ignition):
    start, span = area
    assert len(patched) == len(original)
    assert patched[:start] == original[:start]
    assert patched[start + span :] == original[start + span :]

    embedded = patched[start : start + span]
    assert extract(embedded) == {IGNITION_NAME: ignition}
    # the rest of the area is cleared
    payload_len = len(build(ignition).getvalue())
    assert embedded[payload_len:] == b"\0" * (span - payload_len)


def test_embed_ignition(image, area):
    stream = embed_ignition(io.BytesIO(image), IGNITION)
    assert isinstance(stream, isostream.OverlayStream)
    assert stream.size == len(image)
    _check_patched(image, stream.read(), area, IGNITION.encode())


def test_embed_ignition_twice(image, area):
    once = embed_ignition(io.BytesIO(image), "first").read()
    twice = embed_ignition(io.BytesIO(once), IGNITION).read()
    _check_patched(image, twice, area, IGNITION.encode())


def test_embed_ignition_seek(image, area):
    start, _ = area
    full = embed_ignition(io.BytesIO(image), IGNITION).read()

    stream = embed_ignition(io.BytesIO(image), IGNITION)
    stream.seek(start - 10)
    assert stream.read(100) == full[start - 10 : start + 90]


def test_area_too_small(make_image):
    image = make_image(area_span=16)
    with pytest.raises(isostream.EmbedAreaTooSmallError) as exc:
        embed_ignition(io.BytesIO(image), IGNITION)
    assert exc.value.area_size == 16
    assert isinstance(exc.value, isostream.PayloadError)


def test_not_a_live_image():
    with pytest.raises(isostream.MagicMismatchError):
        embed_ignition(io.BytesIO(b"\0" * 65536), IGNITION)


def test_copy_stream():
    src = io.BytesIO(b"x" * 1000)
    dst = io.BytesIO()
    dst.write(b"head")
    assert copy_stream(src, dst, chunk_size=7) == 1000
    assert dst.getvalue() == b"head" + b"x" * 1000


def test_patch_image(image_path, image, area, tmp_path):
    out = tmp_path / "out.iso"
    assert patch_image(str(image_path), str(out), IGNITION, chunk_size=4096) == len(image)
    _check_patched(image, out.read_bytes(), area, IGNITION.encode())


def test_patch_image_stream(image, area, tmp_path):
    out = tmp_path / "out.iso"
    patch_image(io.BytesIO(image), str(out), IGNITION)
    _check_patched(image, out.read_bytes(), area, IGNITION.encode())


def test_patch_image_missing_input(tmp_path):
    with pytest.raises(isostream.IsoStreamError):
        patch_image(str(tmp_path / "missing.iso"), str(tmp_path / "out.iso"), IGNITION)


class FlakyImage(io.BytesIO):
    """
    An image whose reads fail past a given offset.
    """

    def __init__(self, data, fail_at):
        super().__init__(data)
        self.fail_at = fail_at

    def read(self, n=-1):
        if self.tell() >= self.fail_at:
            raise OSError("I/O error")
        return super().read(n)


def test_patch_image_same_path(image_path, image):
    with pytest.raises(isostream.IsoStreamError):
        patch_image(str(image_path), str(image_path), IGNITION)
    # the input is untouched
    assert image_path.read_bytes() == image


def test_patch_image_bad_header_creates_no_output(tmp_path, make_image):
    bad = tmp_path / "bad.iso"
    bad.write_bytes(make_image(magic=b"isoiso!!"))
    out = tmp_path / "out.iso"
    with pytest.raises(isostream.MagicMismatchError):
        patch_image(str(bad), str(out), IGNITION)
    assert not out.exists()


def test_patch_image_failed_copy_removes_output(image, tmp_path):
    out = tmp_path / "out.iso"
    with pytest.raises(isostream.SourceError):
        patch_image(FlakyImage(image, fail_at=50000), str(out), IGNITION, chunk_size=4096)
    assert not out.exists()
