from __future__ import annotations

import struct

import pytest

from isostream.coreiso import COREISO_MAGIC, HEADER_OFFSET

AREA_START = 40960
AREA_SPAN = 8192
IMAGE_SIZE = 65536


def _make_image(area_start=AREA_START, area_span=AREA_SPAN, size=IMAGE_SIZE, magic=COREISO_MAGIC):
    """
    Build a fake live image: a repeating byte pattern with an embed area header and an embed area filled with 0xee.
    """
    image = bytearray(i % 251 for i in range(size))
    image[HEADER_OFFSET : HEADER_OFFSET + 24] = struct.pack("<8sQQ", magic, area_start, area_span)
    image[area_start : area_start + area_span] = b"\xee" * area_span
    return bytes(image)


@pytest.fixture
def make_image():
    return _make_image


@pytest.fixture
def area():
    return AREA_START, AREA_SPAN


@pytest.fixture
def image():
    return _make_image()


@pytest.fixture
def image_path(tmp_path, image):
    path = tmp_path / "live.iso"
    path.write_bytes(image)
    return path
