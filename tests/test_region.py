from __future__ import annotations

import io

import pytest

import isostream
from isostream import Region


def test_region():
    region = Region(io.BytesIO(b"overlay"), 3, 4)
    assert region.start == 3
    assert region.span == 4
    assert region.end == 7
    assert region.min_addr == 3
    assert region.max_addr == 6
    assert not region.is_empty
    assert not region.contains_addr(2)
    assert region.contains_addr(3)
    assert region.contains_addr(6)
    assert not region.contains_addr(7)
    assert repr(region) == "<Region | start 0x3, span 0x4>"


def test_measure_span():
    content = io.BytesIO(b"overlay")
    content.seek(4)
    region = Region(content, 10)
    assert region.span is None
    assert repr(region) == "<Region | start 0xa, span unmeasured>"
    assert region.measure_span() == 7
    assert region.span == 7
    assert content.tell() == 0

    # declared spans are left alone
    assert Region(b"overlay", 0, 2).measure_span() == 2


def test_bytes_content():
    region = Region(b"abc", 0)
    assert isinstance(region.content, io.BytesIO)
    assert region.measure_span() == 3

    with pytest.raises(TypeError):
        Region(12, 0)


def test_empty_region():
    region = Region(b"", 5)
    assert region.measure_span() == 0
    assert region.is_empty
    assert not region.contains_addr(5)


def test_negative_values():
    with pytest.raises(isostream.RegionError):
        Region(b"abc", -1)
    with pytest.raises(isostream.RegionError):
        Region(b"abc", 0, -3)
