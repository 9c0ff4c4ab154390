"""
Reading the embed area header of CoreOS live ISO images.

The system area of such an image carries a small header right before the first ISO 9660 volume descriptor, describing
where the area reserved for an embedded Ignition config lives in the image::

    offset 32744   8 bytes   magic, "coreiso+"
    offset 32752   8 bytes   start of the embed area, little-endian
    offset 32760   8 bytes   length of the embed area, little-endian
"""
import logging
import struct
from collections import namedtuple

from .errors import InvalidHeaderError, MagicMismatchError

log = logging.getLogger(name=__name__)

__all__ = ("CoreISOHeader", "parse_header", "read_header", "locate")

# header is inclusive of these bytes
HEADER_OFFSET = 32744
HEADER_SIZE = 24
HEADER_END = HEADER_OFFSET + HEADER_SIZE
COREISO_MAGIC = b"coreiso+"

_header_struct = struct.Struct("<8sQQ")

CoreISOHeader = namedtuple("CoreISOHeader", ("magic", "start", "span"))


def parse_header(data):
    """
    Decode an embed area header.

    :param bytes data:  Exactly :data:`HEADER_SIZE` bytes read at :data:`HEADER_OFFSET`.
    :rtype:             CoreISOHeader
    """
    if len(data) != HEADER_SIZE:
        raise InvalidHeaderError("incorrect embed info size, expected %d, got %d" % (HEADER_SIZE, len(data)))
    header = CoreISOHeader(*_header_struct.unpack(data))
    if header.magic != COREISO_MAGIC:
        raise MagicMismatchError(header.magic, COREISO_MAGIC)
    return header


def read_header(stream):
    """
    Read the embed area header of the image in `stream`. The stream position is restored afterwards.

    :rtype: CoreISOHeader
    """
    pos = stream.tell()
    try:
        stream.seek(HEADER_OFFSET)
        data = stream.read(HEADER_SIZE)
    finally:
        stream.seek(pos)
    return parse_header(data)


def locate(stream):
    """
    Find the embed area of the image in `stream`.

    :return:    A ``(start, span)`` tuple.
    """
    header = read_header(stream)
    log.info("Found embed area at %#x, %#x bytes", header.start, header.span)
    return header.start, header.span
