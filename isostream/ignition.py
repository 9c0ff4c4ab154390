"""
Building the compressed Ignition archive embedded into CoreOS live images.

The payload is a newc ("070701") cpio archive holding a single ``config.ign`` entry, compressed with gzip, which is
the format the initramfs loader expects to find in the embed area.
"""
import gzip
import io
import logging
import zlib

from .errors import PayloadError

log = logging.getLogger(name=__name__)

__all__ = ("IGNITION_NAME", "archive", "compress", "build", "extract")

IGNITION_NAME = "config.ign"
IGNITION_MODE = 0o100_644

CPIO_MAGIC = b"070701"
CPIO_TRAILER = "TRAILER!!!"
# magic followed by 13 fields of 8 hex digits
CPIO_HEADER_SIZE = 110


def _pad4(n):
    return -n % 4


def _cpio_entry(name, data, mode, nlink):
    name_bytes = name.encode() + b"\0"
    fields = (
        0,  # ino
        mode,
        0,  # uid
        0,  # gid
        nlink,
        0,  # mtime
        len(data),
        0,  # devmajor
        0,  # devminor
        0,  # rdevmajor
        0,  # rdevminor
        len(name_bytes),
        0,  # check
    )
    header = CPIO_MAGIC + b"".join(b"%08X" % f for f in fields)
    return (
        header
        + name_bytes
        + b"\0" * _pad4(CPIO_HEADER_SIZE + len(name_bytes))
        + data
        + b"\0" * _pad4(len(data))
    )


def archive(data, name=IGNITION_NAME, mode=IGNITION_MODE):
    """
    Create a newc cpio archive containing a single regular file.

    :param bytes data:  The file content.
    :param str name:    The name of the file inside the archive.
    :param int mode:    The file mode, including the file type bits.
    :rtype:             bytes
    """
    return _cpio_entry(name, data, mode, 1) + _cpio_entry(CPIO_TRAILER, b"", 0, 1)


def compress(data):
    """
    Gzip `data`. The output does not depend on the current time.
    """
    return gzip.compress(data, mtime=0)


def build(raw, name=IGNITION_NAME):
    """
    Build the compressed archive for an Ignition config.

    :param raw:     The config, as text (encoded as UTF-8) or bytes.
    :return:        A stream positioned at the start of the payload.
    :rtype:         io.BytesIO
    """
    if isinstance(raw, str):
        raw = raw.encode("utf-8")
    payload = compress(archive(raw, name=name))
    log.info("Built %d byte payload for a %d byte ignition config", len(payload), len(raw))
    return io.BytesIO(payload)


def extract(payload):
    """
    Decompress and unpack a payload produced by :func:`build`. Trailing padding after the gzip stream is ignored.

    :param bytes payload:   The compressed archive.
    :return:                A dict mapping file names to their content.
    """
    d = zlib.decompressobj(wbits=16 + zlib.MAX_WBITS)
    try:
        data = d.decompress(payload)
    except zlib.error as e:
        raise PayloadError("Failed to decompress payload: %s" % e) from e
    if not d.eof:
        raise PayloadError("Truncated gzip stream")

    files = {}
    pos = 0
    while True:
        header = data[pos : pos + CPIO_HEADER_SIZE]
        if len(header) != CPIO_HEADER_SIZE or header[:6] != CPIO_MAGIC:
            raise PayloadError("Invalid cpio header at offset %d" % pos)
        try:
            fields = [int(header[i : i + 8], 16) for i in range(6, CPIO_HEADER_SIZE, 8)]
        except ValueError as e:
            raise PayloadError("Invalid cpio header at offset %d: %s" % (pos, e)) from e
        filesize, namesize = fields[6], fields[11]

        pos += CPIO_HEADER_SIZE
        name = data[pos : pos + namesize - 1].decode()
        pos += namesize + _pad4(CPIO_HEADER_SIZE + namesize)
        if name == CPIO_TRAILER:
            return files
        content = data[pos : pos + filesize]
        if len(content) != filesize:
            raise PayloadError("Truncated cpio entry %r" % name)
        files[name] = content
        pos += filesize + _pad4(filesize)
