import logging
import os
import shutil

from .coreiso import locate
from .errors import EmbedAreaTooSmallError, IsoStreamError
from .ignition import build
from .overlay_stream import OverlayStream
from .region import Region
from .utils import stream_or_path

log = logging.getLogger(name=__name__)

__all__ = ("DEFAULT_CHUNK_SIZE", "embed_ignition", "copy_stream", "patch_image")

DEFAULT_CHUNK_SIZE = 1024 * 1024


def embed_ignition(iso, ignition):
    """
    Create a stream reading as the image in `iso` with `ignition` embedded into its embed area.

    The compressed payload is padded with zeros up to the size of the embed area so that nothing previously embedded
    in the image survives.

    :param iso:         A seekable stream of a CoreOS live image, positioned at its start.
    :param ignition:    The Ignition config, as text or bytes.
    :rtype:             OverlayStream
    """
    start, span = locate(iso)
    payload = build(ignition).getvalue()
    if len(payload) > span:
        raise EmbedAreaTooSmallError(len(payload), span)

    region = Region(payload + b"\0" * (span - len(payload)), start, span)
    return OverlayStream(iso, [region])


def copy_stream(src, dst, chunk_size=DEFAULT_CHUNK_SIZE):
    """
    Copy everything left in `src` to `dst`, `chunk_size` bytes at a time.

    :return:    The number of bytes copied.
    """
    start = dst.tell()
    shutil.copyfileobj(src, dst, chunk_size)
    return dst.tell() - start


def patch_image(src, dst_path, ignition, chunk_size=DEFAULT_CHUNK_SIZE):
    """
    Write a copy of the image at `src` (a path or a stream) to `dst_path`, with `ignition` embedded.

    The output is only created once the image header and the payload have been checked, and it is removed again if
    the copy fails. Writing over the input image itself is refused.

    :return:    The number of bytes written.
    """
    is_path = not hasattr(src, "read")
    if is_path and os.path.exists(src) and os.path.exists(dst_path) and os.path.samefile(src, dst_path):
        raise IsoStreamError("Refusing to overwrite the input image %s in place" % dst_path)

    with stream_or_path(src) as iso:
        with embed_ignition(iso, ignition) as stream:
            try:
                with open(dst_path, "wb") as out:
                    count = copy_stream(stream, out, chunk_size=chunk_size)
            except BaseException:
                log.debug("Removing incomplete output %s", dst_path)
                if os.path.exists(dst_path):
                    os.remove(dst_path)
                raise
    log.info("Copied %d bytes to %s", count, dst_path)
    return count
