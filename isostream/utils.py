import contextlib
import io
import os

from .errors import IsoStreamError


def as_stream(obj):
    """
    Wrap raw bytes into a stream. Anything that already looks like a stream is returned unchanged.
    """
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return io.BytesIO(bytes(obj))
    if not hasattr(obj, "read"):
        raise TypeError("%r is neither bytes nor a readable stream" % (obj,))
    return obj


def is_seekable(stream):
    """
    Whether `stream` claims to support random repositioning.
    """
    if not hasattr(stream, "seek"):
        return False
    seekable = getattr(stream, "seekable", None)
    if seekable is None:
        return True
    try:
        return seekable()
    except ValueError:
        # closed file objects raise instead of answering
        return False


def stream_size(stream, origin=0):
    """
    Measure the number of bytes of `stream` from `origin` to its end by seeking to the end and back to `origin`.

    :raises OSError:    When the stream refuses to be repositioned.
    """
    if not is_seekable(stream):
        raise io.UnsupportedOperation("%r is not seekable" % (stream,))
    end = stream.seek(0, os.SEEK_END)
    if end is None:
        # some stream-likes return nothing from seek
        end = stream.tell()
    stream.seek(origin)
    return max(end - origin, 0)


@contextlib.contextmanager
def stream_or_path(obj, perms="rb"):
    if hasattr(obj, "read") and hasattr(obj, "seek"):
        obj.seek(0)
        yield obj
    else:
        if not os.path.exists(obj):
            raise IsoStreamError("%r is not a valid path" % obj)

        with open(obj, perms) as f:
            yield f
