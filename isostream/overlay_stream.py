import io
import logging

from .errors import ConstructionError, RegionContentExhaustedError, SeekError, SourceError
from .regions import Regions
from .utils import is_seekable, stream_size

log = logging.getLogger(name=__name__)


class OverlayStream:
    """
    An object that wraps a readable base stream and makes it look as if some of its spans had been replaced by the
    content of the given regions. Nothing is copied up front: bytes are pulled from the base stream and the region
    contents as they are read.

    The base stream is consumed sequentially. Bytes superseded by a region are read from the base and dropped, so the
    base position always matches the logical position once the region is over. This means the base does not need to
    be seekable unless :meth:`seek` is used.

    Regions may extend past the end of the base, or start right where it ends, in which case the stream grows to
    make room for them.

    The wrapped streams are borrowed: closing an overlay stream never closes the base or any region content.
    """

    def __init__(self, base, regions=None, base_size=None):
        """
        :param base:        The stream to patch. Its current position is the start of the logical stream.
        :param regions:     A :class:`Regions` instance, or an iterable of :class:`Region` to build one from.
        :param base_size:   The number of bytes left in the base stream, if known. Measured when the base is
                            seekable and this is not given.
        """
        if not isinstance(regions, Regions):
            regions = Regions(regions)

        self.base = base
        self.regions = regions

        self._base_seekable = is_seekable(base)
        self._base_origin = base.tell() if self._base_seekable else 0
        if base_size is None and self._base_seekable:
            base_size = stream_size(base, self._base_origin)
        self._base_size = base_size
        if base_size is not None:
            self._check_no_gap(base_size)

        self._pos = 0
        # region containing self._pos, if any
        self._active = None
        # index in self.regions.mapped of the first region ending after self._pos
        self._index = 0
        self._base_exhausted = False
        self._closed = False

    def _check_no_gap(self, base_size):
        # past the end of the base, regions must follow each other with no hole between them
        pos = base_size
        for region in self.regions.mapped:
            if region.end <= pos:
                continue
            if region.start > pos:
                raise ConstructionError(
                    "region at offset %d leaves a gap after the end of the base stream at %d"
                    % (region.start, pos)
                )
            pos = region.end

    @property
    def size(self):
        """
        The length of the logical stream, or None if the base stream size is unknown.
        """
        if self._base_size is None:
            return None
        return max(self._base_size, self.regions.end)

    @property
    def closed(self):
        return self._closed

    def readable(self):
        return True

    def seekable(self):
        return self._base_seekable

    def tell(self):
        return self._pos

    def close(self):
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self):
        return "<OverlayStream | pos %#x, %d regions>" % (self._pos, len(self.regions))

    def _check_closed(self):
        if self._closed:
            raise ValueError("I/O operation on closed overlay stream")

    #
    # Reading
    #

    def readinto(self, b):
        """
        Read bytes into a pre-allocated, writable buffer and return how many were written.

        At most one source is read per call: a read stops at the next region boundary even if `b` has room left, so
        short reads are expected. 0 is returned only at the end of the stream.
        """
        self._check_closed()
        view = memoryview(b).cast("B")
        if len(view) == 0:
            return 0

        region = self._current_region()
        if region is not None:
            return self._read_region(region, view)
        return self._read_base(view)

    def read1(self, size=-1):
        """
        Read up to `size` bytes with a single call to :meth:`readinto`. The result may be short at region boundaries.
        """
        if size is None or size < 0:
            size = io.DEFAULT_BUFFER_SIZE
        buf = bytearray(size)
        n = self.readinto(buf)
        return bytes(buf[:n])

    def read(self, size=-1):
        """
        The stream-like function that reads up to a number of bytes starting from the current position and updates
        the current position. Use with :func:`seek`.

        Unlike :meth:`readinto`, this keeps reading across region boundaries, so fewer than `size` bytes are returned
        only at the end of the stream.

        :param int size:    The number of bytes to read. Read everything left when negative or None.
        """
        if size is None or size < 0:
            return self.readall()
        buf = bytearray(size)
        view = memoryview(buf)
        got = 0
        while got < size:
            n = self.readinto(view[got:])
            if n == 0:
                break
            got += n
        return bytes(buf[:got])

    def readall(self):
        out = bytearray()
        buf = bytearray(io.DEFAULT_BUFFER_SIZE)
        while True:
            n = self.readinto(buf)
            if n == 0:
                return bytes(out)
            out += buf[:n]

    def _current_region(self):
        if self._active is None:
            mapped = self.regions.mapped
            # sequential reads only ever move forward by a region or two
            while self._index < len(mapped) and mapped[self._index].end <= self._pos:
                self._index += 1
            if self._index < len(mapped) and mapped[self._index].start <= self._pos:
                self._activate(mapped[self._index])
        return self._active

    def _activate(self, region):
        if is_seekable(region.content):
            try:
                region.content.seek(self._pos - region.start)
            except OSError as e:
                raise SourceError(str(e), phase="positioning region content") from e
        log.debug("Entering region %r at %#x", region, self._pos)
        self._active = region

    def _read_region(self, region, view):
        want = min(len(view), region.end - self._pos)
        try:
            data = region.content.read(want)
        except OSError as e:
            raise SourceError(str(e), phase="reading region content") from e
        if not data:
            raise RegionContentExhaustedError(region, self._pos)

        count = len(data)
        view[:count] = data
        self._discard_base(count)
        self._pos += count
        if self._pos >= region.end:
            log.debug("Leaving region %r at %#x", region, self._pos)
            self._active = None
        return count

    def _discard_base(self, count):
        # keep the base in lock-step with the logical position. running out of base here is fine: the region is
        # allowed to extend past its end.
        while count > 0 and not self._base_exhausted:
            try:
                skipped = self.base.read(count)
            except OSError as e:
                raise SourceError(str(e), phase="discarding base bytes") from e
            if not skipped:
                log.debug("Base stream ended at %#x inside a region", self._pos)
                self._base_exhausted = True
            else:
                count -= len(skipped)

    def _read_base(self, view):
        mapped = self.regions.mapped
        next_region = mapped[self._index] if self._index < len(mapped) else None
        if next_region is not None:
            view = view[: next_region.start - self._pos]

        data = b""
        if not self._base_exhausted:
            try:
                data = self.base.read(len(view))
            except OSError as e:
                raise SourceError(str(e), phase="reading base") from e

        if not data:
            self._base_exhausted = True
            if next_region is not None:
                raise SourceError(
                    "base stream ended at offset %d, before the region at offset %d" % (self._pos, next_region.start),
                    phase="reading base",
                )
            return 0

        count = len(data)
        view[:count] = data
        self._pos += count
        return count

    #
    # Seeking
    #

    def seek(self, offset, whence=io.SEEK_SET):
        """
        The stream-like function that sets the current position of the logical stream. Use with :func:`read()`.

        The base stream must be seekable, and so must the content of the region the new position falls in. If the
        stream cannot be repositioned, :class:`SeekError` is raised and the position is left unchanged.

        :param int offset:  The position to seek to, relative to `whence`.
        :param int whence:  One of ``io.SEEK_SET``, ``io.SEEK_CUR`` or ``io.SEEK_END``.
        :return:            The new absolute position.
        """
        self._check_closed()
        if whence == io.SEEK_SET:
            target = offset
        elif whence == io.SEEK_CUR:
            target = self._pos + offset
        elif whence == io.SEEK_END:
            if self.size is None:
                raise SeekError("Cannot seek relative to the end of a stream of unknown size")
            target = self.size + offset
        else:
            raise SeekError("Invalid whence (%r)" % (whence,))

        if not self._base_seekable:
            raise SeekError("The base stream is not seekable")
        if target < 0:
            raise SeekError("Negative seek position %d" % target)
        if self.size is not None and target > self.size:
            raise SeekError("Seek position %d is past the end of the stream (%d)" % (target, self.size))

        region = self.regions.find_region_containing(target)
        if region is not None and not is_seekable(region.content):
            raise SeekError("The content of region at offset %d is not seekable" % region.start)

        base_target = target if self._base_size is None else min(target, self._base_size)
        previous = self.base.tell()
        try:
            self.base.seek(self._base_origin + base_target)
            if region is not None:
                region.content.seek(target - region.start)
        except (OSError, ValueError) as e:
            self.base.seek(previous)
            raise SeekError("Cannot seek to %d: %s" % (target, e)) from e

        log.debug("Seeking to %#x (base at %#x)", target, base_target)
        self._pos = target
        self._active = region
        self._index = self.regions.index_of_region_next_to(target)
        self._base_exhausted = self._base_size is not None and target >= self._base_size
        return target
