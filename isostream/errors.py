from __future__ import annotations

__all__ = (
    "IsoStreamError",
    "ConstructionError",
    "RegionError",
    "SizeUnavailableError",
    "OverlappingRegionsError",
    "SourceError",
    "RegionContentExhaustedError",
    "SeekError",
    "InvalidHeaderError",
    "MagicMismatchError",
    "PayloadError",
    "EmbedAreaTooSmallError",
)


class IsoStreamError(Exception):
    """
    Base class for errors raised by isostream.
    """

    pass


class ConstructionError(IsoStreamError):
    """
    Error raised while building regions or a region set, before any byte is streamed.
    """

    pass


class RegionError(ConstructionError):
    """
    Error raised when a region is declared with a negative start or span.
    """

    pass


class SizeUnavailableError(ConstructionError):
    """
    Error raised when the span of a region must be measured from a content source that cannot report its size.
    """

    def __init__(self, msg, content=None):
        super().__init__(msg)
        self.content = content


class OverlappingRegionsError(ConstructionError):
    """
    Error raised when two regions of a region set cover a common byte.
    """

    def __init__(self, first, second):
        super().__init__(
            "region at offset %d with span %d overlaps with region at offset %d with span %d"
            % (first.start, first.span, second.start, second.span)
        )
        self.first = first
        self.second = second


class SourceError(IsoStreamError):
    """
    Error raised when the base source or a region content fails while streaming.

    :ivar str phase:    What the overlay stream was doing, e.g. "reading base" or "discarding base bytes".
    """

    def __init__(self, msg, phase=None):
        super().__init__(msg if phase is None else "%s: %s" % (phase, msg))
        self.phase = phase


class RegionContentExhaustedError(SourceError):
    """
    Error raised when a region content ends before the span declared for it has been emitted.
    """

    def __init__(self, region, position):
        super().__init__(
            "content of region at offset %d ended after %d of %d bytes"
            % (region.start, position - region.start, region.span),
            phase="reading region content",
        )
        self.region = region
        self.position = position


class SeekError(IsoStreamError):
    """
    Error raised when a stream cannot be repositioned. The stream state is unchanged.
    """

    pass


class InvalidHeaderError(IsoStreamError):
    """
    Error raised when the embed area header of an image cannot be read.
    """

    pass


class MagicMismatchError(InvalidHeaderError):
    """
    Error raised when the embed area header does not start with the expected magic marker.
    """

    def __init__(self, magic, expected):
        super().__init__("Could not find magic string in image header (%r, expected %r)" % (magic, expected))
        self.magic = magic
        self.expected = expected


class PayloadError(IsoStreamError):
    """
    Error raised when a payload cannot be built or extracted.
    """

    pass


class EmbedAreaTooSmallError(PayloadError):
    """
    Error raised when a payload does not fit into the embed area of an image.
    """

    def __init__(self, payload_size, area_size):
        super().__init__("payload length (%d) exceeds embed area size (%d)" % (payload_size, area_size))
        self.payload_size = payload_size
        self.area_size = area_size
