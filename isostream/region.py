import logging

from .errors import RegionError, SizeUnavailableError
from .utils import as_stream, stream_size

log = logging.getLogger(name=__name__)


class Region:
    """
    A span of the logical stream whose bytes come from a replacement content instead of the base source.

    :ivar content:      The stream providing the replacement bytes.
    :ivar int start:    The offset in the logical stream where the region begins.
    :ivar int span:     How many bytes of the base stream this region supersedes.

    The span does not have to match the length of the content: a longer content is truncated to the span, a shorter
    one leaves the remainder of the span unfilled. When no span is given it is measured from the content.
    """

    def __init__(self, content, start, span=None):
        if start < 0:
            raise RegionError("Region start must be non-negative, got %d" % start)
        if span is not None and span < 0:
            raise RegionError("Region span must be non-negative, got %d" % span)
        self.content = as_stream(content)
        self.start = start
        self.span = span

    def measure_span(self):
        """
        Set the span of this region to the length of its content, unless a span was declared.

        The content is left positioned at its beginning.

        :return:    The span of this region.
        """
        if self.span is not None:
            return self.span
        try:
            self.span = stream_size(self.content)
        except (OSError, ValueError) as e:
            raise SizeUnavailableError(
                "Cannot measure the content of region at offset %d: %s" % (self.start, e), content=self.content
            ) from e
        log.debug("Measured span of region at %#x: %#x bytes", self.start, self.span)
        return self.span

    @property
    def end(self):
        """
        The first offset after this region
        """
        return self.start + self.span

    @property
    def is_empty(self):
        return self.span == 0

    def contains_addr(self, addr):
        """
        Does this region supersede the byte at this offset?
        """
        return self.start <= addr < self.start + self.span

    @property
    def min_addr(self):
        """
        The first offset covered by this region
        """
        return self.start

    @property
    def max_addr(self):
        """
        The last offset covered by this region
        """
        return self.start + self.span - 1

    def __repr__(self):
        if self.span is None:
            return "<%s | start %#x, span unmeasured>" % (self.__class__.__name__, self.start)
        return "<%s | start %#x, span %#x>" % (self.__class__.__name__, self.start, self.span)
