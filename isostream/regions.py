import logging
from typing import Iterable, Iterator, List, Optional

import sortedcontainers

from .errors import OverlappingRegionsError
from .region import Region

log = logging.getLogger(name=__name__)


class Regions:
    """
    An ordered collection of regions used to patch a base stream. Regions are sorted by their start offset and
    validated once, when the collection is built: no two regions may cover a common byte. Regions that merely touch
    are fine.

    Regions with an empty span are kept in the list but never take part in lookups, since they cover no byte at all.
    They may share the start of another region or sit between regions, but not fall strictly inside one.
    """

    def __init__(self, regions: Optional[Iterable[Region]] = None):
        lst = list(regions) if regions is not None else []
        for region in lst:
            region.measure_span()
            if region.is_empty:
                log.warning("Region at offset %#x has an empty span and will not patch anything", region.start)

        self._list: List[Region] = sorted(lst, key=lambda x: (x.start, x.span))
        self._sorted_list = self._make_sorted(self._list)
        self._validate()

    @property
    def raw_list(self) -> List[Region]:
        """
        Get every region of this collection, empty ones included, sorted by start offset.

        :return:  The internal list container.
        """

        return self._list

    @property
    def mapped(self) -> sortedcontainers.SortedKeyList:
        """
        The regions that cover at least one byte, sorted by start offset.
        """
        return self._sorted_list

    @property
    def max_addr(self) -> Optional[int]:
        """
        Get the highest offset covered by any region.

        :return: The highest offset of all regions, or None if no region covers any byte.
        """

        if self._sorted_list:
            return self._sorted_list[-1].max_addr
        return None

    @property
    def end(self) -> int:
        """
        The first offset after the last region, or 0 if no region covers any byte.
        """
        if self._sorted_list:
            return self._sorted_list[-1].end
        return 0

    def __getitem__(self, idx: int) -> Region:
        return self._list[idx]

    def __iter__(self) -> Iterator[Region]:
        return iter(self._list)

    def __len__(self) -> int:
        return len(self._list)

    def __repr__(self):
        return "<Regions: %s>" % repr(self._list)

    def find_region_containing(self, addr: int) -> Optional[Region]:
        """
        Find the region that contains a specific offset. Returns None if none of the regions covers the offset.

        :param addr:    The offset.
        :return:        The region that covers the specific offset, or None if no such region is found.
        """

        pos = self._sorted_list.bisect_key_right(addr) - 1
        if pos < 0:
            return None
        region = self._sorted_list[pos]
        if region.contains_addr(addr):
            return region
        return None

    def index_of_region_next_to(self, addr: int) -> int:
        """
        Find the index, among the non-empty regions, of the first region that ends after the given offset. This is
        either the region containing the offset or the first region starting after it.

        :param addr:    The offset.
        :return:        An index into :attr:`mapped`, equal to its length if every region ends at or before `addr`.
        """
        pos = self._sorted_list.bisect_key_right(addr)
        if pos > 0 and self._sorted_list[pos - 1].end > addr:
            return pos - 1
        return pos

    def find_region_next_to(self, addr: int) -> Optional[Region]:
        """
        Find the region containing the given offset, or else the next region after it.

        :param addr:    The offset to test.
        :return:        The region, or None if there is no region at or after the offset.
        """

        pos = self.index_of_region_next_to(addr)
        if pos >= len(self._sorted_list):
            return None
        return self._sorted_list[pos]

    def _validate(self):
        # check all but the last region for overlap with the following one. empty regions sort before a region with
        # the same start, so they only pass when they sit on a region boundary or outside every region.
        for first, second in zip(self._list, self._list[1:]):
            if first.end > second.start:
                raise OverlappingRegionsError(first, second)

    @staticmethod
    def _make_sorted(lst: List[Region]) -> sortedcontainers.SortedKeyList:
        """
        Return a sorted list of the regions that cover at least one byte.

        :param lst:       A list of regions.
        :return:          A sorted list of regions.
        """

        return sortedcontainers.SortedKeyList([r for r in lst if not r.is_empty], key=lambda x: x.start)
