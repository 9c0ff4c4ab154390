"""
isostream patches spans of large binary images while streaming them, without loading the whole image in memory.

The primary interface is the OverlayStream class, which reads as a base stream with some of its spans replaced by the
content of Regions. On top of it, embed_ignition embeds an Ignition config into the embed area of a CoreOS live ISO.
"""

__version__ = "0.1.0"

from .coreiso import COREISO_MAGIC, HEADER_OFFSET, HEADER_SIZE, CoreISOHeader, locate, parse_header, read_header
from .errors import (
    ConstructionError,
    EmbedAreaTooSmallError,
    InvalidHeaderError,
    IsoStreamError,
    MagicMismatchError,
    OverlappingRegionsError,
    PayloadError,
    RegionContentExhaustedError,
    RegionError,
    SeekError,
    SizeUnavailableError,
    SourceError,
)
from .injector import copy_stream, embed_ignition, patch_image
from .overlay_stream import OverlayStream
from .region import Region
from .regions import Regions

__all__ = [
    "COREISO_MAGIC",
    "HEADER_OFFSET",
    "HEADER_SIZE",
    "CoreISOHeader",
    "locate",
    "parse_header",
    "read_header",
    "ConstructionError",
    "EmbedAreaTooSmallError",
    "InvalidHeaderError",
    "IsoStreamError",
    "MagicMismatchError",
    "OverlappingRegionsError",
    "PayloadError",
    "RegionContentExhaustedError",
    "RegionError",
    "SeekError",
    "SizeUnavailableError",
    "SourceError",
    "copy_stream",
    "embed_ignition",
    "patch_image",
    "OverlayStream",
    "Region",
    "Regions",
]
