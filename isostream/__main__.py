import argparse
import logging
import sys

from .coreiso import read_header
from .errors import IsoStreamError
from .ignition import IGNITION_NAME, extract
from .injector import DEFAULT_CHUNK_SIZE, patch_image

log = logging.getLogger(name="isostream")


def show_ignition(path):
    """
    Return the Ignition config currently embedded in the image at `path`, or None if the embed area is empty.
    """
    with open(path, "rb") as f:
        header = read_header(f)
        f.seek(header.start)
        area = f.read(header.span)
    if not area.strip(b"\0"):
        return None
    return extract(area).get(IGNITION_NAME)


def main(argv=None):
    ap = argparse.ArgumentParser(prog="isostream", description="Embed an Ignition config into a CoreOS live ISO.")
    ap.add_argument("-i", "--in", dest="inp", required=True, help="input ISO path")
    ap.add_argument("-o", "--out", default=None, help="output ISO path")
    source = ap.add_mutually_exclusive_group()
    source.add_argument("--ignition", default=None, help="ignition content to add to the iso")
    source.add_argument("--ignition-file", default=None, help="read the ignition content from this file")
    ap.add_argument("--show", action="store_true", help="print the ignition config embedded in the input ISO and exit")
    ap.add_argument("--chunk-size", type=int, default=DEFAULT_CHUNK_SIZE, help="copy buffer size in bytes")
    ap.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format="%(levelname)s | %(message)s")

    if args.chunk_size <= 0:
        ap.error("--chunk-size must be positive")

    try:
        if args.show:
            config = show_ignition(args.inp)
            if config is None:
                log.info("No ignition config embedded in %s", args.inp)
            else:
                sys.stdout.write(config.decode("utf-8", errors="replace"))
            return 0

        if args.out is None:
            ap.error("--out is required unless --show is given")
        if args.ignition_file is not None:
            with open(args.ignition_file, "rb") as f:
                ignition = f.read()
        elif args.ignition is not None:
            ignition = args.ignition
        else:
            ap.error("one of --ignition or --ignition-file is required")

        log.info("Writing %s with embedded ignition config to %s", args.inp, args.out)
        patch_image(args.inp, args.out, ignition, chunk_size=args.chunk_size)
    except (IsoStreamError, OSError) as e:
        log.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
