"""Command-line interface for fst2pprof."""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import load_signal_config, merge_signal_names, parse_signal_list
from .errors import Fst2PprofError
from .pipeline import list_hierarchy, run_extraction

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fst2pprof",
        description="Extract signals from an FST waveform into a pprof profile",
    )
    parser.add_argument("-f", "--fst", required=True, help="File path to the FST (or VCD) waveform")
    parser.add_argument("-c", "--config", help='JSON or YAML file of the form {"signals": [...]}')
    parser.add_argument("-s", "--signals", help="Comma-separated signal names to extract")
    parser.add_argument("-p", "--properties", help="File path to the properties file (currently unused)")
    parser.add_argument("-o", "--output", help="Output path (default: <fst-stem>.pprof.gz)")
    parser.add_argument("--strict", action="store_true",
                        help="Fail if a requested signal is not found in the hierarchy")
    parser.add_argument("--list-hierarchy", action="store_true",
                        help="Print every hierarchy entry and exit without writing a profile")
    parser.add_argument("--threads", action="store_true", help="Let the reader use multiple threads")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(verbose: bool = False, quiet: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr, force=True)


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose, args.quiet)

    try:
        if args.list_hierarchy:
            for line in list_hierarchy(args.fst):
                print(line)
            return 0

        if args.config is None and args.signals is None:
            parser.error("one of --config or --signals is required")

        config_signals = load_signal_config(args.config) if args.config else []
        requested = merge_signal_names(config_signals, parse_signal_list(args.signals))
        if args.properties:
            logger.debug("Ignoring properties file %s", args.properties)

        result = run_extraction(
            args.fst,
            requested,
            output_path=args.output,
            strict=args.strict,
            multi_threaded=args.threads,
        )
    except Fst2PprofError as exc:
        logger.error("%s", exc)
        return 1

    logger.info(
        "%d sample(s) from %d signal(s) written to %s",
        result.sample_count, len(result.signals), result.output_path,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
