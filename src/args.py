"""Argument parsing functionality for vsixfetch."""

import argparse
from constants import Constants


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than 0, got {value}")
    return number


def _add_download_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help=f"Extension manifest (YAML or JSON), default {Constants.DEFAULT_MANIFEST_FILE}",
                        action="store",
                        type=str,
                        default=Constants.DEFAULT_MANIFEST_FILE)
    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help=f"Output directory, default {Constants.DEFAULT_OUTPUT_DIR}",
                        action="store",
                        type=str,
                        default=Constants.DEFAULT_OUTPUT_DIR)
    parser.add_argument("-j", "--concurrency",
                        dest="CONCURRENCY",
                        help="Max parallel downloads",
                        action="store",
                        type=_positive_int,
                        default=Constants.DEFAULT_CONCURRENCY)
    parser.add_argument("--dry-run",
                        dest="DRY_RUN",
                        help="Print the download plan without downloading",
                        action="store_true")
    parser.add_argument("-v", "--verbose",
                        dest="VERBOSE",
                        help="Verbose logging (same as --loglevel DEBUG)",
                        action="store_true")
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default=None)
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    resolution = parser.add_argument_group("resolution")
    resolution.add_argument("--order",
                            dest="ORDER",
                            help="How to pick the newest version: trust gallery order (server) "
                                 "or sort by semantic version (semver)",
                            action="store",
                            type=str.lower,
                            choices=Constants.ORDERINGS,
                            default="server")
    resolution.add_argument("--strict-platforms",
                            dest="STRICT_PLATFORMS",
                            help="Do not fall back to a universal build when no build exists "
                                 "for the requested platforms",
                            action="store_true")
    resolution.add_argument("--require-listed",
                            dest="REQUIRE_LISTED",
                            help="Skip pinned versions the gallery does not list instead of "
                                 "attempting a direct download",
                            action="store_true")

    network = parser.add_argument_group("network")
    network.add_argument("--gallery-url",
                         dest="GALLERY_URL",
                         help="Override the gallery base URL",
                         action="store",
                         type=str)
    network.add_argument("--timeout",
                         dest="TIMEOUT",
                         help=f"Request timeout in seconds (default {Constants.REQUEST_TIMEOUT})",
                         action="store",
                         type=_positive_float)
    network.add_argument("--retries",
                         dest="RETRIES",
                         help=f"Query attempts per extension (default {Constants.HTTP_RETRY_MAX})",
                         action="store",
                         type=_positive_int)
    network.add_argument("--no-retry-client-errors",
                         dest="NO_RETRY_CLIENT_ERRORS",
                         help="Fail queries immediately on 4xx responses (except 408/429)",
                         action="store_true")


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="vsixfetch",
        description="vsixfetch - Download VS Code extensions from the marketplace",
        add_help=True,
    )
    subparsers = parser.add_subparsers(dest="action", metavar="command")
    subparsers.required = True

    download = subparsers.add_parser(
        "download",
        help="Download VSIX extensions listed in a manifest",
        description="Resolve the manifest against the gallery and download the artifacts",
    )
    _add_download_args(download)

    return parser.parse_args(argv)
