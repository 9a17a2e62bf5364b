"""vsixfetch - resolve a manifest of VS Code extensions and download them.

    Returns:
        int: Exit code
"""
import asyncio
import logging
import sys

from constants import ExitCodes
from common.errors import FetchError, ManifestError, NotFoundError, QueryError
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import apply_cli_overrides, build_client, build_policy
from fetch import fetch_all
from manifest import load_manifest
from resolution import resolve_targets

logger = logging.getLogger(__name__)


def print_plan(targets) -> None:
    """Print the download plan to stdout."""
    print()
    print(f"Download plan ({len(targets)} file(s)):")
    for target in targets:
        print(f"  {target.filename}")
    print()


def run_download(args) -> int:
    """Run the download command; errors propagate to main()."""
    requests = load_manifest(args.CONFIG)

    targets = resolve_targets(build_client(args), requests, build_policy(args))
    if not targets:
        logger.info("no download targets resolved")
        return ExitCodes.SUCCESS.value

    print_plan(targets)

    if args.DRY_RUN:
        logger.info("dry run, skipping downloads")
        return ExitCodes.SUCCESS.value

    asyncio.run(fetch_all(targets, args.OUTPUT, args.CONCURRENCY))
    logger.info("downloaded %d file(s) into %s", len(targets), args.OUTPUT)
    return ExitCodes.SUCCESS.value


def main(argv=None) -> int:
    """Main function of the program."""
    args = parse_args(argv)
    level = "DEBUG" if args.VERBOSE else args.LOG_LEVEL
    configure_logging(level, args.LOG_FILE)
    apply_cli_overrides(args)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action),
        )

    try:
        return run_download(args)
    except ManifestError as exc:
        logger.error("%s", exc)
        return ExitCodes.FILE_ERROR.value
    except QueryError as exc:
        logger.error("%s", exc)
        return ExitCodes.CONNECTION_ERROR.value
    except NotFoundError as exc:
        logger.error("%s", exc)
        return ExitCodes.RESOLUTION_ERROR.value
    except FetchError as exc:
        logger.error("%s", exc)
        return ExitCodes.DOWNLOAD_ERROR.value
    except KeyboardInterrupt:
        logger.error("interrupted")
        return ExitCodes.INTERRUPTED.value


def cli() -> None:
    """Console-script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
