# src/paketboot/cli.py

import argparse
import sys
from pathlib import Path
from typing import List, Optional

import requests

from paketboot import log_utils
from paketboot.config import BootstrapOptions, load_config, options_from_config
from paketboot.constants import PRERELEASE_ARGUMENT
from paketboot.download.orchestrator import Bootstrapper, build_strategy_chain
from paketboot.exceptions import ConfigurationError, PaketBootError

DESCRIPTION = "Downloads the latest version of paket.exe."

EPILOG = """\
The positional argument is either 'prerelease' (allow prerelease versions when
resolving the latest version) or an explicit version to download.

Settings can also be placed in paket.bootstrapper.yaml in the working directory
or in the user configuration directory; command-line options take precedence."""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the paketboot command."""
    parser = argparse.ArgumentParser(
        prog="paketboot",
        description=DESCRIPTION,
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "version",
        nargs="?",
        metavar="prerelease|<version>",
        help="'prerelease' to include prereleases, or a version to download",
    )
    parser.add_argument(
        "--prefer-nuget",
        action="store_true",
        default=None,
        help="prefer nuget as download source instead of github",
    )
    parser.add_argument(
        "--force-nuget",
        action="store_true",
        default=None,
        help="only use nuget as source",
    )
    parser.add_argument(
        "--nuget-source",
        metavar="NUGET_SOURCE",
        help="uses NUGET_SOURCE to download latest paket; can also be a folder path",
    )
    parser.add_argument(
        "--max-file-age",
        type=int,
        metavar="MINUTES",
        help="if paket.exe already exists and is not older than MINUTES, skip all checks",
    )
    parser.add_argument(
        "--self",
        dest="self_update",
        action="store_true",
        help="downloads and updates the bootstrapper itself",
    )
    parser.add_argument(
        "-f",
        dest="no_cache",
        action="store_true",
        help="don't use local cache; always downloads",
    )
    parser.add_argument(
        "-s",
        dest="silent",
        action="count",
        default=0,
        help="silent mode; errors only. Use twice for no output",
    )
    parser.add_argument(
        "-v",
        dest="verbose",
        action="store_true",
        help="verbose; show more information on console",
    )
    parser.add_argument(
        "--target",
        help="where to place paket.exe (default: .paket/paket.exe)",
    )
    parser.add_argument(
        "--config",
        help="configuration file to read instead of the default locations",
    )
    parser.add_argument(
        "--log-dir",
        help="also write a rotating log file into this directory",
    )
    return parser


def apply_arguments(options: BootstrapOptions, args: argparse.Namespace) -> None:
    """Overlay parsed command-line arguments onto `options`."""
    if args.version:
        if args.version.lower() == PRERELEASE_ARGUMENT:
            options.ignore_prerelease = False
        else:
            options.download_version = args.version

    if args.prefer_nuget:
        options.prefer_nuget = True
    if args.force_nuget:
        options.force_nuget = True
    if args.nuget_source:
        options.nuget_source = args.nuget_source
    if args.max_file_age is not None:
        options.max_file_age = args.max_file_age
    if args.self_update:
        options.self_update = True
    if args.no_cache:
        options.use_cache = False
    if args.target:
        options.target = args.target
        options.bootstrapper_path = str(
            Path(args.target).with_name(Path(options.bootstrapper_path).name)
        )
    if args.log_dir:
        options.log_dir = args.log_dir

    if args.silent >= 2:
        options.log_level = "SILENT"
    elif args.silent == 1:
        options.log_level = "ERROR"
    elif args.verbose:
        options.log_level = "DEBUG"


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for the paketboot command.

    Returns:
        int: Process exit code; 0 on success, 1 on failure.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.max_file_age is not None and args.max_file_age < 0:
        parser.error("--max-file-age must not be negative")

    try:
        options = options_from_config(load_config(args.config))
    except ConfigurationError as e:
        log_utils.logger.error(f"Invalid configuration: {e}")
        return 1

    apply_arguments(options, args)
    log_utils.set_log_level(options.log_level)
    if options.log_dir:
        log_utils.add_file_logging(Path(options.log_dir), options.log_level)

    try:
        head = build_strategy_chain(options)
        Bootstrapper(options, head).run()
    except (PaketBootError, requests.RequestException, OSError) as e:
        log_utils.logger.error(f"Bootstrapping failed: {e}")
        log_utils.logger.debug("Failure details", exc_info=True)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
