"""
NS Integrity CLI entry point.

This module provides the command-line interface for the audit.
"""

from __future__ import annotations

import argparse
import logging
import sys

from nsintegrity import __version__
from nsintegrity.cli_commands import cmd_audit
from nsintegrity.config import parse_bool
from nsintegrity.reporting import OUTPUT_FORMATS


def _bool_flag(value: str) -> bool:
    """argparse type for optional-value boolean flags."""
    try:
        return parse_bool(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive, got {value}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="nsintegrity",
        description=(
            "NS Integrity - check that the nameserver delegations of every "
            "Cloud DNS managed zone in an organization match the public DNS"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"nsintegrity {__version__}",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (can be repeated)",
    )

    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Only log errors",
    )

    parser.add_argument(
        "--organization",
        help="Organization to check, by display name, id or resource name "
        "(default: the only accessible organization)",
    )
    parser.add_argument(
        "--use-default-credentials",
        nargs="?",
        const=True,
        type=_bool_flag,
        metavar="BOOL",
        help="Authenticate with Application Default Credentials instead of "
        "the gcloud SDK configuration",
    )
    parser.add_argument(
        "--service-account-file",
        metavar="PATH",
        help="Authenticate with a service account key file",
    )
    parser.add_argument(
        "--include-private-zones",
        nargs="?",
        const=True,
        type=_bool_flag,
        metavar="BOOL",
        help="Audit private managed zones as well",
    )
    parser.add_argument(
        "--concurrency",
        type=_positive_int,
        metavar="N",
        help="Number of zones audited in parallel (default: 8)",
    )
    parser.add_argument(
        "--resolver",
        metavar="IP[,IP...]",
        help="Upstream resolvers for live NS lookups (default: 8.8.8.8)",
    )
    parser.add_argument(
        "--resolver-timeout",
        type=_positive_float,
        metavar="SECONDS",
        help="Seconds allowed per NS lookup (default: 10)",
    )
    parser.add_argument(
        "--deadline",
        type=_positive_float,
        metavar="SECONDS",
        help="Abort the audit after this many seconds",
    )
    parser.add_argument(
        "--output",
        choices=list(OUTPUT_FORMATS),
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="JSON or YAML configuration file",
    )

    return parser


def configure_logging(verbose: int = 0, quiet: bool = False) -> None:
    """Configure logging based on verbosity."""
    if quiet:
        level = logging.ERROR
    elif verbose > 1:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    configure_logging(args.verbose, args.quiet)

    return cmd_audit(args)


if __name__ == "__main__":
    sys.exit(main())
