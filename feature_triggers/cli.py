"""Command-line entry point.

Usage::

    featureservice2trigger -i CLIENT_ID -s CLIENT_SECRET \\
        -u https://services.arcgis.com/.../FeatureServer/0 \\
        -t parks -t "park-{{OBJECTID}}" \\
        --notificationTemplate "Welcome to {{NAME}}"

Exit status is 0 whenever the run drains, even if individual triggers
failed; 1 on a usage error or any fatal condition.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import NoReturn

from feature_triggers import __version__
from feature_triggers.core.config import ConfigValidationError, ImportConfig
from feature_triggers.core.constants import (
    DEFAULT_BUFFER_M,
    DEFAULT_CONCURRENCY,
    DEFAULT_DIRECTION,
    TRACKING_PROFILES,
)
from feature_triggers.core.exceptions import PipelineError
from feature_triggers.orchestrators.import_pipeline import run_import

logger = logging.getLogger("feature_triggers.cli")

EXIT_OK = 0
EXIT_FATAL = 1

_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class _UsageParser(argparse.ArgumentParser):
    """``ArgumentParser`` that exits with status 1 on usage errors."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(EXIT_FATAL, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    p = _UsageParser(
        prog="featureservice2trigger",
        description="Create a Geotrigger for every feature in an ArcGIS Feature Service layer.",
    )
    p.add_argument(
        "-i",
        "--clientId",
        dest="client_id",
        help="application client id (default: $GEOTRIGGER_CLIENT_ID)",
    )
    p.add_argument(
        "-s",
        "--clientSecret",
        dest="client_secret",
        help="application client secret (default: $GEOTRIGGER_CLIENT_SECRET)",
    )
    p.add_argument(
        "-u",
        "--serviceUrl",
        dest="service_url",
        required=True,
        help="URL of the Feature Layer to import",
    )
    p.add_argument(
        "-t",
        "--tag",
        dest="tags",
        action="append",
        required=True,
        help="tag template applied to each trigger; repeat for several tags",
    )
    p.add_argument(
        "-b",
        "--buffer",
        type=float,
        default=DEFAULT_BUFFER_M,
        help="radius in metres around point features (default: %(default)s)",
    )
    p.add_argument(
        "-d",
        "--direction",
        default=DEFAULT_DIRECTION,
        help="trigger direction (default: %(default)s)",
    )
    p.add_argument(
        "--authenticate",
        action="store_true",
        help="request a token to read a private Feature Service",
    )
    p.add_argument(
        "-c",
        "--concurrency",
        type=int,
        default=DEFAULT_CONCURRENCY,
        help="maximum trigger-create requests in flight (default: %(default)s)",
    )
    p.add_argument(
        "--callbackUrl",
        dest="callback_url",
        help="URL that receives a POST when a trigger fires",
    )
    p.add_argument(
        "--notificationTemplate",
        dest="notification_template",
        help="Mustache template for the push notification; feature attributes are the context",
    )
    p.add_argument(
        "--trackingProfile",
        dest="tracking_profile",
        help=f"tracking profile set when a trigger fires ({', '.join(TRACKING_PROFILES)})",
    )
    p.add_argument(
        "--useFeatureIds",
        dest="use_feature_ids",
        action="store_true",
        help="use feature ids as trigger ids",
    )
    p.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=_LOG_FORMAT,
        stream=sys.stdout,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = ImportConfig.from_args(args)
    except (ConfigValidationError, ValueError) as exc:
        parser.print_usage(sys.stderr)
        print(f"{parser.prog}: error: {exc}", file=sys.stderr)
        return EXIT_FATAL

    configure_logging(args.verbose)

    try:
        asyncio.run(run_import(config))
    except PipelineError as exc:
        logger.error("Import aborted | %s | detail=%s", exc, exc.to_error_dict())
        return EXIT_FATAL
    except KeyboardInterrupt:
        logger.error("Import interrupted")
        return EXIT_FATAL
    except Exception:
        logger.exception("Import failed unexpectedly")
        return EXIT_FATAL
    return EXIT_OK
