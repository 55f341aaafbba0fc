"""Main entry point for the listing alert service."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Optional, Tuple

import uvicorn

from listing_alerts import __version__
from listing_alerts.api import create_app
from listing_alerts.config.environment import EnvironmentConfig
from listing_alerts.config.exceptions import ConfigurationError
from listing_alerts.config.loader import load_config, validate_config_file
from listing_alerts.config.models import AppConfig
from listing_alerts.logging import get_logger
from listing_alerts.logging.config import configure_logging
from listing_alerts.matching.engine import ProfileMatcher
from listing_alerts.notifications.service import NotificationService
from listing_alerts.notifications.whatsapp_client import WhatsAppClient
from listing_alerts.pipeline import ListingPipeline
from listing_alerts.profiles.source import YamlProfileSource
from listing_alerts.realworks.client import RealworksClient

logger = get_logger(__name__, component="cli")


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load configuration and resolve the effective log level.

    Log level priority: CLI > LOG_LEVEL environment variable > config file > INFO.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_pipeline(
    app_config: AppConfig, env_config: EnvironmentConfig, dry_run: bool = False
) -> ListingPipeline:
    """Wire the pipeline collaborators from configuration."""
    realworks_client = RealworksClient(
        api_token=env_config.realworks_api_token,
        timeout=app_config.realworks.http_request_timeout,
        user_agent=app_config.realworks.user_agent,
    )

    whatsapp_client = None
    if not dry_run:
        whatsapp_client = WhatsAppClient(
            phone_number_id=env_config.whatsapp_phone_number_id,
            access_token=env_config.whatsapp_access_token,
            api_version=env_config.whatsapp_api_version,
            timeout=app_config.whatsapp.http_request_timeout,
        )

    notification_service = NotificationService(
        whatsapp_client=whatsapp_client,
        whatsapp_config=app_config.whatsapp,
        dry_run=dry_run,
    )

    return ListingPipeline(
        profile_source=YamlProfileSource(app_config.profiles.path),
        matcher=ProfileMatcher(app_config.matching),
        notification_service=notification_service,
        realworks_client=realworks_client,
    )


def process_listing_file(pipeline: ListingPipeline, listing_file: Path) -> int:
    """Process one raw listing JSON document and return the exit code."""
    try:
        with open(listing_file, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as e:
        print(f"Cannot read listing file {listing_file}: {e}", file=sys.stderr)
        return 1

    result = pipeline.process_listing(raw)

    logger.info(
        f"Listing processed: {result.profiles_evaluated} profiles evaluated, "
        f"{result.total_matched} matched, "
        f"{result.total_notified} notified, "
        f"{result.total_skipped} skipped, "
        f"{result.total_failed} failed",
        extra={
            "event": "service.listing_file.completed",
            "listing_file": str(listing_file),
            "duration_seconds": result.total_duration_seconds,
            "had_errors": result.had_errors,
        },
    )
    for match in result.matches:
        print(f"{match.profile.id}\t{match.profile.name or ''}\t{match.score}")

    return 1 if result.had_errors else 0


def main(argv=None) -> int:
    """
    Main entry point for the listing alert service.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    start_time = time.time()
    parser = argparse.ArgumentParser(
        description="Listing Alerts - match new listings to buyer profiles and notify them via WhatsApp"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--listing-file",
        type=Path,
        default=None,
        help="Process one raw listing JSON file and exit (useful for testing)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Match and log, but do not send WhatsApp messages",
    )
    parser.add_argument(
        "--validate-config",
        type=Path,
        default=None,
        metavar="PATH",
        help="Validate a configuration file and exit",
    )

    args = parser.parse_args(argv)

    if args.validate_config:
        return 0 if validate_config_file(args.validate_config) else 1

    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        log_format = app_config.logging.format if app_config.logging else "key-value"
        configure_logging(
            level=env_config.log_level, format_type=log_format, environment=env_config.environment
        )

        dry_run = args.dry_run or app_config.dry_run

        logger.info(
            "Listing Alerts starting",
            extra={
                "event": "service.starting",
                "version": __version__,
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "dry_run": dry_run,
                "match_threshold": app_config.matching.threshold,
                "profiles_path": app_config.profiles.path,
                "message_type": app_config.whatsapp.message_type,
            },
        )

        pipeline = build_pipeline(app_config, env_config, dry_run=dry_run)

        if args.listing_file:
            return process_listing_file(pipeline, args.listing_file)

        app = create_app(pipeline, verify_token=env_config.verify_token)
        uvicorn.run(app, host="0.0.0.0", port=env_config.port, log_config=None)

        logger.info(
            "Listing Alerts stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )
        return 0

    except ConfigurationError as e:
        # Configuration errors are already formatted nicely
        print(f"Configuration Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nShutdown requested by user", file=sys.stderr)
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        logger.critical(
            "Fatal error",
            extra={
                "event": "service.startup.failed",
                "error_type": type(e).__name__,
                "error": str(e),
            },
            exc_info=True,
        )
        return 1


if __name__ == "__main__":
    sys.exit(main())
