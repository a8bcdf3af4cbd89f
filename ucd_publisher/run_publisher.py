# ucd_publisher/run_publisher.py
"""Run a publisher job: publish component versions and optionally deploy them."""

import argparse
import logging
import os
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import ValidationError

from ucd_publisher.config.settings import PublisherSettings
from ucd_publisher.config.sites import load_global_config
from ucd_publisher.container import build_services
from ucd_publisher.core.errors import ConfigurationError, PublisherError
from ucd_publisher.core.schemas import PublisherJob

logger = logging.getLogger(__name__)

cancel_event = threading.Event()


def signal_handler(sig, frame):
    """Ctrl+C / SIGTERM: stop before the next component or deployment step and abort."""
    logger.info("🛑 Cancelling publisher...")
    cancel_event.set()


def load_job(path: str) -> PublisherJob:
    try:
        raw = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read job file {path}: {e}") from e

    try:
        return PublisherJob.model_validate(raw)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid job file {path}: {e}") from e


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Publish component versions and deploy them.")
    parser.add_argument("--job", help="YAML job file")
    parser.add_argument("--site", help="Site profile name (defaults to the job's site, then the first profile)")
    parser.add_argument("--build-name", default=os.environ.get("BUILD_NAME", ""))
    parser.add_argument("--build-url", default=os.environ.get("BUILD_URL", ""))
    parser.add_argument(
        "--verify-connection",
        action="store_true",
        help="Only check that the site is reachable with the configured credentials",
    )
    return parser


def run(args: argparse.Namespace, settings: Optional[PublisherSettings] = None) -> None:
    config = load_global_config(settings)

    if args.verify_connection:
        site = config.get_site(args.site)
        logger.info(f"Verifying connection to {site.display_name} ({site.url})")
        site.verify_connection()
        logger.info("✅ Successful connection")
        return

    if not args.job:
        raise ConfigurationError("A job file is required (--job)")

    job = load_job(args.job)
    site = config.get_site(args.site or job.site)

    logger.info("=" * 80)
    logger.info("🚀 UCD PUBLISHER")
    logger.info("=" * 80)
    logger.info(f"Site: {site.display_name} ({site.url})")
    logger.info(f"Components: {len(job.components)}")
    logger.info(f"Deploy: {'yes' if job.deploy else 'no'}")
    logger.info(f"Poll Interval: {config.poll.interval_seconds}s")
    logger.info("=" * 80)

    services = build_services(site, os.environ, config.poll, cancel_event)
    services.publisher.run(job, args.build_name, args.build_url)


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    args = build_parser().parse_args(argv)

    try:
        run(args)
    except PublisherError as e:
        logger.error(f"❌ {type(e).__name__}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
