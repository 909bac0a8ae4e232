"""
Entry point for the legacy MM processor.

Usage:
    # Run the score worker with config/config.yaml plus environment overrides
    python -m mm_processor

    # Use a custom config file and console logs
    python -m mm_processor --config /etc/mm/config.yaml --log-level DEBUG --no-json-logs

    # Validate configuration and exit
    python -m mm_processor --dry-run-validate

Environment Variables:
    SUBMISSION_API_URL, SUBMISSION_TIMEOUT, CHALLENGE_INFO_API,
    KAFKA_URL, KAFKA_GROUP_ID, KAFKA_CLIENT_CERT, KAFKA_CLIENT_CERT_KEY,
    KAFKA_NEW_SUBMISSION_TOPIC, KAFKA_UPDATE_SUBMISSION_TOPIC,
    KAFKA_NEW_SUBMISSION_ORIGINATOR, CHALLENGE_SUBTRACK, PAYLOAD_TYPES,
    AUTH0_URL, AUTH0_AUDIENCE, AUTH0_CLIENT_ID, AUTH0_CLIENT_SECRET,
    AUTH0_PROXY_SERVER_URL, TOKEN_CACHE_TIME, LEGACY_DB_URL, METRICS_PORT,
    LOG_LEVEL, LOG_JSON, LOG_DIR
"""

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from config.config import load_config
from core.logging import parse_log_level, setup_logging
from mm_processor import __version__
from mm_processor.common.metrics import start_metrics_server
from mm_processor.workers.score_worker import WORKER_NAME, run_score_worker

# Project root directory (where .env file is located)
# __main__.py is at src/mm_processor/__main__.py, so root is 3 levels up
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Placeholder logger until setup_logging() is called in main()
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mm_processor",
        description="Route marathon-match review scores from Kafka into the legacy store",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to config YAML (default: src/config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: LOG_LEVEL from config)",
    )
    parser.add_argument(
        "--json-logs",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Emit JSON log lines (default: LOG_JSON from config)",
    )
    parser.add_argument(
        "--dry-run-validate",
        action="store_true",
        help="Validate configuration and exit",
    )
    return parser.parse_args(argv)


def setup_signal_handlers(loop: asyncio.AbstractEventLoop, shutdown_event: asyncio.Event) -> None:
    """Set up SIGINT/SIGTERM handlers for graceful shutdown.

    First signal: sets the shutdown event so the current message finishes.
    Second signal: cancels all tasks."""

    def handle_signal(sig):
        logger.info("Received signal, initiating graceful shutdown", extra={"signal": sig.name})
        if not shutdown_event.is_set():
            shutdown_event.set()
        else:
            logger.warning("Received second signal, forcing immediate shutdown...")
            for task in asyncio.all_tasks(loop):
                task.cancel()

    if sys.platform == "win32":
        logger.debug("Signal handlers not supported on Windows, using KeyboardInterrupt")
        return

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: handle_signal(s))


def main(argv: Optional[List[str]] = None) -> int:
    global logger
    load_dotenv(PROJECT_ROOT / ".env")
    args = parse_args(argv)

    try:
        config = load_config(config_path=args.config, validate=True)
    except (FileNotFoundError, ValueError) as e:
        setup_logging(name="mm_processor", level=logging.INFO, json_format=False)
        logging.getLogger(__name__).error("Configuration error: %s", e)
        return 1

    level = parse_log_level(args.log_level or config.log_level)
    json_logs = config.log_json if args.json_logs is None else args.json_logs
    logger = setup_logging(
        name="mm_processor",
        level=level,
        json_format=json_logs,
        log_dir=Path(config.log_dir) if config.log_dir else None,
        stage=WORKER_NAME,
    )

    if args.dry_run_validate:
        logger.info("Configuration is valid", extra={"config_path": str(args.config or "default")})
        return 0

    logger.info("Starting legacy MM processor", extra={"version": __version__})
    start_metrics_server(config.metrics_port)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    shutdown_event = asyncio.Event()
    setup_signal_handlers(loop, shutdown_event)

    try:
        loop.run_until_complete(run_score_worker(config, shutdown_event))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
    except asyncio.CancelledError:
        logger.info("Worker cancelled, shutting down")
    except Exception:
        logger.exception("Score worker terminated with error")
        return 1
    finally:
        loop.close()

    logger.info("Legacy MM processor stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
