"""Exercise Manifest - serve a JSON manifest of CSV-backed exercises."""

import argparse
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from app import create_app
from config import Config
from logging_setup import get_logger, setup_logging


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Serve a JSON manifest of CSV-backed exercises",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config file (default: config.toml)",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help="Override listen port (default: 3000)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Override listen address",
    )
    parser.add_argument(
        "-d", "--public-dir",
        type=str,
        default=None,
        help="Directory with local CSV files and static assets",
    )
    parser.add_argument(
        "-s", "--data-source-url",
        type=str,
        default=None,
        help="Bulk CSV URL grouped by its 'exercise' column",
    )

    # Logging verbosity (mutually exclusive)
    verbosity_group = parser.add_mutually_exclusive_group()
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output (DEBUG level)",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only warnings and errors)",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Write logs to file (always DEBUG level)",
    )

    return parser.parse_args()


def describe_source(config: Config) -> str:
    if config.bulk_enabled:
        return f"bulk CSV {config.data_source_url}"
    if config.folder_enabled:
        return f"Drive folder {config.gdrive_folder_id}"
    return f"local files in {config.public_dir}"


def main() -> int:
    args = parse_args()

    # .env.local overrides .env; neither overrides the real environment
    load_dotenv(".env.local")
    load_dotenv()

    verbosity = 1 if args.verbose else (-1 if args.quiet else 0)
    setup_logging(verbosity=verbosity, log_file=args.log_file)
    logger = get_logger()

    logger.debug("Loading configuration...")
    config = Config.load(
        config_path=args.config,
        port_override=args.port,
        host_override=args.host,
        public_dir_override=args.public_dir,
        data_source_url_override=args.data_source_url,
    )

    logger.info("Exercise source: %s", describe_source(config))
    logger.info("Public directory: %s", config.public_dir)
    logger.info("Cache TTL: %d ms", config.cache_ttl_ms)
    if config.folder_enabled and not config.gdrive_api_key:
        logger.warning("GDRIVE_FOLDER_ID is set but GDRIVE_API_KEY is missing")

    app = create_app(config)
    logger.info("Server listening on http://localhost:%d", config.port)
    uvicorn.run(app, host=config.host, port=config.port, log_level="warning")
    return 0


if __name__ == "__main__":
    sys.exit(main())
