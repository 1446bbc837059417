"""
Live NFT Updater - Command Line Entry Point

    live-nft --test-image
    live-nft --create-collection-and-token
    live-nft --update
    live-nft --cron

Errors from any mode are logged and turn into exit status 1.
"""

import sys
import uuid
import asyncio
import argparse
from typing import List, Optional

from pydantic import ValidationError

from live_nft.core.config import get_settings
from live_nft.core.exceptions import LiveNftError
from live_nft.core.logging import LogContext, get_logger, setup_logging
from live_nft.core.metrics import record_run, set_app_info
from live_nft.pipeline.tasks import (
    create_collection_and_token,
    generate_test_image,
    run_cron_job,
    update_token,
)

logger = get_logger(__name__)

# Checked in this order when several flags are given
MODES = {
    "test_image": generate_test_image,
    "create_collection_and_token": create_collection_and_token,
    "update": update_token,
    "cron": run_cron_job,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="live-nft",
        description="Render live data onto an NFT image and write it to the token."
    )
    parser.add_argument(
        "--test-image", "--testImage",
        dest="test_image",
        action="store_true",
        help="Test image generator. Just grabs the data from the API and generates image, that's all."
    )
    parser.add_argument(
        "--create-collection-and-token", "--createCollectionAndToken",
        dest="create_collection_and_token",
        action="store_true",
        help="Create new collection and mint a token and print out IDs."
    )
    parser.add_argument(
        "--update",
        action="store_true",
        help="Update existing NFT. Requires COLLECTION_ID and TOKEN_ID env vars be set."
    )
    parser.add_argument(
        "--cron",
        action="store_true",
        help="Starts task runner which will periodically update existing NFT. "
             "Requires COLLECTION_ID, TOKEN_ID and CRON_TIME env vars be set."
    )
    return parser


def select_mode(args: argparse.Namespace) -> Optional[str]:
    for mode in MODES:
        if getattr(args, mode):
            return mode
    return None


def run(argv: Optional[List[str]] = None) -> int:
    """Parse arguments, run the selected mode and return the exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    mode = select_mode(args)
    if mode is None:
        parser.print_help()
        return 0

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error("settings_invalid", error=str(e))
        return 1

    setup_logging(log_level=settings.LOG_LEVEL, json_format=settings.LOG_FORMAT_JSON)
    set_app_info(version=settings.APP_VERSION, environment=settings.ENVIRONMENT)

    with LogContext(run_id=uuid.uuid4().hex[:12]):
        logger.info("run_started", mode=mode)
        try:
            asyncio.run(MODES[mode](settings))
        except KeyboardInterrupt:
            logger.info("run_interrupted", mode=mode)
            return 0
        except LiveNftError as e:
            record_run(mode, "failed")
            logger.error("run_failed", mode=mode, **e.to_dict())
            return 1
        except Exception as e:
            record_run(mode, "failed")
            logger.error(
                "run_failed",
                mode=mode,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True
            )
            return 1

        record_run(mode, "success")
        logger.info("run_completed", mode=mode)
    return 0


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
