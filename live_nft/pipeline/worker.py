"""
Celery task wrapping the token update for beat-driven deployments.
"""

import asyncio
import uuid

from live_nft.core.celery_app import celery_app
from live_nft.core.config import get_settings
from live_nft.core.logging import LogContext, get_logger, setup_logging
from live_nft.core.metrics import record_run
from live_nft.pipeline.tasks import update_token

logger = get_logger(__name__)


@celery_app.task(name="live_nft.pipeline.worker.update_token_task", max_retries=0)
def update_token_task():
    settings = get_settings()
    setup_logging(log_level=settings.LOG_LEVEL, json_format=settings.LOG_FORMAT_JSON)

    with LogContext(run_id=uuid.uuid4().hex[:12]):
        try:
            result = asyncio.run(update_token(settings))
        except Exception:
            record_run("worker", "failed")
            raise
        record_run("worker", "success")
        return {"status": "completed", "tx_hash": result.hash}
