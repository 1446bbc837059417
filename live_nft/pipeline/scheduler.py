"""
Cron Runner

Runs the token update once at start and then at every fire time of
CRON_TIME. Ticks run one after another in a single loop; a tick that
fails is logged and the timer keeps going.

Fire times come from Celery's crontab so the in-process runner and the
Celery beat schedule (see ``live_nft.core.celery_app``) agree.
"""

import asyncio
import copy
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from celery import Celery
from celery.schedules import ParseException, crontab

from live_nft.core.config import Settings
from live_nft.core.exceptions import ConfigError
from live_nft.core.logging import get_logger
from live_nft.core.metrics import start_metrics_server

logger = get_logger(__name__)

# Pause before each tick
TICK_DELAY_SECONDS = 0.5

LOG_TIME_FORMAT = "%H:%M:%S %d.%m.%Y %Z"


def cron_schedule(expression: str, app=None) -> crontab:
    """
    Parse a 5-field cron expression (``minute hour day month weekday``).
    A 6-field expression with leading seconds is accepted; seconds are ignored.
    """
    fields = expression.split()
    if len(fields) == 6:
        fields = fields[1:]
    if len(fields) != 5:
        raise ConfigError(f"env var CRON_TIME is not a valid cron expression: {expression!r}", variable="CRON_TIME")

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    try:
        return crontab(
            minute=minute,
            hour=hour,
            day_of_month=day_of_month,
            month_of_year=month_of_year,
            day_of_week=day_of_week,
            app=app,
        )
    except (ValueError, ParseException) as e:
        raise ConfigError(
            f"env var CRON_TIME is not a valid cron expression: {expression!r}",
            variable="CRON_TIME"
        ) from e


def next_run_time(schedule: crontab, after: datetime) -> datetime:
    """First fire time strictly after ``after``, in ``after``'s timezone."""
    # crontab compares against its own "now"; pin it so only ``after`` matters
    pinned = copy.copy(schedule)
    pinned.nowfun = lambda: after
    start, delta, _ = pinned.remaining_delta(after)
    return start + delta


def _timezone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ConfigError(f"env var CRON_TIMEZONE is not a known timezone: {name!r}", variable="CRON_TIMEZONE") from e


def _schedule_app(timezone_name: str) -> Celery:
    """A broker-less app that only carries the timezone crontab evaluates in."""
    app = Celery("live_nft_cron", set_as_current=False)
    app.conf.timezone = timezone_name
    app.conf.enable_utc = True
    return app


async def run_cron(
    settings: Settings,
    job: Callable[[Settings], Awaitable[object]],
    max_ticks: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    clock: Optional[Callable[[ZoneInfo], datetime]] = None
):
    """
    Call ``job(settings)`` now and at every cron fire time.

    Args:
        settings: Settings with CRON_TIME set
        job: The coroutine function to run on each tick
        max_ticks: Stop after this many ticks (None runs forever)
        sleep: Awaitable sleep, replaced in tests
        clock: Returns the current time in a timezone, replaced in tests
    """
    tz = _timezone(settings.CRON_TIMEZONE)
    schedule = cron_schedule(settings.require("CRON_TIME"), app=_schedule_app(settings.CRON_TIMEZONE))
    now = clock or (lambda zone: datetime.now(zone))

    if settings.METRICS_PORT:
        start_metrics_server(settings.METRICS_PORT)
        logger.info("metrics_server_started", port=settings.METRICS_PORT)

    logger.info("cron_started", cron_time=settings.CRON_TIME, timezone=settings.CRON_TIMEZONE)

    ticks = 0
    while max_ticks is None or ticks < max_ticks:
        await sleep(TICK_DELAY_SECONDS)

        started_at = now(tz)
        logger.info(
            "cron_tick_started",
            started_at=started_at.strftime(LOG_TIME_FORMAT),
            next_run_at=next_run_time(schedule, started_at).strftime(LOG_TIME_FORMAT)
        )

        try:
            await job(settings)
        except Exception as e:
            logger.error(
                "cron_tick_failed",
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True
            )

        ticks += 1
        finished_at = now(tz)
        next_at = next_run_time(schedule, finished_at)
        logger.info("cron_next_run", next_run_at=next_at.strftime(LOG_TIME_FORMAT))

        if max_ticks is not None and ticks >= max_ticks:
            break

        wait_seconds = (next_at.astimezone(timezone.utc) - finished_at.astimezone(timezone.utc)).total_seconds()
        await sleep(max(wait_seconds, 0.0))
