"""
Server-side status poller for in-flight video jobs.

Runs an APScheduler interval job that refreshes every PROCESSING record.
The job pauses itself once nothing is in flight; new submissions call
wake() to resume it. Stopping the scheduler is the only cancellation.
"""

from contextlib import AbstractAsyncContextManager
from datetime import datetime, timezone
from typing import Callable, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.ext.asyncio import AsyncSession

from studio.config import settings
from studio.database import get_session_context
from studio.services.video_generation_service import (
    VideoGenerationService,
    video_generation_service,
)
from studio.utils.logging import get_logger

logger = get_logger(__name__)

JOB_ID = "video-status-poll"

SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class VideoStatusPoller:
    def __init__(
        self,
        service: Optional[VideoGenerationService] = None,
        session_factory: Optional[SessionFactory] = None,
        interval_seconds: Optional[int] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.service = service or video_generation_service
        self.session_factory = session_factory or get_session_context
        self.interval_seconds = interval_seconds or settings.video_poll_interval_seconds
        self.scheduler = scheduler or AsyncIOScheduler()
        self.paused = False
        self._woken = False

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def tick(self) -> int:
        """Refresh every in-flight record once; returns how many remain."""
        self._woken = False
        async with self.session_factory() as session:
            remaining = await self.service.refresh_in_flight(session)

        # A submission that woke us during the refresh is not counted yet
        if remaining == 0 and not self._woken:
            self.pause()
        else:
            logger.debug("Videos still in flight", remaining=remaining)
        return remaining

    async def _run_tick(self) -> None:
        try:
            await self.tick()
        except Exception as e:
            logger.error("Video status poll tick failed", error=str(e))

    def start(self) -> None:
        """Register the interval job and start the scheduler."""
        if self.scheduler.running:
            return
        self.scheduler.add_job(
            self._run_tick,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=JOB_ID,
            name="Poll in-flight video jobs",
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(timezone.utc),
        )
        self.scheduler.start()
        self.paused = False
        logger.info("Video status poller started", interval=self.interval_seconds)

    def pause(self) -> None:
        if self.scheduler.running and not self.paused:
            self.scheduler.pause_job(JOB_ID)
            self.paused = True
            logger.info("Video status poller idle")

    def wake(self) -> None:
        """Resume polling after a new submission; no-op when not started."""
        self._woken = True
        if self.scheduler.running and self.paused:
            self.scheduler.resume_job(JOB_ID)
            self.paused = False
            logger.info("Video status poller resumed")

    def stop(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Video status poller stopped")


# Global poller instance
_poller: Optional[VideoStatusPoller] = None


def get_video_poller() -> VideoStatusPoller:
    """Get the global poller instance."""
    global _poller
    if _poller is None:
        _poller = VideoStatusPoller()
    return _poller
