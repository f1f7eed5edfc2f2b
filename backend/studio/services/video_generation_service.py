"""
Image-to-video job orchestration.

Drives each VideoGeneration record through
PENDING -> PROCESSING -> COMPLETED | FAILED. The PENDING row is committed
before the provider is called so a crash mid-submit still leaves a trace.
"""

from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from studio.config import settings
from studio.crud.generation import image_generation_crud, video_generation_crud
from studio.crud.shot import shot_crud
from studio.exceptions import (
    NotFoundError,
    ProviderPollError,
    ProviderSubmitError,
    ValidationError,
)
from studio.models import MotionType, Shot, VideoGeneration, VideoProvider, VideoStatus
from studio.models.base import utc_now
from studio.services.providers.base import (
    VideoJobRequest,
    VideoJobStatus,
    VideoProviderClient,
)
from studio.services.providers.registry import get_video_provider
from studio.services.storage_service import StorageService, project_key, storage_service
from studio.utils.logging import get_logger

logger = get_logger(__name__)

ProviderLookup = Callable[[VideoProvider], VideoProviderClient]


class VideoGenerationService:
    def __init__(
        self,
        providers: Optional[ProviderLookup] = None,
        storage: Optional[StorageService] = None,
    ):
        self._providers = providers or get_video_provider
        self.storage = storage or storage_service

    def provider(self, provider: VideoProvider) -> VideoProviderClient:
        return self._providers(VideoProvider(provider))

    async def submit_video_job(
        self,
        session: AsyncSession,
        shot_id: UUID,
        image_id: UUID,
        provider: VideoProvider = VideoProvider.MINIMAX,
        motion_type: MotionType = MotionType.SUBTLE,
        custom_prompt: Optional[str] = None,
    ) -> VideoGeneration:
        """
        Start an image-to-video job for a shot.

        A provider rejection is recorded on the returned record as FAILED;
        it is not raised.
        """
        shot = await shot_crud.get(session, shot_id)
        if not shot:
            raise NotFoundError("Shot", shot_id)

        image = await image_generation_crud.get_for_shot(session, image_id, shot_id)
        if not image:
            raise NotFoundError("Image", image_id)

        client = self.provider(provider)
        prompt = client.build_prompt(shot.description, motion_type, custom_prompt)

        video = await video_generation_crud.create(
            session,
            VideoGeneration(
                shot_id=shot_id,
                source_image_id=image_id,
                provider=provider,
                motion_type=motion_type,
                prompt=prompt,
                status=VideoStatus.PENDING,
            ),
        )
        log = logger.bind(video_id=str(video.id), provider=VideoProvider(provider).value)

        return await self._submit(session, video, client, image.image_url, log)

    async def _submit(
        self,
        session: AsyncSession,
        video: VideoGeneration,
        client: VideoProviderClient,
        image_url: str,
        log,
    ) -> VideoGeneration:
        request = VideoJobRequest(
            image_url=await self.storage.resolve_url(image_url),
            prompt=video.prompt,
            motion_type=video.motion_type,
            duration=settings.video_clip_duration,
        )

        try:
            task_id = await client.submit(request)
        except ProviderSubmitError as e:
            log.warning("Video submission failed", error=str(e))
            video.status = VideoStatus.FAILED
            video.error_message = str(e)
            return await video_generation_crud.save(session, video)

        video.provider_task_id = task_id
        video.status = VideoStatus.PROCESSING
        log.info("Video job processing", task_id=task_id)
        return await video_generation_crud.save(session, video)

    async def poll_status(self, task_id: str, provider: VideoProvider) -> VideoJobStatus:
        """Provider-neutral status of one job; raises ProviderPollError if unreachable."""
        return await self.provider(provider).poll(task_id)

    async def refresh_video(
        self, session: AsyncSession, video: VideoGeneration
    ) -> VideoGeneration:
        """
        Poll once and apply the result to an in-flight record.

        Terminal records and records without a task id are returned as is.
        A poll error leaves the record PROCESSING for the next tick.
        """
        if video.is_terminal or not video.provider_task_id:
            return video

        try:
            job = await self.poll_status(video.provider_task_id, video.provider)
        except ProviderPollError as e:
            logger.warning(
                "Video status poll failed, will retry",
                video_id=str(video.id),
                task_id=video.provider_task_id,
                error=str(e),
            )
            return video

        if job.status == VideoStatus.COMPLETED:
            if not job.video_url:
                logger.warning(
                    "Provider reported success without media",
                    video_id=str(video.id),
                    task_id=video.provider_task_id,
                )
                return video
            return await self.finalize_completion(session, video.id, job.video_url)

        if job.status == VideoStatus.FAILED:
            video.status = VideoStatus.FAILED
            video.error_message = job.error or "Video generation failed"
            video.completed_at = utc_now()
            logger.info("Video job failed", video_id=str(video.id), error=video.error_message)
            return await video_generation_crud.save(session, video)

        return video

    async def finalize_completion(
        self, session: AsyncSession, video_id: UUID, media_url: str
    ) -> VideoGeneration:
        """
        Re-host finished media, mark the record COMPLETED and auto-select it
        when the shot has no selected video yet.

        The status flip is conditional, so when two finalizers race only the
        first one's URL is kept and the loser's re-hosted copy is removed.
        """
        video = await video_generation_crud.get(session, video_id)
        if not video:
            raise NotFoundError("Video", video_id)
        if video.is_terminal:
            return video

        shot = await session.get(Shot, video.shot_id)
        key = project_key(shot.project_id, "videos", f"shot_{shot.shot_index}.mp4")
        durable_url = await self.storage.rehost(media_url, key, "video/mp4")

        completed = await video_generation_crud.complete_if_in_flight(
            session, video.id, durable_url, utc_now()
        )
        if not completed:
            logger.info("Video already finalized elsewhere", video_id=str(video.id))
            if durable_url != media_url:
                await self.storage.discard(durable_url)
            return await video_generation_crud.get(session, video.id)

        if await video_generation_crud.select_if_none_selected(session, video.shot_id, video.id):
            logger.info("Auto-selected completed video", video_id=str(video.id))

        logger.info("Video job completed", video_id=str(video.id), shot_id=str(video.shot_id))
        return await video_generation_crud.get(session, video.id)

    async def apply_status_update(
        self,
        session: AsyncSession,
        video_id: UUID,
        status: VideoStatus,
        video_url: Optional[str] = None,
        error: Optional[str] = None,
    ) -> VideoGeneration:
        """Apply an externally reported status (webhook or manual update)."""
        video = await video_generation_crud.get(session, video_id)
        if not video:
            raise NotFoundError("Video", video_id)

        status = VideoStatus(status)
        if video.is_terminal:
            logger.info(
                "Ignoring update for terminal video",
                video_id=str(video_id),
                current=VideoStatus(video.status).value,
                reported=status.value,
            )
            return video

        if status == VideoStatus.COMPLETED:
            if not video_url:
                raise ValidationError("video_url is required to complete a video")
            return await self.finalize_completion(session, video_id, video_url)

        if status == VideoStatus.FAILED:
            video.status = VideoStatus.FAILED
            video.error_message = error or "Video generation failed"
            video.completed_at = utc_now()
            return await video_generation_crud.save(session, video)

        if status == VideoStatus.PROCESSING and video.status == VideoStatus.PENDING:
            video.status = VideoStatus.PROCESSING
            return await video_generation_crud.save(session, video)

        return video

    async def retry_video(self, session: AsyncSession, video_id: UUID) -> VideoGeneration:
        """Submit a fresh attempt with the same inputs as a FAILED record."""
        failed = await video_generation_crud.get(session, video_id)
        if not failed:
            raise NotFoundError("Video", video_id)
        if failed.status != VideoStatus.FAILED:
            raise ValidationError("Only failed videos can be retried")
        if not failed.source_image_id:
            raise ValidationError("Source image no longer exists")

        image = await image_generation_crud.get(session, failed.source_image_id)
        if not image:
            raise NotFoundError("Image", failed.source_image_id)

        client = self.provider(failed.provider)
        video = await video_generation_crud.create(
            session,
            VideoGeneration(
                shot_id=failed.shot_id,
                source_image_id=failed.source_image_id,
                provider=failed.provider,
                motion_type=failed.motion_type,
                prompt=failed.prompt,
                status=VideoStatus.PENDING,
            ),
        )
        log = logger.bind(
            video_id=str(video.id),
            retry_of=str(failed.id),
            provider=VideoProvider(failed.provider).value,
        )
        return await self._submit(session, video, client, image.image_url, log)

    async def refresh_in_flight(
        self, session: AsyncSession, project_id: Optional[UUID] = None
    ) -> int:
        """Poll every in-flight record once; returns how many are still in flight."""
        in_flight = await video_generation_crud.list_in_flight(session, project_id)
        remaining = 0
        for video in in_flight:
            refreshed = await self.refresh_video(session, video)
            if not refreshed.is_terminal:
                remaining += 1
        return remaining

    async def project_videos(
        self, session: AsyncSession, project_id: UUID
    ) -> List[VideoGeneration]:
        return await video_generation_crud.list_for_project(session, project_id)


video_generation_service = VideoGenerationService()
