"""
Async Job Poller - long-running Veo video generation

State machine:
    STARTED -> POLLING -> DONE | FAILED | CANCELLED | TIMED_OUT

The provider hands back an operation with a `done` flag. The poller waits a
fixed interval between status fetches, bounded by a total wait budget and an
optional cancellation token. Cancelling only stops local polling; the
provider-side job keeps running.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from google import genai

from core.config import Config, get_config
from core.errors import GenerationError, JobCancelledError, JobTimeoutError
from services.studio.request_builder import generation_config
from services.studio.schemas import GenerationRequest, JobHandle, JobState

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], genai.Client]
SleepFunc = Callable[[float], Awaitable[Any]]


class CancellationToken:
    """Cooperative cancellation for a poll loop."""

    def __init__(self):
        self._event = asyncio.Event()
        self.reason: Optional[str] = None

    def cancel(self, reason: str = "Cancelled by user"):
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    async def wait(self):
        await self._event.wait()

    def raise_if_cancelled(self):
        if self.cancelled:
            raise JobCancelledError(
                self.reason or "Cancelled", error_code="CANCELLED", feature="video"
            )


def extract_video_uri(operation: Any) -> Optional[str]:
    """URI of the first generated video, if the operation carries one."""
    response = getattr(operation, "response", None) or getattr(operation, "result", None)
    videos = getattr(response, "generated_videos", None) or []
    if not videos:
        return None
    video = getattr(videos[0], "video", None)
    return getattr(video, "uri", None) or None


def _operation_error_message(operation: Any) -> Optional[str]:
    error = getattr(operation, "error", None)
    if not error:
        return None
    if isinstance(error, dict):
        return error.get("message") or str(error)
    return getattr(error, "message", None) or str(error)


class AsyncJobPoller:
    """
    Starts a video job and polls it to completion.

    Usage:
        poller = AsyncJobPoller(client_factory)
        uri = await poller.run(request)

        # With cancellation
        token = CancellationToken()
        uri = await poller.run(request, cancel_token=token)
    """

    def __init__(
        self,
        client_factory: ClientFactory,
        config: Optional[Config] = None,
        sleep: Optional[SleepFunc] = None,
        on_progress: Optional[Callable[[JobHandle], None]] = None,
    ):
        self._client_factory = client_factory
        self.config = config or get_config()
        self.poll_interval = self.config.video.poll_interval_seconds
        self.max_wait = self.config.video.max_wait_seconds
        self._sleep = sleep or asyncio.sleep
        self.on_progress = on_progress

    def _emit_progress(self, handle: JobHandle):
        """Emit poll update via callback."""
        if self.on_progress:
            try:
                self.on_progress(handle)
            except Exception as e:
                logger.warning(f"Progress callback failed: {e}")

    async def start(self, request: GenerationRequest, client: Optional[genai.Client] = None) -> JobHandle:
        """Submit the generation request and return a fresh handle."""
        client = client or self._client_factory()

        logger.info(
            f"Veo request: model={request.model}, aspect={request.aspect_ratio.value}, "
            f"resolution={request.resolution.value}, prompt={request.prompt_text[:50]}..."
        )

        operation = await client.aio.models.generate_videos(
            model=request.model,
            prompt=request.prompt_text,
            config=generation_config(request),
        )

        handle = JobHandle(
            provider_operation_id=getattr(operation, "name", None) or "",
            done=bool(getattr(operation, "done", False)),
            operation=operation,
            request_id=request.request_id,
        )
        logger.info(f"Veo operation started: {handle.provider_operation_id}")
        return handle

    async def _pause(self, cancel_token: Optional[CancellationToken]):
        if cancel_token is None:
            await self._sleep(self.poll_interval)
            return

        sleeper = asyncio.ensure_future(self._sleep(self.poll_interval))
        waiter = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
            if sleeper.done() and not sleeper.cancelled():
                sleeper.result()
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()

    async def poll(
        self,
        handle: JobHandle,
        cancel_token: Optional[CancellationToken] = None,
        client: Optional[genai.Client] = None,
    ) -> str:
        """Poll until the job is done, then return the result URI."""
        client = client or self._client_factory()

        while not handle.done:
            if cancel_token is not None and cancel_token.cancelled:
                handle.state = JobState.CANCELLED
                cancel_token.raise_if_cancelled()

            if handle.elapsed_seconds + self.poll_interval > self.max_wait:
                handle.state = JobState.TIMED_OUT
                logger.error(
                    f"Veo operation {handle.provider_operation_id} still running "
                    f"after {handle.elapsed_seconds:.0f}s, giving up"
                )
                raise JobTimeoutError(
                    f"Video generation did not complete within {self.max_wait:.0f} seconds",
                    waited_seconds=handle.elapsed_seconds,
                    error_code="TIMEOUT",
                    feature="video",
                )

            handle.state = JobState.POLLING
            await self._pause(cancel_token)

            if cancel_token is not None and cancel_token.cancelled:
                handle.state = JobState.CANCELLED
                logger.info(f"Polling cancelled for {handle.provider_operation_id}")
                cancel_token.raise_if_cancelled()

            handle.elapsed_seconds += self.poll_interval

            try:
                handle.operation = await client.aio.operations.get(handle.operation)
            except Exception:
                handle.state = JobState.FAILED
                raise

            handle.polls += 1
            handle.done = bool(getattr(handle.operation, "done", False))
            logger.debug(f"Veo operation {handle.provider_operation_id}: poll {handle.polls}, done={handle.done}")
            self._emit_progress(handle)

        return self._resolve(handle)

    def _resolve(self, handle: JobHandle) -> str:
        error_message = _operation_error_message(handle.operation)
        if error_message:
            handle.state = JobState.FAILED
            logger.error(f"Veo job failed: {error_message}")
            raise GenerationError(
                f"Video generation failed: {error_message}",
                error_code="JOB_FAILED",
                feature="video",
            )

        uri = extract_video_uri(handle.operation)
        if not uri:
            handle.state = JobState.FAILED
            logger.warning(f"No video URI in finished operation {handle.provider_operation_id}")
            raise GenerationError(
                "Video generation failed or no URI returned.",
                error_code="NO_VIDEO_URI",
                feature="video",
            )

        handle.result_reference = uri
        handle.state = JobState.DONE
        logger.info(
            f"Veo operation {handle.provider_operation_id} done after "
            f"{handle.polls} polls ({handle.elapsed_seconds:.0f}s)"
        )
        return uri

    async def run(
        self,
        request: GenerationRequest,
        cancel_token: Optional[CancellationToken] = None,
    ) -> str:
        """Start a job and poll it to a result URI."""
        client = self._client_factory()
        handle = await self.start(request, client=client)
        return await self.poll(handle, cancel_token=cancel_token, client=client)
