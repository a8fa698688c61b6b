"""
Tool Panels - presentation-facing entry points

Each panel owns one feature's loading flag, status line, current result and
last error. `submit` is the single recovery boundary: every failure of the
requested operation is reported through `notify` and recorded on the panel,
never raised to the host. A panel runs one operation at a time.

StudioSession wires the builder, invoker, poller, credential gate and media
store together and exposes the four feature entry points, which raise.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

import httpx

from core.config import Config, get_config
from core.errors import CredentialError, PanelBusyError, ValidationError
from services.video_generation.poller import AsyncJobPoller, CancellationToken, SleepFunc

from .credential_gate import CredentialGate, CredentialSelector
from .media_store import MediaHandle, MediaStore
from .provider import ProviderClientFactory
from .request_builder import RequestBuilder
from .schemas import (
    AspectRatio,
    MediaResult,
    ReferenceMedia,
    Resolution,
    UploadPackResult,
    VoiceName,
)
from .sync_invoker import SyncInvoker

logger = logging.getLogger(__name__)

T = TypeVar("T")

Notifier = Callable[[str], None]
StatusCallback = Callable[[str, str], None]


@dataclass(frozen=True)
class ToolInfo:
    name: str
    title: str
    description: str


TOOLS = [
    ToolInfo("pack", "Master Upload Pack", "Titles, SEO descriptions, tags, and pinned comments in one click."),
    ToolInfo("thumbnail", "Viral Thumbnails", "Analyze competitor styles and generate high-CTR thumbnail concepts."),
    ToolInfo("voice", "AI Voice Narrator", "Text-to-Speech with emotion."),
    ToolInfo("video", "Veo Video Creator", "Generative video from text."),
]


class ToolPanel(Generic[T]):
    """Base panel: loading state, status line and error boundary."""

    name = "tool"
    failure_message = "Generation failed."

    def __init__(
        self,
        session: "StudioSession",
        notify: Optional[Notifier] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.session = session
        self.notify = notify
        self.on_status = on_status

        self.loading = False
        self.status = ""
        self.result: Optional[T] = None
        self.error: Optional[BaseException] = None

    def _set_status(self, message: str):
        self.status = message
        if self.on_status:
            try:
                self.on_status(self.name, message)
            except Exception as e:
                logger.warning(f"Status callback failed: {e}")

    def _notify(self, message: str):
        if self.notify:
            self.notify(message)
        else:
            logger.warning(f"[{self.name}] {message}")

    def describe_failure(self, error: BaseException) -> str:
        if isinstance(error, ValidationError):
            return str(error)
        return self.failure_message

    def _release(self, result: Optional[T]):
        handle = getattr(result, "handle", None)
        if isinstance(handle, MediaHandle):
            self.session.store.revoke(handle)

    def _replace_result(self, result: T):
        previous = self.result
        self.result = result
        if previous is not None and previous is not result:
            self._release(previous)

    async def _run(self, operation: Callable[[], Awaitable[T]]) -> Optional[T]:
        if self.loading:
            raise PanelBusyError(f"{self.name} panel is already running", error_code="BUSY", feature=self.name)

        self.loading = True
        self.error = None
        try:
            result = await operation()
        except Exception as e:
            logger.error(f"[{self.name}] {type(e).__name__}: {e}")
            self.error = e
            self._notify(self.describe_failure(e))
            return None
        finally:
            self.loading = False
            self._set_status("")

        self._replace_result(result)
        return result

    def close(self):
        """Release the current result (view torn down)."""
        if self.result is not None:
            self._release(self.result)
            self.result = None


class UploadPackPanel(ToolPanel[UploadPackResult]):
    name = "pack"
    failure_message = "Failed to generate upload pack. Please try again."

    async def submit(self, keywords: str, script: Optional[str] = None) -> Optional[UploadPackResult]:
        return await self._run(lambda: self.session.generate_upload_pack(keywords, script))


class ThumbnailPanel(ToolPanel[MediaResult]):
    name = "thumbnail"
    failure_message = (
        "Thumbnail generation failed. Ensure your API key has access to "
        "Gemini 3 Pro Image models."
    )

    async def submit(
        self,
        prompt: str,
        reference: Optional[ReferenceMedia] = None,
    ) -> Optional[MediaResult]:
        return await self._run(lambda: self.session.analyze_and_generate_thumbnail(prompt, reference))


class VoicePanel(ToolPanel[MediaResult]):
    name = "voice"
    failure_message = "Voice generation failed."

    async def submit(
        self,
        text: str,
        voice: Union[VoiceName, str] = VoiceName.KORE,
    ) -> Optional[MediaResult]:
        return await self._run(lambda: self.session.generate_speech(text, voice))


class VideoPanel(ToolPanel[MediaResult]):
    name = "video"
    failure_message = "Video generation failed"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._cancel_token: Optional[CancellationToken] = None

    def describe_failure(self, error: BaseException) -> str:
        if isinstance(error, CredentialError):
            if error.error_code == "SESSION_EXPIRED":
                return "Session expired. Please select API Key again."
            if error.error_code in ("SELECTION_FAILED", "SELECTION_CANCELLED", "NO_SELECTOR"):
                return "Key selection failed or cancelled."
        return f"{self.failure_message}: {error or 'Unknown error'}"

    async def submit(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.LANDSCAPE,
        resolution: Union[Resolution, str] = Resolution.FULL_HD,
    ) -> Optional[MediaResult]:
        if self.loading:
            raise PanelBusyError("video panel is already running", error_code="BUSY", feature=self.name)

        self._cancel_token = CancellationToken()
        token = self._cancel_token
        try:
            return await self._run(
                lambda: self.session.generate_video(
                    prompt,
                    aspect_ratio,
                    resolution,
                    cancel_token=token,
                    on_status=self._set_status,
                )
            )
        finally:
            self._cancel_token = None

    def cancel(self, reason: str = "Cancelled by user"):
        """Stop polling. The provider-side job is not aborted."""
        if self._cancel_token is not None:
            self._cancel_token.cancel(reason)


class StudioSession:
    """
    One user's set of tool panels and their shared collaborators.

    Usage:
        async with StudioSession(notify=print) as studio:
            pack = await studio.upload_pack.submit("ai automation")
            clip = await studio.video.submit("drone shot of a neon city")
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        selector: Optional[CredentialSelector] = None,
        client_factory: Optional[Callable[[], Any]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        sleep: Optional[SleepFunc] = None,
        notify: Optional[Notifier] = None,
        on_status: Optional[StatusCallback] = None,
    ):
        self.config = config or get_config()
        self.gate = CredentialGate(selector=selector, config=self.config)
        self.client_factory = client_factory or ProviderClientFactory(
            self.config, key_source=self.gate.current_key
        )

        self.builder = RequestBuilder(self.config)
        self.invoker = SyncInvoker(self.client_factory)
        self.poller = AsyncJobPoller(self.client_factory, self.config, sleep=sleep)
        self.store = MediaStore(self.config, http_client=http_client)

        self.upload_pack = UploadPackPanel(self, notify, on_status)
        self.thumbnail = ThumbnailPanel(self, notify, on_status)
        self.voice = VoicePanel(self, notify, on_status)
        self.video = VideoPanel(self, notify, on_status)

    @property
    def panels(self) -> list[ToolPanel]:
        return [self.upload_pack, self.thumbnail, self.voice, self.video]

    def active_key(self) -> Optional[str]:
        return self.gate.current_key() or self.config.api.google_api_key or None

    async def close(self):
        for panel in self.panels:
            panel.close()
        await self.store.close()

    async def __aenter__(self) -> "StudioSession":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
        return False

    # Feature entry points

    async def generate_upload_pack(self, keywords: str, script: Optional[str] = None) -> UploadPackResult:
        request = self.builder.build_upload_pack(keywords, script)
        return await self.invoker.generate_upload_pack(request)

    async def analyze_and_generate_thumbnail(
        self,
        prompt: str,
        reference: Optional[ReferenceMedia] = None,
    ) -> MediaResult:
        """Optional analyze-then-generate, then wrap the image as a handle."""
        analysis = None
        if reference is not None:
            analysis = await self.invoker.analyze_reference(
                self.builder.build_thumbnail_analysis(reference)
            )

        image = await self.invoker.generate_image(self.builder.build_thumbnail(prompt, analysis))
        return MediaResult(handle=self.store.store_image(image), analysis_text=analysis)

    async def generate_speech(self, text: str, voice: Union[VoiceName, str] = VoiceName.KORE) -> MediaResult:
        audio = await self.invoker.generate_speech(self.builder.build_speech(text, voice))
        return MediaResult(handle=self.store.store_audio(audio))

    async def generate_video(
        self,
        prompt: str,
        aspect_ratio: Union[AspectRatio, str] = AspectRatio.LANDSCAPE,
        resolution: Union[Resolution, str] = Resolution.FULL_HD,
        cancel_token: Optional[CancellationToken] = None,
        on_status: Optional[Callable[[str], None]] = None,
    ) -> MediaResult:
        status = on_status or (lambda message: None)

        request = self.builder.build_video(prompt, aspect_ratio, resolution)
        await self.gate.ensure_credential()

        status("Initializing Veo Model...")
        status("Generating Frames (this may take a minute)...")
        uri = await self.gate.run_video(lambda: self.poller.run(request, cancel_token=cancel_token))

        status("Downloading Video Stream...")
        handle = await self.store.store_video(uri, self.active_key())
        return MediaResult(handle=handle)
