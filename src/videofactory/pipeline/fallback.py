"""Quota-triggered fallback to stock footage.

When the media service refuses a request for quota or billing reasons the
request is still served, either with one stock clip for the whole prompt or
with one clip per scene of the narration script. Any other failure is
re-raised untouched for the task orchestrator to report.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Protocol

from ..agents import ScriptInput
from ..config import config, FallbackStrategy
from ..errors import FallbackError, is_quota_or_billing
from ..models import GenerationRequest, GenerationResult, Scene, SingleSourceResult, StitchedResult
from ..services.stock import StockCredentials, StockSourceResolver
from ..storage import ArtifactStore
from .narration import NarrationSynthesizer, attach_narration

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]


class ScriptWriter(Protocol):
    async def run(self, input_data: ScriptInput) -> str:
        ...


class Segmenter(Protocol):
    async def segment(self, script: str, target_duration: int) -> List[Scene]:
        ...


class FallbackOrchestrator:
    """Decide whether a primary failure is recoverable and build the substitute."""

    def __init__(
        self,
        resolver: StockSourceResolver,
        segmenter: Segmenter,
        narrator: NarrationSynthesizer,
        script_agent: ScriptWriter,
        store: ArtifactStore,
        strategy: Optional[FallbackStrategy] = None,
        credentials: Optional[StockCredentials] = None,
        placeholder_url: Optional[str] = None,
    ) -> None:
        self._resolver = resolver
        self._segmenter = segmenter
        self._narrator = narrator
        self._script_agent = script_agent
        self._store = store
        self._strategy = strategy or config.fallback_strategy
        self._credentials = credentials if credentials is not None else StockCredentials.from_config()
        self._placeholder_url = placeholder_url or config.placeholder_video_url

    @property
    def strategy(self) -> FallbackStrategy:
        return self._strategy

    @staticmethod
    def is_recoverable(error: BaseException) -> bool:
        return is_quota_or_billing(error)

    async def recover(
        self,
        error: Exception,
        task_id: str,
        request: GenerationRequest,
        script: Optional[str],
        progress: ProgressCallback,
    ) -> GenerationResult:
        """Build a fallback result for ``error``, or re-raise it if it is fatal.

        Raises:
            FallbackError: If a required script cannot be obtained.
            Exception: ``error`` itself when it is not quota/billing related,
                or any failure of the substitute path.
        """
        if not self.is_recoverable(error):
            raise error

        logger.warning(f"Primary generation unavailable ({error}); using {self._strategy.value} fallback")
        progress("Primary generation failed. Creating fallback...")
        script = await self._ensure_script(request, script, progress)

        if self._strategy is FallbackStrategy.SINGLE_SOURCE:
            return await self._single_source(task_id, request, script, progress)
        return await self._multi_clip(task_id, request, script, progress)

    async def _ensure_script(
        self,
        request: GenerationRequest,
        script: Optional[str],
        progress: ProgressCallback,
    ) -> Optional[str]:
        # Multi-clip segments the script into scenes, so it always needs one
        required = request.wants_narration or self._strategy is FallbackStrategy.MULTI_CLIP
        if script or not required:
            return script

        progress("Generating script...")
        try:
            script = await self._script_agent.run(
                ScriptInput(prompt=request.prompt, duration=request.duration, language=request.language)
            )
        except Exception as e:
            raise FallbackError("Cannot build fallback without narration script.") from e

        if not script or not script.strip():
            raise FallbackError("Cannot build fallback without narration script.")
        return script.strip()

    async def _single_source(
        self,
        task_id: str,
        request: GenerationRequest,
        script: Optional[str],
        progress: ProgressCallback,
    ) -> SingleSourceResult:
        progress("Searching for stock footage...")
        video = await self._lookup(request.prompt, request.aspect_ratio.orientation)
        audio, captions = await attach_narration(
            self._narrator, self._store, task_id, request, script, progress
        )
        progress("Fallback video ready!")
        return SingleSourceResult(video=video, audio=audio, captions=captions, is_fallback=True)

    async def _multi_clip(
        self,
        task_id: str,
        request: GenerationRequest,
        script: str,
        progress: ProgressCallback,
    ) -> StitchedResult:
        progress("Breaking script into scenes...")
        scenes = await self._segmenter.segment(script, request.duration)

        audio, captions = await attach_narration(
            self._narrator, self._store, task_id, request, script, progress
        )

        progress(f"Searching for {len(scenes)} video clips...")
        orientation = request.aspect_ratio.orientation
        # gather keeps scene order whatever order the lookups finish in
        videos = await asyncio.gather(
            *(self._lookup(scene.description, orientation) for scene in scenes)
        )

        progress("Multi-clip video compiled!")
        return StitchedResult(videos=list(videos), audio=audio, captions=captions, is_fallback=True)

    async def _lookup(self, query: str, orientation: str) -> str:
        """Resolve one clip, degrading to the placeholder on any miss or error."""
        try:
            url = await self._resolver.resolve(query, self._credentials, orientation)
        except Exception as e:
            logger.warning(f"Stock lookup for '{query[:60]}' failed: {e}")
            url = None
        if not url:
            logger.info(f"Using placeholder clip for '{query[:60]}'")
            return self._placeholder_url
        return url
