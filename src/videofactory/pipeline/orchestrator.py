"""Task orchestration: primary generation, polling and fallback."""

import asyncio
import logging
import time
from functools import partial
from typing import Any, Awaitable, Callable, List, Optional

import httpx

from ..agents import CaptionAgent, KeywordAgent, SceneSegmenter, ScriptAgent, ScriptInput
from ..config import config, FallbackStrategy
from ..errors import (
    AuthenticationError,
    GenerationError,
    GenerationTimeoutError,
    MalformedResponseError,
    is_authentication_failure,
)
from ..models import GenerationRequest, GenerationResult, GenerationTask, SingleSourceResult
from ..services import AnthropicClient, SpeechClient, StockSourceResolver, VeoClient
from ..services.stock import StockCredentials
from ..storage import ArtifactStore
from .fallback import FallbackOrchestrator
from .narration import NarrationSynthesizer, attach_narration
from .registry import TaskRegistry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str], None]
BatchProgressCallback = Callable[[str, str], None]


class TaskOrchestrator:
    """Drive generation tasks from pending to success or error.

    Each run submits the request to Veo, polls the operation until it is
    done, downloads the video and, when a voice was chosen, adds narration.
    A failure is either fatal (bad credentials, or anything the fallback
    orchestrator declines) or replaced by a stock-footage fallback result.
    """

    def __init__(
        self,
        registry: TaskRegistry,
        veo: VeoClient,
        narrator: NarrationSynthesizer,
        fallback: FallbackOrchestrator,
        script_agent: ScriptAgent,
        store: ArtifactStore,
        poll_interval: Optional[float] = None,
        max_poll_time: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Task queue; the orchestrator claims its writer handle.
            veo: Media service client.
            narrator: Narration synthesizer for primary results.
            fallback: Fallback orchestrator consulted on primary failure.
            script_agent: Writes a script when narration is wanted and none was given.
            store: Where videos, narration and metadata are written.
            poll_interval: Seconds between operation polls. Defaults to config.poll_interval.
            max_poll_time: Give up polling after this many seconds; None polls until done.
            sleep: Awaitable sleep used between polls.
            clock: Monotonic clock used for elapsed-time reporting.
        """
        self._registry = registry
        self._writer = registry.claim_writer()
        self._veo = veo
        self._narrator = narrator
        self._fallback = fallback
        self._script_agent = script_agent
        self._store = store
        self._poll_interval = poll_interval if poll_interval is not None else config.poll_interval
        self._max_poll_time = max_poll_time
        self._sleep = sleep
        self._clock = clock

    @property
    def registry(self) -> TaskRegistry:
        return self._registry

    def submit(self, request: GenerationRequest) -> str:
        """Queue a request; the task starts in ``pending``."""
        return self._registry.submit(request)

    async def run(self, task_id: str, on_progress: Optional[ProgressCallback] = None) -> GenerationTask:
        """Drive one pending task to a terminal state and return its snapshot.

        Generation failures are recorded on the task, not raised.

        Raises:
            KeyError: If the task does not exist.
            InvalidTransitionError: If the task is not pending.
        """
        request = self._writer.start(task_id)
        logger.info(f"Task {task_id}: generating '{request.prompt[:60]}'")

        def progress(message: str) -> None:
            self._writer.report(task_id, message)
            logger.debug(f"Task {task_id}: {message}")
            if on_progress is not None:
                on_progress(message)

        try:
            result = await self._generate(task_id, request, progress)
        except Exception as e:
            message = str(e) or type(e).__name__
            logger.error(f"Task {task_id} failed: {message}")
            self._writer.fail(task_id, message)
        else:
            self._writer.succeed(task_id, result)
            logger.info(
                f"Task {task_id} succeeded"
                + (" via fallback" if result.is_fallback else "")
            )

        task = self._writer.snapshot(task_id)
        self._save_metadata(task)
        return task

    async def run_pending(
        self, on_progress: Optional[BatchProgressCallback] = None
    ) -> List[GenerationTask]:
        """Run every pending task concurrently; results follow queue order.

        A run that cannot start (the task was picked up elsewhere in the
        meantime) is logged and reported by its current snapshot, so the
        other results are never lost.
        """
        task_ids = self._registry.pending_ids()
        logger.info(f"Dispatching {len(task_ids)} pending task(s)")
        runs = [
            self.run(task_id, partial(on_progress, task_id) if on_progress else None)
            for task_id in task_ids
        ]
        outcomes = await asyncio.gather(*runs, return_exceptions=True)

        tasks: List[GenerationTask] = []
        for task_id, outcome in zip(task_ids, outcomes):
            if isinstance(outcome, Exception):
                logger.error(f"Task {task_id} could not be run: {outcome}")
                tasks.append(self._registry.get(task_id))
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                tasks.append(outcome)
        return tasks

    async def _generate(
        self,
        task_id: str,
        request: GenerationRequest,
        progress: ProgressCallback,
    ) -> GenerationResult:
        progress("Initializing video generation...")

        script = request.script
        if script is None and request.wants_narration:
            progress("Generating script...")
            script = await self._script_agent.run(
                ScriptInput(prompt=request.prompt, duration=request.duration, language=request.language)
            ) or None

        try:
            return await self._generate_primary(task_id, request, script, progress)
        except Exception as e:
            if is_authentication_failure(e):
                raise AuthenticationError() from e
            return await self._fallback.recover(e, task_id, request, script, progress)

    async def _generate_primary(
        self,
        task_id: str,
        request: GenerationRequest,
        script: Optional[str],
        progress: ProgressCallback,
    ) -> SingleSourceResult:
        operation = await self._veo.start(request)
        progress("Video rendering started. This may take a few minutes...")

        operation = await self._poll(operation, progress)

        progress("Finalizing video...")
        error = self._veo.operation_error(operation)
        if error:
            raise GenerationError(error)

        uri = self._veo.download_uri(operation)
        if not uri:
            raise MalformedResponseError("Video generation completed, but no download link was found.")

        progress("Downloading video...")
        video = self._store.save_video(task_id, await self._veo.download(uri))

        audio, captions = await attach_narration(
            self._narrator, self._store, task_id, request, script, progress
        )

        progress("Video generation successful!")
        return SingleSourceResult(video=video, audio=audio, captions=captions, is_fallback=False)

    async def _poll(self, operation: Any, progress: ProgressCallback) -> Any:
        started = self._clock()
        while not operation.done:
            await self._sleep(self._poll_interval)
            elapsed = self._clock() - started
            if self._max_poll_time is not None and elapsed > self._max_poll_time:
                raise GenerationTimeoutError(f"Video generation timed out after {elapsed:.0f}s")
            progress(f"Rendering in progress... ({elapsed / 60:.1f} min)")
            operation = await self._veo.refresh(operation)
        return operation

    def _save_metadata(self, task: GenerationTask) -> None:
        try:
            self._store.save_metadata(task)
        except OSError as e:
            logger.warning(f"Failed to save metadata for task {task.id}: {e}")


def create_orchestrator(
    http_client: httpx.AsyncClient,
    registry: Optional[TaskRegistry] = None,
    store: Optional[ArtifactStore] = None,
    strategy: Optional[FallbackStrategy] = None,
) -> TaskOrchestrator:
    """Wire an orchestrator to the real services described by ``config``."""
    anthropic = AnthropicClient()
    store = store or ArtifactStore()
    narrator = NarrationSynthesizer(CaptionAgent(client=anthropic), SpeechClient())
    script_agent = ScriptAgent(client=anthropic)

    fallback = FallbackOrchestrator(
        resolver=StockSourceResolver(KeywordAgent(client=anthropic), http_client),
        segmenter=SceneSegmenter(client=anthropic),
        narrator=narrator,
        script_agent=script_agent,
        store=store,
        strategy=strategy,
        credentials=StockCredentials.from_config(),
    )
    return TaskOrchestrator(
        registry=registry or TaskRegistry(),
        veo=VeoClient(http_client=http_client),
        narrator=narrator,
        fallback=fallback,
        script_agent=script_agent,
        store=store,
    )
