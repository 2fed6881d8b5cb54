"""Google Veo client wrapper via the Gemini API."""

import asyncio
import logging
import time
from typing import Any, Optional

import httpx
from google import genai
from google.genai import types
from google.cloud import storage
from google.api_core import exceptions as google_exceptions

from ..config import config
from ..errors import TransportError
from ..models import GenerationRequest

logger = logging.getLogger(__name__)


class VeoClient:
    """Client wrapper for Veo video generation.

    This client handles:
    - Submitting video generation requests and returning the operation handle
    - Refreshing an operation handle (the caller owns the poll loop)
    - Extracting the download reference from a finished operation
    - Downloading the rendered video over HTTPS or from GCS
    """

    DEFAULT_TIMEOUT = 120.0  # seconds, per download
    DEFAULT_MAX_RETRIES = 3
    DEFAULT_RETRY_DELAY = 2.0

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        resolution: Optional[str] = None,
        client: Optional[genai.Client] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        storage_client: Optional[storage.Client] = None,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ) -> None:
        """Initialize the Veo client.

        Args:
            api_key: Gemini API key. Defaults to GEMINI_API_KEY env var.
            model: Veo model name. Defaults to config.video_model.
            resolution: Output resolution. Defaults to config.video_resolution.
            client: Pre-built google-genai client.
            http_client: Shared httpx client for downloads; one is created per
                download if omitted.
            storage_client: GCS client for ``gs://`` download references.
            max_retries: Maximum attempts for GCS downloads.
            retry_delay: Base delay between GCS retries (exponential backoff).
        """
        self._api_key = api_key or config.gemini_api_key
        if not self._api_key and client is None:
            raise ValueError("Gemini API key not provided. Set GEMINI_API_KEY env var.")

        self._client = client or genai.Client(api_key=self._api_key)
        self._model = model or config.video_model
        self._resolution = resolution or config.video_resolution
        self._http_client = http_client
        self._storage_client = storage_client
        self._max_retries = max_retries
        self._retry_delay = retry_delay

    @property
    def model(self) -> str:
        """Return the Veo model name."""
        return self._model

    async def start(self, request: GenerationRequest) -> Any:
        """Submit a generation request and return its long-running operation."""
        logger.info(f"Starting Veo generation ({self._model}, {request.aspect_ratio.value})")
        logger.debug(f"Prompt: {request.prompt[:100]}...")

        return await self._client.aio.models.generate_videos(
            model=self._model,
            prompt=request.prompt,
            config=types.GenerateVideosConfig(
                number_of_videos=1,
                resolution=self._resolution,
                aspect_ratio=request.aspect_ratio.value,
            ),
        )

    async def refresh(self, operation: Any) -> Any:
        """Fetch the latest state of an operation."""
        return await self._client.aio.operations.get(operation)

    @staticmethod
    def operation_error(operation: Any) -> Optional[str]:
        """Return the error message of a finished operation, if it failed."""
        error = getattr(operation, "error", None)
        if not error:
            return None
        if isinstance(error, dict):
            return str(error.get("message") or error)
        return str(error)

    @staticmethod
    def download_uri(operation: Any) -> Optional[str]:
        """Return the URI of the first generated video, if any."""
        response = getattr(operation, "response", None) or getattr(operation, "result", None)
        generated = getattr(response, "generated_videos", None) or []
        if not generated:
            return None
        video = getattr(generated[0], "video", None)
        return getattr(video, "uri", None) if video is not None else None

    async def download(self, uri: str) -> bytes:
        """Download the video behind ``uri``.

        Raises:
            TransportError: If the asset cannot be fetched.
        """
        if uri.startswith("gs://"):
            return await asyncio.to_thread(self._download_from_gcs, uri)
        return await self._download_http(uri)

    async def _download_http(self, uri: str) -> bytes:
        # The access credential travels as a query parameter on download
        params = {"key": self._api_key} if self._api_key else None
        if self._http_client is not None:
            response = await self._http_client.get(uri, params=params, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=self.DEFAULT_TIMEOUT) as client:
                response = await client.get(uri, params=params, follow_redirects=True)

        if not response.is_success:
            raise TransportError(f"Failed to download video: {response.reason_phrase}")

        logger.debug(f"Downloaded {len(response.content)} bytes")
        return response.content

    def _download_from_gcs(self, gcs_uri: str) -> bytes:
        """Download a file from GCS.

        Args:
            gcs_uri: GCS URI (gs://bucket/path/to/file).
        """
        uri_parts = gcs_uri[5:].split("/", 1)
        if len(uri_parts) != 2 or not all(uri_parts):
            raise TransportError(f"Invalid GCS URI format: {gcs_uri}")

        bucket_name, blob_name = uri_parts
        if self._storage_client is None:
            self._storage_client = storage.Client()

        # Download with retry
        for attempt in range(self._max_retries):
            try:
                blob = self._storage_client.bucket(bucket_name).blob(blob_name)
                data = blob.download_as_bytes()
                logger.debug(f"Downloaded {gcs_uri} ({len(data)} bytes)")
                return data

            except google_exceptions.NotFound as e:
                logger.error(f"File not found in GCS: {gcs_uri}")
                raise TransportError(f"Failed to download video: {e}") from e

            except Exception as e:
                if attempt == self._max_retries - 1:
                    raise TransportError(f"Failed to download video: {e}") from e
                delay = self._retry_delay * (2**attempt)
                logger.warning(f"Download failed (attempt {attempt + 1}): {e}. Retrying in {delay}s...")
                time.sleep(delay)

        raise TransportError(f"Failed to download video: {gcs_uri}")
