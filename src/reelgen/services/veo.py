"""Veo clip rendering over the Vertex AI long-running prediction API."""

import base64
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable, Optional, Tuple

import requests
from google.api_core import exceptions as google_exceptions
from google.cloud import storage

from ..config import config
from .vertex import auth_headers, model_url

logger = logging.getLogger(__name__)

# Veo renders 5-8 second clips
MIN_CLIP_SECONDS = 5.0
MAX_CLIP_SECONDS = 8.0
ASPECT_RATIOS = ("16:9", "9:16")


class GenerationStatus(str, Enum):
    """Lifecycle of one Veo operation."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass
class VeoResult:
    """Outcome of one Veo operation."""

    operation_name: Optional[str]
    status: GenerationStatus
    video: Optional[bytes] = None
    output_uri: Optional[str] = None
    error_message: Optional[str] = None
    retryable: bool = True
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == GenerationStatus.COMPLETED and self.video is not None

    def fail(self, message: str, retryable: bool = True) -> "VeoResult":
        self.status = GenerationStatus.FAILED
        self.error_message = message
        self.retryable = retryable
        self.completed_at = datetime.now()
        return self


def split_gcs_uri(uri: str) -> Tuple[str, str]:
    """``gs://bucket/path`` to ``(bucket, path)``.

    Raises:
        ValueError: If the URI has no scheme, bucket or object path.
    """
    if not uri.startswith("gs://"):
        raise ValueError(f"Not a GCS URI: {uri}")
    bucket, _, path = uri[len("gs://"):].partition("/")
    if not bucket or not path:
        raise ValueError(f"GCS URI needs a bucket and an object path: {uri}")
    return bucket, path


class VeoClient:
    """Submits a text-to-video request and waits for the clip.

    The clip comes back inline as base64, or is written to
    ``output_bucket`` and downloaded from Cloud Storage. Failures and the
    poll deadline are reported on the VeoResult rather than raised.
    """

    DEFAULT_POLL_INTERVAL = 10.0
    DEFAULT_DOWNLOAD_ATTEMPTS = 3
    DEFAULT_DOWNLOAD_DELAY = 2.0

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        output_bucket: Optional[str] = None,
        timeout: Optional[float] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        max_poll_time: Optional[float] = None,
        max_retries: int = DEFAULT_DOWNLOAD_ATTEMPTS,
        retry_delay: float = DEFAULT_DOWNLOAD_DELAY,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """
        Args:
            project_id: Vertex AI project. Defaults to GOOGLE_CLOUD_PROJECT.
            location: Vertex AI region.
            model: Veo model name.
            output_bucket: Optional ``gs://`` prefix for rendered clips.
            timeout: HTTP deadline per request, in seconds.
            poll_interval: Seconds between operation checks.
            max_poll_time: Give up on the operation after this many seconds.
            max_retries: Attempts per Cloud Storage download.
            retry_delay: First download retry delay, doubled each attempt.
            sleep: Injected for tests.

        Raises:
            ValueError: Without a project, or for a bucket that is not ``gs://``.
        """
        self._project_id = project_id or config.google_cloud_project
        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

        self._output_bucket = output_bucket if output_bucket is not None else config.veo_output_bucket
        if self._output_bucket and not self._output_bucket.startswith("gs://"):
            raise ValueError(f"VEO_OUTPUT_BUCKET must start with 'gs://', got {self._output_bucket}")

        self._location = location or config.google_cloud_location
        self._model = model or config.veo_model
        self._timeout = timeout or config.request_timeout
        self._poll_interval = poll_interval
        self._max_poll_time = max_poll_time or config.veo_max_poll_time
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._sleep = sleep
        self._storage_client: Optional[storage.Client] = None

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def model(self) -> str:
        return self._model

    def generate_clip(
        self,
        prompt: str,
        duration: float = MAX_CLIP_SECONDS,
        aspect_ratio: str = "9:16",
    ) -> VeoResult:
        """Render one clip for ``prompt``.

        Args:
            prompt: Shot description.
            duration: Requested length, clamped to what Veo supports.
            aspect_ratio: ``9:16`` (vertical) or ``16:9``.

        Raises:
            ValueError: For an empty prompt or unsupported aspect ratio.
        """
        if not prompt or not prompt.strip():
            raise ValueError("prompt must be non-empty")
        if aspect_ratio not in ASPECT_RATIOS:
            raise ValueError(f"aspect_ratio must be one of {', '.join(ASPECT_RATIOS)}, got {aspect_ratio}")

        duration = max(MIN_CLIP_SECONDS, min(MAX_CLIP_SECONDS, duration))
        result = VeoResult(
            operation_name=None,
            status=GenerationStatus.PENDING,
            started_at=datetime.now(),
            metadata={
                "prompt": prompt,
                "duration": duration,
                "aspect_ratio": aspect_ratio,
                "model": self._model,
            },
        )

        try:
            logger.info(f"Submitting {duration:.0f}s {aspect_ratio} Veo clip: {prompt[:60]}...")
            result.operation_name = self._submit(prompt, duration, aspect_ratio)
            result.status = GenerationStatus.PROCESSING
            return self._wait(result)
        except requests.Timeout as e:
            logger.error(f"Veo request timed out: {e}")
            return result.fail(f"Timeout: {e}")
        except google_exceptions.GoogleAPICallError as e:
            logger.error(f"Cloud Storage error: {e}")
            return result.fail(str(e))
        except Exception as e:
            logger.error(f"Veo generation failed: {e}")
            return result.fail(str(e))

    def _post(self, method: str, body: dict) -> dict:
        response = requests.post(
            model_url(self._project_id, self._location, self._model, method),
            json=body,
            headers=auth_headers(),
            timeout=self._timeout,
        )
        if response.status_code != 200:
            raise RuntimeError(f"Veo {method} returned {response.status_code}: {response.text[:500]}")
        return response.json()

    def _submit(self, prompt: str, duration: float, aspect_ratio: str) -> str:
        parameters = {
            "aspectRatio": aspect_ratio,
            "durationSeconds": int(duration),
            "sampleCount": 1,
        }
        if self._output_bucket:
            parameters["storageUri"] = self._output_bucket.rstrip("/") + "/"

        operation = self._post("predictLongRunning", {"instances": [{"prompt": prompt}], "parameters": parameters})
        if not operation.get("name"):
            raise RuntimeError("Veo did not return an operation name")
        return operation["name"]

    def _wait(self, result: VeoResult) -> VeoResult:
        """Poll until the operation finishes or the deadline passes."""
        deadline = time.monotonic() + self._max_poll_time
        checks = 0

        while time.monotonic() <= deadline:
            checks += 1
            logger.debug(f"Checking {result.operation_name} (#{checks})")
            operation = self._post("fetchPredictOperation", {"operationName": result.operation_name})

            if operation.get("done"):
                if "error" in operation:
                    message = operation["error"].get("message", "unknown error")
                    logger.error(f"Veo operation {result.operation_name} failed: {message}")
                    return result.fail(message)
                return self._collect(result, operation.get("response") or {})

            self._sleep(self._poll_interval)

        logger.warning(f"Gave up on {result.operation_name} after {self._max_poll_time}s")
        return result.fail(f"Operation timed out after {self._max_poll_time}s", retryable=False)

    def _collect(self, result: VeoResult, response: dict) -> VeoResult:
        videos = response.get("videos") or []
        if not videos:
            return result.fail("Operation finished without videos")

        video = videos[0]
        if video.get("bytesBase64Encoded"):
            result.video = base64.b64decode(video["bytesBase64Encoded"])
        elif video.get("gcsUri"):
            result.output_uri = video["gcsUri"]
            result.video = self._download(video["gcsUri"])
        else:
            return result.fail("Video entry has neither bytes nor a GCS URI")

        result.status = GenerationStatus.COMPLETED
        result.completed_at = datetime.now()
        logger.info(f"Veo clip ready: {len(result.video)} bytes")
        return result

    def _download(self, uri: str) -> bytes:
        """Fetch a rendered clip from Cloud Storage, retrying transient errors."""
        bucket_name, blob_name = split_gcs_uri(uri)
        if self._storage_client is None:
            self._storage_client = storage.Client(project=self._project_id)
        blob = self._storage_client.bucket(bucket_name).blob(blob_name)

        for attempt in range(1, self._max_retries + 1):
            try:
                return blob.download_as_bytes(timeout=self._timeout)
            except google_exceptions.NotFound:
                logger.error(f"Rendered clip missing from Cloud Storage: {uri}")
                raise
            except Exception as e:
                if attempt == self._max_retries:
                    raise
                delay = self._retry_delay * (2 ** (attempt - 1))
                logger.warning(f"Download of {uri} failed ({attempt}/{self._max_retries}): {e}; retrying in {delay}s")
                self._sleep(delay)

        raise RuntimeError(f"Could not download {uri}")
