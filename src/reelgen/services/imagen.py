"""Imagen thumbnails over the Vertex AI REST endpoint."""

import base64
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

import requests

from ..config import config
from .vertex import auth_headers, model_url

logger = logging.getLogger(__name__)

ASPECT_RATIOS = ("1:1", "9:16", "16:9", "3:4", "4:3")

_MIME_FORMATS = {
    "image/png": "png",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
}


@dataclass
class ImageResult:
    """One Imagen call: image bytes on success, otherwise an error message."""

    prompt: str
    image: Optional[bytes] = None
    format: str = "png"
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None
    metadata: dict = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.image is not None and self.error_message is None


class ImagenClient:
    """Requests a single still image per prompt.

    Errors are reported on the returned ImageResult instead of raised, so the
    caller decides whether to retry or fall back.
    """

    def __init__(
        self,
        project_id: Optional[str] = None,
        location: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Args:
            project_id: Vertex AI project. Defaults to GOOGLE_CLOUD_PROJECT.
            location: Vertex AI region.
            model: Imagen model name.
            timeout: HTTP deadline in seconds.
        """
        self._project_id = project_id or config.google_cloud_project
        if not self._project_id:
            raise ValueError("GOOGLE_CLOUD_PROJECT not set")

        self._location = location or config.google_cloud_location
        self._model = model or config.imagen_model
        self._timeout = timeout or config.request_timeout

    @property
    def project_id(self) -> str:
        return self._project_id

    @property
    def model(self) -> str:
        return self._model

    def generate_image(
        self,
        prompt: str,
        aspect_ratio: str = "9:16",
        negative_prompt: Optional[str] = None,
    ) -> ImageResult:
        """Render ``prompt`` as one image.

        Args:
            prompt: What the thumbnail should show.
            aspect_ratio: One of ASPECT_RATIOS; vertical by default.
            negative_prompt: Content Imagen should avoid.
        """
        result = ImageResult(
            prompt=prompt,
            created_at=datetime.now(),
            metadata={"aspect_ratio": aspect_ratio, "model": self._model},
        )
        if aspect_ratio not in ASPECT_RATIOS:
            result.error_message = f"Unsupported aspect ratio {aspect_ratio}"
            return result

        logger.info(f"Requesting {aspect_ratio} thumbnail from {self._model}: {prompt[:50]}...")
        try:
            response = requests.post(
                model_url(self._project_id, self._location, self._model, "predict"),
                json=self._request_body(prompt, aspect_ratio, negative_prompt),
                headers=auth_headers(),
                timeout=self._timeout,
            )
        except Exception as e:
            logger.error(f"Imagen request failed: {e}")
            result.error_message = str(e)
            return result

        if response.status_code != 200:
            result.error_message = f"{response.status_code}: {response.text[:500]}"
            logger.error(f"Imagen returned {result.error_message}")
            return result

        return self._read_prediction(result, response.json())

    @staticmethod
    def _request_body(prompt: str, aspect_ratio: str, negative_prompt: Optional[str]) -> Dict[str, Any]:
        parameters: Dict[str, Any] = {"sampleCount": 1, "aspectRatio": aspect_ratio}
        if negative_prompt:
            parameters["negativePrompt"] = negative_prompt
        return {"instances": [{"prompt": prompt}], "parameters": parameters}

    @staticmethod
    def _read_prediction(result: ImageResult, body: Dict[str, Any]) -> ImageResult:
        predictions = body.get("predictions") or []
        encoded = predictions[0].get("bytesBase64Encoded") if predictions else None
        if not encoded:
            # Safety filtering drops the prediction instead of returning an error
            result.error_message = "Imagen returned no image (possibly filtered)"
            return result

        result.format = _MIME_FORMATS.get(predictions[0].get("mimeType", "image/png"), "png")
        result.image = base64.b64decode(encoded)
        logger.info(f"Received {len(result.image)} byte {result.format} thumbnail")
        return result
