"""
Module: extractor.model_client

Purpose:
    Minimal client for the Gemini ``generateContent`` REST endpoint.
    Sends one text prompt plus one inline PNG image and returns the
    reply text.

Key Classes:
    - GeminiClient: Credentialed client bound to one model variant

Dependencies:
    - requests: HTTP transport

Used By:
    - extractor.model_extractor: Per-page extraction requests
    - extractor.pipeline: Built from the caller-supplied credential
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Dict, Optional

import requests

from .config import AVAILABLE_MODELS, DEFAULT_ENDPOINT, DEFAULT_MODEL
from .errors import ModelRequestError, PreconditionError

logger = logging.getLogger(__name__)


class GeminiClient:
    """
    Gemini REST client.

    The credential is supplied by the caller for every client; there is
    no process-wide default key.

    Usage:
        client = GeminiClient(api_key, "gemini-2.0-flash")
        text = client.generate(prompt, png_bytes)

    Attributes:
        model_id: Model variant, one of AVAILABLE_MODELS.
        endpoint: REST base URL.
        timeout: Request timeout in seconds, None for no timeout.
    """

    def __init__(
        self,
        api_key: str,
        model_id: str = DEFAULT_MODEL,
        *,
        endpoint: str = DEFAULT_ENDPOINT,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if not api_key or not api_key.strip():
            raise PreconditionError("An API key is required for AI extraction")
        if model_id not in AVAILABLE_MODELS:
            raise PreconditionError(
                f"Unknown model {model_id!r} (choose from {', '.join(AVAILABLE_MODELS)})"
            )
        self._api_key = api_key.strip()
        self.model_id = model_id
        self.endpoint = endpoint.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    @property
    def url(self) -> str:
        return f"{self.endpoint}/models/{self.model_id}:generateContent"

    def generate(self, prompt: str, image_png: bytes) -> str:
        """
        Submit a prompt with an inline PNG image.

        Args:
            prompt: Instruction text.
            image_png: PNG-encoded page image.

        Returns:
            Concatenated text parts of the first candidate.

        Raises:
            ModelRequestError: On transport errors, non-2xx status or a
                reply without text.
        """
        payload = {
            "contents": [{
                "parts": [
                    {"text": prompt},
                    {
                        "inline_data": {
                            "mime_type": "image/png",
                            "data": base64.b64encode(image_png).decode("ascii"),
                        }
                    },
                ]
            }]
        }
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self._api_key,
        }

        try:
            response = self._session.post(self.url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            body = response.json()
        except requests.RequestException as e:
            raise ModelRequestError(f"Model request failed: {e}") from e
        except ValueError as e:
            raise ModelRequestError(f"Model reply is not JSON: {e}") from e

        return _reply_text(body)


def _reply_text(body: Dict[str, Any]) -> str:
    """Pull the text out of a generateContent response body."""
    candidates = body.get("candidates") or []
    if not candidates:
        feedback = body.get("promptFeedback", {})
        raise ModelRequestError(f"Model returned no candidates: {feedback}")

    parts = (candidates[0].get("content") or {}).get("parts") or []
    text = "".join(part.get("text", "") for part in parts)
    if not text:
        reason = candidates[0].get("finishReason", "unknown")
        raise ModelRequestError(f"Model reply has no text (finishReason={reason})")
    return text
