"""
LLM CLIENT - ADVISORY TEXT GENERATION
Sends an advisory prompt to the Gemini generateContent endpoint and returns the raw text.

Purpose:
- Build the generateContent request (prompt + fixed generation parameters)
- POST it with a bounded timeout
- Extract the first candidate's text parts and finish reason
- Map transport failures onto AdvisoryTimeoutError / AdvisoryTransportError

The client never interprets the text; see parser.py for that.
"""
from typing import Any, Dict, Optional
import logging

import requests

import config
from errors import AdvisoryTimeoutError, AdvisoryTransportError
from models import GenerationResponse

logger = logging.getLogger(__name__)


class GenerativeTextClient:
    """Thin wrapper over the generateContent REST call."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = config.GEMINI_BASE_URL,
        model: str = config.GEMINI_MODEL,
        timeout: float = config.REQUEST_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key if api_key is not None else config.GEMINI_API_KEY
        self.endpoint = f"{base_url.rstrip('/')}/{model}:generateContent"
        self.timeout = timeout
        # None means a fresh connection per call; worker threads never share a Session.
        self.session = session

    def build_payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "contents": [
                {
                    "role": "user",
                    "parts": [{"text": prompt}],
                }
            ],
            "generationConfig": dict(config.GENERATION_CONFIG),
        }

    def generate(self, prompt: str) -> GenerationResponse:
        if not self.api_key:
            logger.error("[LLM] ERROR: GEMINI_API_KEY is not set!")
            raise AdvisoryTransportError("GEMINI_API_KEY environment variable is not set")

        payload = self.build_payload(prompt)
        post = self.session.post if self.session is not None else requests.post
        logger.info("[LLM] Sending request to %s (prompt length %d)", self.endpoint, len(prompt))

        try:
            response = post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            logger.error("[LLM] Request timeout: %s", e)
            raise AdvisoryTimeoutError(str(e)) from e
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            logger.error("[LLM] HTTP Error: %s", status)
            raise AdvisoryTransportError(f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            logger.error("[LLM] Connection error: %s", e)
            raise AdvisoryTransportError(str(e)) from e
        except ValueError as e:
            logger.error("[LLM] Response body is not valid JSON: %s", e)
            raise AdvisoryTransportError("invalid JSON body") from e

        result = extract_generation(data)
        logger.info("[LLM] Response text length: %d (finish reason: %s)", len(result.text), result.finish_reason)
        return result


def extract_generation(data: Dict[str, Any]) -> GenerationResponse:
    """Join the first candidate's non-empty text parts with newlines."""
    candidates = (data or {}).get("candidates") or []
    if not candidates:
        return GenerationResponse(text="", finish_reason=None, raw=data or {})

    candidate = candidates[0] or {}
    parts = (candidate.get("content") or {}).get("parts") or []
    texts = [(part.get("text") or "").strip() for part in parts]
    return GenerationResponse(
        text="\n".join(t for t in texts if t),
        finish_reason=candidate.get("finishReason"),
        raw=data,
    )
