"""
Thin wrapper around the google-genai SDK.
"""

import json
import logging
import time

from google import genai

from config import GEMINI_API_KEY, GEMINI_MODEL

logger = logging.getLogger(__name__)

ATTEMPTS = 2
TIMEOUT_MS = 60_000


class GeminiError(Exception):
    """Raised when the model cannot produce a response"""


class GeminiNotConfigured(GeminiError):
    pass


def strip_code_fences(text: str) -> str:
    return text.strip().replace("```json", "").replace("```", "").strip()


def parse_json_response(text: str):
    """Parse a model response that may be wrapped in a ```json fence."""
    return json.loads(strip_code_fences(text))


class GeminiClient:
    def __init__(self, api_key: str | None = GEMINI_API_KEY, model: str = GEMINI_MODEL):
        self.api_key = api_key
        self.model = model
        self._client = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if not self.configured:
            raise GeminiNotConfigured("GEMINI_API_KEY not configured")
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def generate_text(self, prompt: str) -> str:
        client = self._get_client()
        last_error = None
        for attempt in range(ATTEMPTS):
            try:
                response = client.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config={"http_options": {"timeout": TIMEOUT_MS}},
                )
                if not response.text:
                    raise GeminiError("empty response")
                return response.text
            except Exception as e:
                last_error = e
                logger.warning(f"Gemini error (attempt {attempt + 1}/{ATTEMPTS}): {e}")
                if attempt + 1 < ATTEMPTS:
                    time.sleep(1)

        logger.error(f"Gemini failed after {ATTEMPTS} attempts: {last_error}")
        raise GeminiError("Model service temporarily unavailable") from last_error

    def generate_json(self, prompt: str):
        """
        Generate and parse a JSON response.

        Returns (parsed, raw_text); parsed is None when the text is not JSON,
        so callers can fall back to the raw text.
        """
        text = self.generate_text(prompt)
        try:
            return parse_json_response(text), text
        except json.JSONDecodeError:
            logger.warning("Gemini response was not valid JSON; falling back to raw text")
            return None, text


def get_gemini_client() -> GeminiClient:
    """FastAPI dependency"""
    return GeminiClient()
