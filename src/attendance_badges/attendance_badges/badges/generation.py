from __future__ import annotations

import random
from typing import Any, Dict, Optional, Sequence
from urllib.parse import quote

import httpx

from ..core.constants import BADGE_PROMPT_PREFIX, BADGE_PROMPT_WORD_COUNT
from ..core.exceptions import GenerationError

# Characters encodeURIComponent leaves alone besides the ones quote() always keeps.
_URI_COMPONENT_SAFE = "!*'()"


def build_prompt(words: Sequence[str], rng: Optional[random.Random] = None) -> str:
    """Five words drawn uniformly with replacement, wrapped in a sentence."""
    rng = rng or random.SystemRandom()
    picked = rng.choices(list(words), k=BADGE_PROMPT_WORD_COUNT)
    return BADGE_PROMPT_PREFIX + " ".join(picked)


class BadgeImageGenerator:
    """Client for the text-to-image endpoint (prompt travels in the URL path)."""

    def __init__(
        self,
        *,
        endpoint: str,
        model: str,
        width: int,
        height: int,
        api_key: Optional[str],
        timeout: float = 120.0,
    ):
        self.endpoint = endpoint
        self.model = model
        self.width = int(width)
        self.height = int(height)
        self.api_key = api_key
        self.timeout = timeout

    def build_url(self, prompt: str) -> str:
        return f"{self.endpoint}{quote(prompt, safe=_URI_COMPONENT_SAFE)}"

    def build_params(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "width": self.width,
            "height": self.height,
            "nologo": "true",
            "private": "true",
        }

    def build_headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    async def generate(self, client: httpx.AsyncClient, prompt: str) -> bytes:
        response = await client.get(
            self.build_url(prompt),
            params=self.build_params(),
            headers=self.build_headers(),
        )
        return self.parse_response(response)

    @staticmethod
    def parse_response(response: httpx.Response) -> bytes:
        """Return image bytes, or raise GenerationError for HTTP or API errors."""

        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                body = None
            if response.status_code != 200 or (isinstance(body, dict) and body.get("success") is False):
                detail = response.text[:500] if response.text else "No details"
                raise GenerationError(f"API Error: {detail}", status_code=response.status_code)
        elif response.status_code != 200:
            raise GenerationError(f"HTTP Error: {response.status_code}", status_code=response.status_code)

        return response.content
