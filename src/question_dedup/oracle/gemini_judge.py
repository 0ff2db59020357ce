"""Google Gemini semantic judge using the google-genai SDK."""

from __future__ import annotations

from google import genai
from google.genai import errors, types

from question_dedup.exceptions import RateLimited, TransientFailure
from question_dedup.observability.logger import get_logger

logger = get_logger("gemini")


class GeminiJudge:
    def __init__(
        self,
        api_key: str,
        model: str = "gemini-2.0-flash",
        temperature: float = 0.0,
        max_tokens: int = 512,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def request(self, prompt: str, system: str | None = None) -> str:
        config = types.GenerateContentConfig(
            temperature=self._temperature,
            max_output_tokens=self._max_tokens,
        )
        if system:
            config.system_instruction = system

        try:
            response = await self._client.aio.models.generate_content(
                model=self._model,
                contents=prompt,
                config=config,
            )
        except errors.APIError as e:
            if e.code == 429:
                logger.warning("gemini_rate_limited", model=self._model)
                raise RateLimited(f"Gemini rate limited: {e}") from e
            raise TransientFailure(f"Gemini request failed ({e.code}): {e}") from e
        except Exception as e:
            raise TransientFailure(f"Gemini request failed: {e}") from e
        return response.text or ""
