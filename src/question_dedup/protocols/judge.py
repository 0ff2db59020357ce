"""Protocol for the external semantic judge."""

from __future__ import annotations

from typing import Protocol


class SemanticJudge(Protocol):
    """Returns the judge's raw text answer for a prompt.

    Implementations raise ``RateLimited`` for 429-style refusals and
    ``TransientFailure`` for any other transport or server error.
    """

    async def request(self, prompt: str, system: str | None = None) -> str: ...
