"""Text-generation client for narrative survey summaries.

Thin HTTP wrapper around the external summary function with:
- Structured JSON output with Pydantic validation
- Retry with exponential backoff (single attempt by default)

Every failure mode (transport error, non-2xx status, invalid JSON, schema
mismatch) surfaces as SummaryGenerationFailed. The client never invents a
summary; falling back is the caller's decision.
"""

import asyncio
import json
import logging
import re
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, Field, ValidationError, model_validator

from wellbeing.errors import SummaryGenerationFailed

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


# ---------------------------------------------------------------------------
# Reply schema
# ---------------------------------------------------------------------------


class SummaryPayload(BaseModel):
    """Reply of the summary function."""

    model_config = {"populate_by_name": True}

    introduction: str = ""
    strengths: list[str] = Field(default_factory=list)
    improvements: list[str] = Field(default_factory=list)
    insufficient_data: bool = Field(default=False, alias="insufficientData")

    @model_validator(mode="after")
    def _has_content(self) -> "SummaryPayload":
        if not self.insufficient_data and not (self.strengths or self.improvements):
            raise ValueError("summary has neither strengths nor improvements")
        return self


# ---------------------------------------------------------------------------
# JSON extraction helpers
# ---------------------------------------------------------------------------

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def _extract_json(raw: str) -> str:
    """Extract JSON from raw model output, stripping markdown fences."""
    match = _JSON_BLOCK_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class TextGenerationClient:
    """POSTs survey metrics to the summary function and validates the reply."""

    def __init__(
        self,
        *,
        endpoint: str,
        api_key: str = "",
        timeout: float = 30.0,
        max_retries: int = 1,
        base_delay: float = 1.0,
    ) -> None:
        self._endpoint = endpoint
        self._api_key = api_key
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay

    # ----- Structured output parsing -----

    def parse_structured_output(self, *, raw: str, schema: type[T]) -> T:
        """Parse raw output into a validated Pydantic model.

        Raises ValueError if JSON is invalid or fails schema validation.
        """
        cleaned = _extract_json(raw)
        try:
            data = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON from summary service: {exc}") from exc
        try:
            return schema.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Schema validation failed: {exc}") from exc

    # ----- Retry / backoff -----

    def compute_backoff_delays(self) -> list[float]:
        """Delays to sleep between attempts (one fewer than the attempt count)."""
        return [self.base_delay * (2**i) for i in range(self.max_retries - 1)]

    # ----- Calls -----

    async def generate(self, payload: dict[str, Any]) -> SummaryPayload:
        """Request a summary, retrying per ``max_retries``.

        Raises SummaryGenerationFailed once every attempt has failed.
        """
        delays = self.compute_backoff_delays()
        attempt = 0
        while True:
            try:
                return await self._call(payload)
            except SummaryGenerationFailed as exc:
                logger.warning(
                    "Summary request attempt %d/%d failed: %s",
                    attempt + 1,
                    self.max_retries,
                    exc,
                )
                if attempt >= len(delays):
                    raise
            await asyncio.sleep(delays[attempt])
            attempt += 1

    async def _call(self, payload: dict[str, Any]) -> SummaryPayload:
        headers = {"Content-Type": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.post(self._endpoint, headers=headers, json=payload)
                resp.raise_for_status()
        except httpx.HTTPError as exc:
            raise SummaryGenerationFailed(f"Summary service request failed: {exc}") from exc

        try:
            return self.parse_structured_output(raw=resp.text, schema=SummaryPayload)
        except ValueError as exc:
            raise SummaryGenerationFailed(str(exc)) from exc
