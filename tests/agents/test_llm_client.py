"""Tests for the text-generation client.

Covers: structured JSON output with Pydantic validation, markdown fence
stripping, transport and status failures, retry with exponential backoff.
The HTTP layer is mocked; no network access.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from wellbeing.agents.llm_client import SummaryPayload, TextGenerationClient, _extract_json
from wellbeing.errors import SummaryGenerationFailed

ENDPOINT = "https://functions.example/generate-survey-summary"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _make_response(body: str, *, status_error: bool = False) -> MagicMock:
    resp = MagicMock()
    resp.text = body
    if status_error:
        resp.raise_for_status.side_effect = httpx.HTTPStatusError(
            "500 Internal Server Error", request=MagicMock(), response=MagicMock()
        )
    return resp


def _mock_client(*, post: AsyncMock) -> AsyncMock:
    mock_client = AsyncMock()
    mock_client.post = post
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


GOOD_REPLY = json.dumps({
    "introduction": "Staff are broadly positive.",
    "strengths": ["Pride in the organisation", "Supportive colleagues"],
    "improvements": ["Workload management"],
})


# ===================================================================
# Structured output parsing
# ===================================================================


class TestStructuredOutput:
    """Parse and validate the reply body."""

    def test_parse_valid_json(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        parsed = client.parse_structured_output(raw=GOOD_REPLY, schema=SummaryPayload)
        assert parsed.strengths == ["Pride in the organisation", "Supportive colleagues"]
        assert parsed.insufficient_data is False

    def test_parse_fenced_json(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        parsed = client.parse_structured_output(raw=f"```json\n{GOOD_REPLY}\n```", schema=SummaryPayload)
        assert parsed.improvements == ["Workload management"]

    def test_insufficient_data_flag(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        parsed = client.parse_structured_output(raw='{"insufficientData": true}', schema=SummaryPayload)
        assert parsed.insufficient_data is True

    def test_invalid_json_raises(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        with pytest.raises(ValueError, match="Invalid JSON"):
            client.parse_structured_output(raw="not json", schema=SummaryPayload)

    def test_schema_mismatch_raises(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        with pytest.raises(ValueError, match="Schema validation failed"):
            client.parse_structured_output(raw='{"strengths": "one string"}', schema=SummaryPayload)

    def test_empty_summary_rejected(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT)
        with pytest.raises(ValueError):
            client.parse_structured_output(raw="{}", schema=SummaryPayload)

    def test_extract_json_plain(self) -> None:
        assert _extract_json('  {"a": 1}  ') == '{"a": 1}'


# ===================================================================
# Calls
# ===================================================================


class TestGenerate:
    """POST the payload and validate the reply."""

    @pytest.mark.anyio
    async def test_success(self) -> None:
        post = AsyncMock(return_value=_make_response(GOOD_REPLY))
        mock_client = _mock_client(post=post)
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=mock_client):
            client = TextGenerationClient(endpoint=ENDPOINT, api_key="secret")
            reply = await client.generate({"leavingContemplation": {}})

        assert reply.introduction == "Staff are broadly positive."
        call = post.call_args
        assert call.args[0] == ENDPOINT
        assert call.kwargs["json"] == {"leavingContemplation": {}}
        assert call.kwargs["headers"]["Authorization"] == "Bearer secret"

    @pytest.mark.anyio
    async def test_no_auth_header_without_key(self) -> None:
        post = AsyncMock(return_value=_make_response(GOOD_REPLY))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            await TextGenerationClient(endpoint=ENDPOINT).generate({})
        assert "Authorization" not in post.call_args.kwargs["headers"]

    @pytest.mark.anyio
    async def test_transport_error(self) -> None:
        post = AsyncMock(side_effect=httpx.ConnectError("connection refused"))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            with pytest.raises(SummaryGenerationFailed):
                await TextGenerationClient(endpoint=ENDPOINT).generate({})

    @pytest.mark.anyio
    async def test_timeout(self) -> None:
        post = AsyncMock(side_effect=httpx.ReadTimeout("timed out"))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            with pytest.raises(SummaryGenerationFailed):
                await TextGenerationClient(endpoint=ENDPOINT).generate({})

    @pytest.mark.anyio
    async def test_non_2xx_status(self) -> None:
        post = AsyncMock(return_value=_make_response("oops", status_error=True))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            with pytest.raises(SummaryGenerationFailed):
                await TextGenerationClient(endpoint=ENDPOINT).generate({})

    @pytest.mark.anyio
    async def test_garbage_reply(self) -> None:
        post = AsyncMock(return_value=_make_response("<html>error</html>"))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            with pytest.raises(SummaryGenerationFailed):
                await TextGenerationClient(endpoint=ENDPOINT).generate({})

    @pytest.mark.anyio
    async def test_single_attempt_by_default(self) -> None:
        post = AsyncMock(side_effect=httpx.ConnectError("refused"))
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            with pytest.raises(SummaryGenerationFailed):
                await TextGenerationClient(endpoint=ENDPOINT).generate({})
        assert post.call_count == 1

    @pytest.mark.anyio
    async def test_retries_then_succeeds(self) -> None:
        post = AsyncMock(side_effect=[httpx.ConnectError("refused"), _make_response(GOOD_REPLY)])
        with patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)):
            client = TextGenerationClient(endpoint=ENDPOINT, max_retries=2, base_delay=0.0)
            reply = await client.generate({})
        assert post.call_count == 2
        assert reply.strengths

    @pytest.mark.anyio
    async def test_every_attempt_failing_raises_last_error(self) -> None:
        post = AsyncMock(side_effect=[
            httpx.ConnectError("refused"),
            httpx.ReadTimeout("timed out"),
            _make_response("oops", status_error=True),
        ])
        sleep = AsyncMock()
        with (
            patch("wellbeing.agents.llm_client.httpx.AsyncClient", return_value=_mock_client(post=post)),
            patch("wellbeing.agents.llm_client.asyncio.sleep", sleep),
        ):
            client = TextGenerationClient(endpoint=ENDPOINT, max_retries=3, base_delay=0.5)
            with pytest.raises(SummaryGenerationFailed, match="500"):
                await client.generate({})
        assert post.call_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]


# ===================================================================
# Backoff
# ===================================================================


class TestBackoff:
    """Exponential delays between attempts."""

    def test_delays(self) -> None:
        client = TextGenerationClient(endpoint=ENDPOINT, max_retries=4, base_delay=1.0)
        assert client.compute_backoff_delays() == [1.0, 2.0, 4.0]

    def test_single_attempt_has_no_delay(self) -> None:
        assert TextGenerationClient(endpoint=ENDPOINT).compute_backoff_delays() == []

    def test_retries_floor_at_one(self) -> None:
        assert TextGenerationClient(endpoint=ENDPOINT, max_retries=0).max_retries == 1
