"""Tests for the backend gateway."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import litellm
import pytest

from commit_buddy.artifacts.schemas import ArtifactKind
from commit_buddy.config.config_schema import LLMSchema
from commit_buddy.llm.gateway import (
	BackendGateway,
	NoCredentials,
	PermanentFailure,
	Success,
	TransientFailure,
	extract_content,
	is_transient,
)
from commit_buddy.prompts.schemas import Prompt

PROMPT = Prompt(
	kind=ArtifactKind.CHANGELOG,
	system="You write changelogs.",
	user="Write the changelog.",
	context="Commits:\n- abc fix: a bug",
	char_budget=1000,
)


def _response(text: str | None) -> SimpleNamespace:
	return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=text))])


class ServerError(Exception):
	"""Exception carrying an HTTP status code."""

	def __init__(self, status_code: int) -> None:
		"""Store the status code."""
		super().__init__(f"HTTP {status_code}")
		self.status_code = status_code


@pytest.fixture
def sleep() -> MagicMock:
	"""Sleep replacement that records backoff delays."""
	return MagicMock()


@pytest.mark.unit
@pytest.mark.llm
class TestBackendGateway:
	"""Sending prompts and classifying outcomes."""

	def test_no_credentials_never_calls_transport(self, sleep: MagicMock) -> None:
		"""Without an API key nothing is sent."""
		transport = MagicMock()
		gateway = BackendGateway("openai/gpt-4o-mini", transport=transport, sleep=sleep)

		assert gateway.send(PROMPT, None) == NoCredentials()
		assert gateway.send(PROMPT, "") == NoCredentials()
		transport.assert_not_called()

	def test_success(self, sleep: MagicMock) -> None:
		"""A completion is returned stripped, with the request parameters passed through."""
		transport = MagicMock(return_value=_response("  ## Added\n- thing  \n"))
		gateway = BackendGateway(
			"openai/gpt-4o-mini",
			api_base="http://localhost:4000",
			temperature=0.2,
			max_output_tokens=500,
			timeout=5.0,
			transport=transport,
			sleep=sleep,
		)

		result = gateway.send(PROMPT, "sk-test")

		assert result == Success(text="## Added\n- thing", attempts=1)
		kwargs = transport.call_args.kwargs
		assert kwargs["model"] == "openai/gpt-4o-mini"
		assert kwargs["api_key"] == "sk-test"
		assert kwargs["api_base"] == "http://localhost:4000"
		assert kwargs["temperature"] == 0.2
		assert kwargs["max_tokens"] == 500
		assert kwargs["timeout"] == 5.0
		assert kwargs["messages"] == PROMPT.messages()
		sleep.assert_not_called()

	def test_retries_transient_failure_once(self, sleep: MagicMock) -> None:
		"""A transient failure is retried once after the backoff."""
		transport = MagicMock(side_effect=[TimeoutError("timed out"), _response("ok")])
		gateway = BackendGateway("m", max_retries=1, retry_backoff=1.5, transport=transport, sleep=sleep)

		result = gateway.send(PROMPT, "sk-test")

		assert result == Success(text="ok", attempts=2)
		assert transport.call_count == 2
		sleep.assert_called_once_with(1.5)

	def test_transient_failure_after_retries(self, sleep: MagicMock) -> None:
		"""Repeated transient failures are reported with the attempt count."""
		transport = MagicMock(side_effect=ConnectionError("refused"))
		gateway = BackendGateway("m", max_retries=2, transport=transport, sleep=sleep)

		result = gateway.send(PROMPT, "sk-test")

		assert isinstance(result, TransientFailure)
		assert result.attempts == 3
		assert "refused" in result.reason
		assert sleep.call_count == 2

	def test_permanent_failure_is_not_retried(self, sleep: MagicMock) -> None:
		"""Authentication errors fail immediately."""
		error = litellm.AuthenticationError(message="bad key", llm_provider="openai", model="gpt-4o-mini")
		transport = MagicMock(side_effect=error)
		gateway = BackendGateway("m", max_retries=3, transport=transport, sleep=sleep)

		result = gateway.send(PROMPT, "sk-bad")

		assert isinstance(result, PermanentFailure)
		assert result.attempts == 1
		assert transport.call_count == 1
		sleep.assert_not_called()

	def test_zero_retries_makes_a_single_attempt(self, sleep: MagicMock) -> None:
		"""With retries disabled a transient failure is reported after one attempt."""
		transport = MagicMock(side_effect=TimeoutError("timed out"))
		gateway = BackendGateway("m", max_retries=0, transport=transport, sleep=sleep)

		result = gateway.send(PROMPT, "sk-test")

		assert result == TransientFailure(reason="TimeoutError: timed out", attempts=1)
		sleep.assert_not_called()

	def test_permanent_failure_after_retry_counts_attempts(self, sleep: MagicMock) -> None:
		"""A permanent error on a retry stops immediately and keeps the attempt number."""
		transport = MagicMock(side_effect=[ServerError(502), ValueError("bad input"), _response("never")])
		gateway = BackendGateway("m", max_retries=3, retry_backoff=0.25, transport=transport, sleep=sleep)

		result = gateway.send(PROMPT, "sk-test")

		assert result == PermanentFailure(reason="ValueError: bad input", attempts=2)
		assert transport.call_count == 2
		sleep.assert_called_once_with(0.25)

	def test_retry_is_logged(self, sleep: MagicMock, caplog: pytest.LogCaptureFixture) -> None:
		"""Each wait before a retry is logged with the failure."""
		transport = MagicMock(side_effect=[ConnectionError("refused"), _response("ok")])
		gateway = BackendGateway("m", max_retries=1, retry_backoff=1.0, transport=transport, sleep=sleep)

		with caplog.at_level("INFO", logger="commit_buddy.llm.gateway"):
			gateway.send(PROMPT, "sk-test")

		assert "Transient backend failure (ConnectionError: refused), retrying in 1.0s" in caplog.text

	def test_empty_completion_is_permanent(self, sleep: MagicMock) -> None:
		"""An empty completion cannot be used."""
		gateway = BackendGateway("m", transport=MagicMock(return_value=_response("   ")), sleep=sleep)
		assert gateway.send(PROMPT, "sk-test") == PermanentFailure(reason="Empty completion from model")

	def test_from_config(self) -> None:
		"""The llm config section maps onto the gateway settings."""
		config = LLMSchema(model="anthropic/claude-3-haiku", timeout=12, max_retries=0, retry_backoff=0.5)
		gateway = BackendGateway.from_config(config)
		assert gateway.model == "anthropic/claude-3-haiku"
		assert gateway.timeout == 12
		assert gateway.max_retries == 0
		assert gateway.retry_backoff == 0.5


@pytest.mark.unit
@pytest.mark.llm
class TestClassification:
	"""Transient versus permanent errors."""

	@pytest.mark.parametrize(
		("error", "expected"),
		[
			(TimeoutError("slow"), True),
			(ConnectionError("down"), True),
			(ServerError(503), True),
			(ServerError(500), True),
			(ServerError(404), False),
			(ValueError("bad input"), False),
			(litellm.RateLimitError(message="slow down", llm_provider="openai", model="gpt-4o-mini"), True),
			(litellm.AuthenticationError(message="no", llm_provider="openai", model="gpt-4o-mini"), False),
		],
	)
	def test_is_transient(self, error: Exception, expected: bool) -> None:
		"""Timeouts, rate limits and server errors are transient."""
		assert is_transient(error) is expected

	def test_extract_content_from_dict(self) -> None:
		"""Dict responses are supported as well as objects."""
		assert extract_content({"choices": [{"message": {"content": "hello"}}]}) == "hello"
		assert extract_content({"choices": []}) == ""
		assert extract_content(_response(None)) == ""
