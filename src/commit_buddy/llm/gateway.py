"""Backend gateway: send prompts through LiteLLM and classify the outcome."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import litellm
from litellm import exceptions as llm_exceptions
from tenacity import Retrying, retry_if_exception, stop_after_attempt, wait_fixed

if TYPE_CHECKING:
	from collections.abc import Callable

	from tenacity import RetryCallState

	from commit_buddy.config.config_schema import LLMSchema
	from commit_buddy.prompts.schemas import Prompt

logger = logging.getLogger(__name__)

SERVER_ERROR_STATUS = 500

TRANSIENT_ERRORS: tuple[type[BaseException], ...] = (
	llm_exceptions.Timeout,
	llm_exceptions.RateLimitError,
	llm_exceptions.APIConnectionError,
	llm_exceptions.ServiceUnavailableError,
	llm_exceptions.InternalServerError,
	TimeoutError,
	ConnectionError,
)

PERMANENT_ERRORS: tuple[type[BaseException], ...] = (
	llm_exceptions.AuthenticationError,
	llm_exceptions.PermissionDeniedError,
	llm_exceptions.BadRequestError,
	llm_exceptions.NotFoundError,
)


@dataclass(frozen=True)
class NoCredentials:
	"""No API key was configured; nothing was sent."""

	attempts: int = 0


@dataclass(frozen=True)
class Success:
	"""The backend returned a completion."""

	text: str
	attempts: int = 1


@dataclass(frozen=True)
class TransientFailure:
	"""The backend failed in a way that may succeed later (timeouts, rate limits, 5xx)."""

	reason: str
	attempts: int = 1


@dataclass(frozen=True)
class PermanentFailure:
	"""The backend rejected the request (auth, bad request, empty completion)."""

	reason: str
	attempts: int = 1


type BackendResult = NoCredentials | Success | TransientFailure | PermanentFailure


def is_transient(error: BaseException) -> bool:
	"""
	Decide whether a backend error is worth retrying.

	Args:
	    error: The exception raised by the transport

	Returns:
	    bool: True for timeouts, rate limits, connection and server errors

	"""
	if isinstance(error, PERMANENT_ERRORS):
		return False
	if isinstance(error, TRANSIENT_ERRORS):
		return True
	status_code = getattr(error, "status_code", None)
	return isinstance(status_code, int) and status_code >= SERVER_ERROR_STATUS


def extract_content(response: Any) -> str:  # noqa: ANN401
	"""Safely extract the completion text from a litellm response object or dict."""
	try:
		choice = response.choices[0]
		content = choice.message.content
	except (AttributeError, IndexError, TypeError):
		try:
			content = response["choices"][0]["message"]["content"]
		except (KeyError, IndexError, TypeError):
			logger.warning("Could not extract content from LLM response")
			return ""
	return content or ""


def _log_retry(retry_state: RetryCallState) -> None:
	"""Log a transient failure before waiting for the next attempt."""
	error = retry_state.outcome.exception() if retry_state.outcome else None
	wait = retry_state.next_action.sleep if retry_state.next_action else 0.0
	logger.info("Transient backend failure (%s: %s), retrying in %.1fs", type(error).__name__, error, wait)


class BackendGateway:
	"""Sends prompts to the generative backend with a timeout and a bounded retry policy."""

	def __init__(
		self,
		model: str,
		*,
		api_base: str | None = None,
		temperature: float = 0.7,
		max_output_tokens: int = 2000,
		timeout: float = 30.0,
		max_retries: int = 1,
		retry_backoff: float = 2.0,
		transport: Callable[..., Any] | None = None,
		sleep: Callable[[float], None] = time.sleep,
	) -> None:
		"""
		Initialize the gateway.

		Args:
		    model: LiteLLM model identifier, e.g. ``openai/gpt-4o-mini``
		    api_base: Optional API base URL
		    temperature: Sampling temperature
		    max_output_tokens: Maximum tokens in the completion
		    timeout: Request timeout in seconds
		    max_retries: Retries after a transient failure
		    retry_backoff: Seconds to wait before each retry
		    transport: Completion callable, defaults to ``litellm.completion``
		    sleep: Sleep function used for the backoff

		"""
		self.model = model
		self.api_base = api_base
		self.temperature = temperature
		self.max_output_tokens = max_output_tokens
		self.timeout = timeout
		self.max_retries = max(max_retries, 0)
		self.retry_backoff = retry_backoff
		self._transport = transport or litellm.completion
		self._sleep = sleep

	@classmethod
	def from_config(cls, config: LLMSchema, **kwargs: Any) -> BackendGateway:  # noqa: ANN401
		"""Create a gateway from the ``llm`` configuration section."""
		return cls(
			config.model,
			api_base=config.api_base,
			temperature=config.temperature,
			max_output_tokens=config.max_output_tokens,
			timeout=config.timeout,
			max_retries=config.max_retries,
			retry_backoff=config.retry_backoff,
			**kwargs,
		)

	def _complete(self, prompt: Prompt, credentials: str) -> str:
		request_params: dict[str, Any] = {
			"model": self.model,
			"messages": prompt.messages(),
			"api_key": credentials,
			"temperature": self.temperature,
			"max_tokens": self.max_output_tokens,
			"timeout": self.timeout,
		}
		if self.api_base:
			request_params["api_base"] = self.api_base

		logger.debug(
			"Calling LiteLLM: Model=%s, API_Base=%s, Kind=%s, Context=%d chars",
			self.model,
			self.api_base or "Default",
			prompt.kind.value,
			len(prompt.context),
		)
		response = self._transport(**request_params)
		return extract_content(response).strip()

	def send(self, prompt: Prompt, credentials: str | None) -> BackendResult:
		"""
		Send a prompt and classify the outcome.

		Never raises for backend failures; they are returned as values.

		Args:
		    prompt: The composed prompt
		    credentials: API key, or None when none is configured

		Returns:
		    BackendResult: One of NoCredentials, Success, TransientFailure, PermanentFailure

		"""
		if not credentials:
			logger.debug("No credentials configured, skipping backend call")
			return NoCredentials()

		retrying = Retrying(
			retry=retry_if_exception(is_transient),
			stop=stop_after_attempt(self.max_retries + 1),
			wait=wait_fixed(self.retry_backoff),
			sleep=self._sleep,
			before_sleep=_log_retry,
			reraise=True,
		)
		attempts = 0
		text = ""
		try:
			for attempt in retrying:
				with attempt:
					attempts = attempt.retry_state.attempt_number
					text = self._complete(prompt, credentials)
		except Exception as e:
			reason = f"{type(e).__name__}: {e}"
			if is_transient(e):
				logger.warning("Backend request failed after %d attempts: %s", attempts, reason)
				return TransientFailure(reason=reason, attempts=attempts)
			logger.warning("Backend request failed permanently: %s", reason)
			return PermanentFailure(reason=reason, attempts=attempts)

		if not text:
			return PermanentFailure(reason="Empty completion from model", attempts=attempts)
		logger.debug("Backend returned %d chars after %d attempts", len(text), attempts)
		return Success(text=text, attempts=attempts)
