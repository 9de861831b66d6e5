from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    RetryError,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
)

from ideaforge.core.config.schema import RuntimeConfig
from ideaforge.core.runtime.errors import TransportExhausted, compact_error_summary


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    max_retries: int = 5
    base_delay_seconds: float = 0.5
    jitter_seconds: float = 0.2

    @classmethod
    def from_config(cls, runtime: RuntimeConfig) -> RetryPolicy:
        return cls(
            max_retries=runtime.max_retries,
            base_delay_seconds=runtime.base_delay_seconds,
            jitter_seconds=runtime.jitter_seconds,
        )


def backoff_delay(policy: RetryPolicy, retry_number: int, rand: Callable[[], float] = random.random) -> float:
    """Delay before the ``retry_number``-th retry (1-indexed).

    ``base * 2**(k-1)`` plus jitter drawn from ``[0, jitter_seconds)``.
    """
    if retry_number <= 0:
        return 0.0
    delay = policy.base_delay_seconds * (2 ** (retry_number - 1))
    return delay + rand() * policy.jitter_seconds


def _is_server_error(response: httpx.Response) -> bool:
    return response.status_code >= 500


class ResilientTransport:
    """Issues one HTTP request with bounded retry on connection errors and 5xx.

    4xx responses come back to the caller untouched. Retry state lives in a
    fresh ``AsyncRetrying`` per call, so one instance can serve concurrent
    requests.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        policy: RetryPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        rand: Callable[[], float] = random.random,
        on_retry: Callable[[int, float, str], None] | None = None,
    ) -> None:
        self.client = client
        self.policy = policy or RetryPolicy()
        self._sleep = sleep
        self._rand = rand
        self._on_retry = on_retry

    def _wait(self, retry_state: RetryCallState) -> float:
        return backoff_delay(self.policy, retry_state.attempt_number, rand=self._rand)

    def _before_sleep(self, retry_state: RetryCallState) -> None:
        if self._on_retry is None or retry_state.outcome is None or retry_state.next_action is None:
            return
        if retry_state.outcome.failed:
            reason = compact_error_summary(retry_state.outcome.exception())
        else:
            reason = f"status_{retry_state.outcome.result().status_code}"
        self._on_retry(retry_state.attempt_number, retry_state.next_action.sleep, reason)

    async def attempt(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(max(0, self.policy.max_retries) + 1),
            wait=self._wait,
            retry=retry_if_exception_type(httpx.TransportError) | retry_if_result(_is_server_error),
            sleep=self._sleep,
            before_sleep=self._before_sleep,
            reraise=False,
        )
        try:
            return await retrying(self.client.request, method, url, **kwargs)
        except RetryError as exc:
            last = exc.last_attempt
            attempts = last.attempt_number
            if last.failed:
                cause = last.exception()
                raise TransportExhausted(
                    f"{method} {url} failed after {attempts} attempts: {compact_error_summary(cause)}",
                    attempts=attempts,
                ) from cause
            response = last.result()
            raise TransportExhausted(
                f"{method} {url} returned {response.status_code} after {attempts} attempts",
                status_code=response.status_code,
                attempts=attempts,
            ) from None
