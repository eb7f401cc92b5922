"""Exponential-backoff retry for fallible async operations.

:class:`RetryExecutor` runs an operation, asks a caller-supplied classifier
whether each failure is worth retrying, and waits between attempts using an
injected ``sleep`` coroutine so tests can substitute a fake clock.

Example:
>>> executor = RetryExecutor(RetryPolicy(max_attempts=3, initial_delay=1000))
>>> page = await executor.execute(
...     lambda: client.search_code(query, page=1),
...     classify_github_error,
...     description="badge search page 1",
... )

"""

from __future__ import annotations

import asyncio
import collections.abc as cabc
import dataclasses
import enum
import typing as typ

from imir.logging import get_logger, log_debug, log_warning

logger = get_logger(__name__)


class RetryDecision(enum.StrEnum):
    """Verdict returned by a failure classifier."""

    RETRYABLE = "retryable"
    FATAL = "fatal"


T = typ.TypeVar("T")

Classifier: typ.TypeAlias = cabc.Callable[[Exception], RetryDecision]
Sleep: typ.TypeAlias = cabc.Callable[[float], cabc.Awaitable[object]]


class ExhaustedRetriesError(RuntimeError):
    """Raised when every attempt allowed by a policy failed retryably.

    Attributes
    ----------
    attempts
        Number of attempts made.
    last_error
        Failure raised by the final attempt; also the ``__cause__``.

    """

    def __init__(
        self, description: str, *, attempts: int, last_error: Exception
    ) -> None:
        """Initialise with the attempt count and the final failure."""
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"{description} failed after {attempts} attempts: {last_error}"
        )


@dataclasses.dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Attempt budget and backoff schedule.

    Attributes
    ----------
    max_attempts
        Total attempts, including the first; at least 1.
    initial_delay
        Milliseconds to wait after the first failure.
    backoff_factor
        Multiplier applied to the delay after each further failure; must
        exceed 1.0.

    """

    max_attempts: int = 3
    initial_delay: int = 1000
    backoff_factor: float = 2.0

    def __post_init__(self) -> None:
        """Reject budgets and schedules that cannot be executed."""
        if self.max_attempts < 1:
            msg = f"max_attempts must be at least 1, got {self.max_attempts}"
            raise ValueError(msg)
        if self.initial_delay < 0:
            msg = f"initial_delay must not be negative, got {self.initial_delay}"
            raise ValueError(msg)
        if self.backoff_factor <= 1.0:
            msg = f"backoff_factor must be greater than 1.0, got {self.backoff_factor}"
            raise ValueError(msg)

    def delay_for(self, attempt: int) -> int:
        """Return the wait in milliseconds after attempt number ``attempt`` fails."""
        return round(self.initial_delay * self.backoff_factor ** (attempt - 1))


@dataclasses.dataclass(frozen=True, slots=True)
class RetryState:
    """Position in a retry schedule.

    ``delay_ms`` is the wait applied if attempt number ``attempt`` fails.
    """

    attempt: int
    delay_ms: int

    @classmethod
    def initial(cls, policy: RetryPolicy) -> RetryState:
        """Return the state before the first attempt."""
        return cls(attempt=1, delay_ms=policy.delay_for(1))

    def advance(self, policy: RetryPolicy) -> RetryState:
        """Return the state for the next attempt."""
        attempt = self.attempt + 1
        return RetryState(attempt=attempt, delay_ms=policy.delay_for(attempt))

    def is_last(self, policy: RetryPolicy) -> bool:
        """Return ``True`` when no attempts remain after this one."""
        return self.attempt >= policy.max_attempts


class RetryExecutor:
    """Run async operations under a :class:`RetryPolicy`."""

    def __init__(
        self, policy: RetryPolicy | None = None, *, sleep: Sleep = asyncio.sleep
    ) -> None:
        """Initialise with a policy and the coroutine used to wait (seconds)."""
        self._policy = policy or RetryPolicy()
        self._sleep = sleep

    @property
    def policy(self) -> RetryPolicy:
        """Return the policy applied to every operation."""
        return self._policy

    async def execute(
        self,
        operation: cabc.Callable[[], cabc.Awaitable[T]],
        classify: Classifier,
        *,
        description: str = "operation",
    ) -> T:
        """Run ``operation`` until it succeeds or the policy gives up.

        Parameters
        ----------
        operation
            Zero-argument callable returning a fresh awaitable per attempt.
        classify
            Decides whether a failure is retryable.
        description
            Human-readable name used in logs and errors.

        Returns
        -------
        T
            The operation's result.

        Raises
        ------
        ExhaustedRetriesError
            If the final permitted attempt fails retryably.
        Exception
            The original failure when ``classify`` deems it fatal.

        Cancellation while waiting propagates at once and no further attempt
        is made.

        """
        state = RetryState.initial(self._policy)
        while True:
            try:
                result = await operation()
            except Exception as exc:
                if classify(exc) is RetryDecision.FATAL:
                    raise
                if state.is_last(self._policy):
                    log_warning(
                        logger,
                        "%s failed after %d attempts: %s",
                        description,
                        state.attempt,
                        exc,
                    )
                    raise ExhaustedRetriesError(
                        description, attempts=state.attempt, last_error=exc
                    ) from exc
                log_warning(
                    logger,
                    "%s failed on attempt %d/%d, retrying in %d ms: %s",
                    description,
                    state.attempt,
                    self._policy.max_attempts,
                    state.delay_ms,
                    exc,
                )
                await self._sleep(state.delay_ms / 1000)
                state = state.advance(self._policy)
                continue

            if state.attempt > 1:
                log_debug(
                    logger,
                    "%s succeeded on attempt %d",
                    description,
                    state.attempt,
                )
            return result
