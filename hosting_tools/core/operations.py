"""Long-running operation polling.

Backend calls such as version cloning return an operation handle instead of
the finished resource. An ``OperationPoller`` waits for the operation to be
done and hands back its response, or fails with an ``OperationError``.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol

import httpx
import structlog

from hosting_tools.core.api_client import ApiClient
from hosting_tools.core.config import PollerConfig
from hosting_tools.core.errors import OperationFailedError, OperationTimeoutError
from hosting_tools.core.types import LongRunningOperation

logger = structlog.get_logger()


@dataclass(frozen=True)
class OperationPollRequest:
    """What to poll and for how long.

    Attributes:
        operation_name: Resource name of the operation
        api_origin: Origin of the API that owns the operation
        api_version: API version path segment
        master_timeout: Overall time budget in seconds
    """

    operation_name: str
    api_origin: str
    api_version: str
    master_timeout: float = 600.0


class OperationPoller(Protocol):
    """Waits for a long-running operation and returns its response."""

    async def poll(self, request: OperationPollRequest) -> dict[str, Any]:
        ...


class HttpOperationPoller:
    """Polls ``GET {origin}/{version}/{operation}`` with exponential backoff.

    Args:
        config: Poll interval and backoff settings
        access_token: Optional OAuth2 bearer token
        transport: Optional transport override (used by tests)
        sleep: Coroutine used to wait between polls
        clock: Monotonic clock in seconds
    """

    def __init__(
        self,
        config: PollerConfig | None = None,
        *,
        access_token: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or PollerConfig()
        self.access_token = access_token
        self._transport = transport
        self._sleep = sleep
        self._clock = clock

    async def poll(self, request: OperationPollRequest) -> dict[str, Any]:
        """Poll until the operation is done or the master timeout elapses.

        Returns:
            The operation's ``response`` payload

        Raises:
            OperationFailedError: If the operation finished with an error
            OperationTimeoutError: If it did not finish in time
            ApiError: If a poll request is rejected
        """
        deadline = self._clock() + request.master_timeout
        delay = self.config.interval
        attempt = 0

        async with ApiClient(
            request.api_origin,
            request.api_version,
            access_token=self.access_token,
            transport=self._transport,
        ) as client:
            while True:
                attempt += 1
                body = await client.get(f"/{request.operation_name}")
                operation = LongRunningOperation.model_validate(body)

                if operation.done:
                    if operation.error:
                        message = operation.error.get("message") or str(operation.error)
                        logger.error(
                            "operation_failed",
                            operation=request.operation_name,
                            error=message,
                        )
                        raise OperationFailedError(
                            f"Operation {request.operation_name} failed: {message}",
                            operation_name=request.operation_name,
                        )
                    logger.debug(
                        "operation_done",
                        operation=request.operation_name,
                        attempts=attempt,
                    )
                    return operation.response or {}

                remaining = deadline - self._clock()
                if remaining <= 0:
                    logger.error(
                        "operation_timeout",
                        operation=request.operation_name,
                        timeout=request.master_timeout,
                    )
                    raise OperationTimeoutError(
                        f"Operation {request.operation_name} did not complete "
                        f"within {request.master_timeout:g}s",
                        operation_name=request.operation_name,
                    )

                logger.debug(
                    "operation_pending",
                    operation=request.operation_name,
                    attempt=attempt,
                    wait=delay,
                )
                await self._sleep(min(delay, remaining))
                delay = min(delay * self.config.backoff_factor, self.config.max_backoff)
