"""Exception hierarchy for hosting-tools.

Errors fall into three families:

1. Configuration errors, raised while compiling a user hosting config
2. API errors, raised when the hosting or identity backend rejects a request
3. Operation errors, raised while waiting on a long-running operation
"""

from __future__ import annotations

import json
from typing import Any


class HostingError(Exception):
    """Base class for all hosting-tools errors."""


class HostingConfigError(HostingError):
    """Raised when a user hosting configuration cannot be compiled."""


class ConflictingPatternError(HostingConfigError):
    """Raised when a rule specifies both a glob and a regex.

    Attributes:
        kind: Rule kind ("rewrite", "redirect" or "header")
    """

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(f"Cannot specify a {kind} pattern with both a glob and regex.")


class MissingPatternError(HostingConfigError):
    """Raised when a rule specifies neither a glob nor a regex.

    Attributes:
        kind: Rule kind ("rewrite", "redirect" or "header")
    """

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(
            f"Cannot specify a {kind} with no pattern (either a glob or regex required)."
        )


class UnknownRewriteError(HostingConfigError):
    """Raised when a rewrite has no recognized destination.

    Attributes:
        rule: The raw rewrite entry as found in the user config
    """

    def __init__(self, rule: Any):
        self.rule = rule
        super().__init__(f"unknown rewrite: {json.dumps(rule, default=str)}")


class InvalidRedirectError(HostingConfigError):
    """Raised when a redirect carries a status code outside the 3xx range."""

    def __init__(self, status_code: Any):
        self.status_code = status_code
        super().__init__(
            f"Redirect status code must be a valid 3xx code, got {status_code!r}."
        )


class ApiError(HostingError):
    """Raised when a backend responds with a non-success status.

    Attributes:
        status: HTTP status code
        url: Requested URL
        body: Decoded response body, if any
    """

    def __init__(
        self,
        message: str,
        *,
        status: int,
        url: str | None = None,
        body: Any = None,
    ):
        self.status = status
        self.url = url
        self.body = body
        super().__init__(message)


class ChannelsNotFoundError(HostingError):
    """Raised when the channel collection of a site does not exist."""

    def __init__(self, site: str):
        self.site = site
        super().__init__(f'could not find channels for site "{site}"')


class VersionStateError(HostingError):
    """Raised when a version snapshot cannot make the requested transition."""


class OperationError(HostingError):
    """Base class for long-running operation failures.

    Attributes:
        operation_name: Resource name of the operation
    """

    def __init__(self, message: str, *, operation_name: str):
        self.operation_name = operation_name
        super().__init__(message)


class OperationTimeoutError(OperationError):
    """Raised when an operation does not complete within the master timeout."""


class OperationFailedError(OperationError):
    """Raised when an operation completes with an error status."""
