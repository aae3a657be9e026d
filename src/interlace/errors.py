"""Interlace Error Taxonomy.

This module defines the error hierarchy for the interaction dispatch
engine, providing structured errors with specific error codes and
context information.

Only registration and CLI errors ever reach a caller. Handler failures
are captured per invocation and reported inside a DiscoveryResult; a
type mismatch on an emitted value is a normal filtering outcome and has
no exception class at all.
"""
from __future__ import annotations

from typing import Any


class InterlaceError(Exception):
    """Base exception for all Interlace errors.

    Attributes:
        code: Error code following the interlace:<area>/<reason> pattern
        message: Human-readable error message
        details: Optional additional error context
    """

    def __init__(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serialize to ``{code, message, details}`` dict."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class RegistrationShapeError(InterlaceError):
    """Raised when a candidate handler does not follow the handler convention.

    A handler must accept exactly three positional parameters: the input
    value, a result acceptor and a dispatch context. The registry logs
    this error and skips the candidate; it never escapes ``register``.

    Attributes:
        owner: Name of the owning class (or "<function>" for free functions)
        handler_name: Name of the offending method or function
        rule: The violated rule, in plain words
    """

    def __init__(
        self,
        owner: str,
        handler_name: str,
        rule: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"{owner}.{handler_name} is not a valid handler: {rule}"
        super().__init__(
            code="interlace:registry/invalid_shape",
            message=message,
            details={
                "owner": owner,
                "handler_name": handler_name,
                "rule": rule,
                **(details or {}),
            },
        )
        self.owner = owner
        self.handler_name = handler_name
        self.rule = rule


class HandlerInvocationError(InterlaceError):
    """Records a handler that raised while processing a candidate.

    The engine never raises this; it builds one per failing invocation,
    chains the original exception as ``__cause__`` and reports it in
    ``DiscoveryResult.failures``.

    Attributes:
        handler_name: Qualified name of the failing handler (Owner.method)
        channel: Channel the discovery call ran on
        candidate_type: Name of the candidate's runtime type
    """

    def __init__(
        self,
        handler_name: str,
        channel: str,
        candidate_type: str,
        reason: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        message = f"Handler {handler_name} failed on {candidate_type} (channel {channel}): {reason}"
        super().__init__(
            code="interlace:dispatch/handler_failed",
            message=message,
            details={
                "handler_name": handler_name,
                "channel": channel,
                "candidate_type": candidate_type,
                "reason": reason,
                **(details or {}),
            },
        )
        self.handler_name = handler_name
        self.channel = channel
        self.candidate_type = candidate_type
        self.reason = reason


class DiscoveryCancelledError(InterlaceError):
    """Raised inside a handler that checks a cancel scope which has expired.

    Attributes:
        channel: Channel of the cancelled discovery call
    """

    def __init__(self, channel: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="interlace:dispatch/cancelled",
            message=f"Discovery on channel {channel} was cancelled",
            details={"channel": channel, **(details or {})},
        )
        self.channel = channel


class ModuleLoadError(InterlaceError):
    """Raised when the CLI cannot load a composition root.

    Attributes:
        target: The ``module:factory`` string that failed to load
        reason: Why loading failed
    """

    def __init__(self, target: str, reason: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="interlace:cli/module_load",
            message=f"Cannot load '{target}': {reason}",
            details={"target": target, "reason": reason, **(details or {})},
        )
        self.target = target
        self.reason = reason
