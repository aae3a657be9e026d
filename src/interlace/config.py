"""Engine configuration.

EngineSettings holds the defaults a DiscoveryEngine applies when a caller
leaves channel, limit or cancellation unspecified.

Environment Variables:
    INTERLACE_DEFAULT_CHANNEL: Channel used when none is given (default "/what")
    INTERLACE_DEFAULT_LIMIT: Result cap for discover_many (default 1000000)
    INTERLACE_MATCH_SUBCLASSES: "true"/"1" to also dispatch on base classes
    INTERLACE_CALL_TIMEOUT: Deadline in seconds for a whole call (unset: none)

Example:
    >>> settings = EngineSettings(default_channel="/menu", default_limit=50)
    >>> settings.default_limit
    50
"""

from __future__ import annotations

import os

from pydantic import Field

from interlace.models.base import InterlaceBaseModel
from interlace.models.constants import DEFAULT_CHANNEL, DEFAULT_LIMIT

ENV_DEFAULT_CHANNEL = "INTERLACE_DEFAULT_CHANNEL"
ENV_DEFAULT_LIMIT = "INTERLACE_DEFAULT_LIMIT"
ENV_MATCH_SUBCLASSES = "INTERLACE_MATCH_SUBCLASSES"
ENV_CALL_TIMEOUT = "INTERLACE_CALL_TIMEOUT"

_TRUTHY = ("true", "1", "yes", "on")


class EngineSettings(InterlaceBaseModel):
    """Defaults for a DiscoveryEngine.

    Attributes:
        default_channel: Channel used when a call names none
        default_limit: Result cap used when a call passes no limit
        match_subclasses: Also run handlers registered for base classes of
            the seed's type, after the exact-type handlers, in MRO order
        call_timeout_seconds: Deadline for one whole top-level discovery
            call, shared by all its handlers (not a per-handler timeout).
            Applied only when the caller supplies no cancel scope
    """

    default_channel: str = Field(default=DEFAULT_CHANNEL, min_length=1)
    default_limit: int = Field(default=DEFAULT_LIMIT, ge=1)
    match_subclasses: bool = False
    call_timeout_seconds: float | None = Field(default=None, gt=0)

    @classmethod
    def from_env(cls) -> EngineSettings:
        """Build settings from INTERLACE_* environment variables.

        Raises:
            pydantic.ValidationError: If a variable holds an invalid value
        """
        values: dict[str, object] = {}
        channel = os.environ.get(ENV_DEFAULT_CHANNEL, "").strip()
        if channel:
            values["default_channel"] = channel
        limit = os.environ.get(ENV_DEFAULT_LIMIT, "").strip()
        if limit:
            values["default_limit"] = limit
        match = os.environ.get(ENV_MATCH_SUBCLASSES, "").strip().lower()
        if match:
            values["match_subclasses"] = match in _TRUTHY
        timeout = os.environ.get(ENV_CALL_TIMEOUT, "").strip()
        if timeout:
            values["call_timeout_seconds"] = timeout
        return cls.model_validate(values)
