"""Interlace: interaction discovery for multimodal document integration.

Document modules register typed handlers on named channels; callers ask
the engine which results (menu entries, forwarded messages, ...) the
registered handlers can offer for a given object.

Example:
    >>> from interlace import MenuItem, create_engine
    >>> engine = create_engine(sketch_document)
    >>> items = engine.discover_many(click, MenuItem, channel="/menu")
"""

__version__ = "0.3.0"

from interlace.config import EngineSettings
from interlace.dispatch import (
    CancelScope,
    DiscoveryEngine,
    DiscoveryOutcome,
    DiscoveryResult,
    DispatchContext,
    ResultAcceptor,
    ServiceRegistry,
    create_engine,
    first_of_type,
    service,
)
from interlace.errors import (
    DiscoveryCancelledError,
    HandlerInvocationError,
    InterlaceError,
    RegistrationShapeError,
)
from interlace.models import (
    DEFAULT_CHANNEL,
    MenuItem,
    MessageForward,
    SemanticUri,
    SoftwareObject,
)

__all__ = [
    "__version__",
    "DEFAULT_CHANNEL",
    "CancelScope",
    "DiscoveryCancelledError",
    "DiscoveryEngine",
    "DiscoveryOutcome",
    "DiscoveryResult",
    "DispatchContext",
    "EngineSettings",
    "HandlerInvocationError",
    "InterlaceError",
    "MenuItem",
    "MessageForward",
    "RegistrationShapeError",
    "ResultAcceptor",
    "SemanticUri",
    "ServiceRegistry",
    "SoftwareObject",
    "create_engine",
    "first_of_type",
    "service",
]
