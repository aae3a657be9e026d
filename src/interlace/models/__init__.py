"""Interlace Models.

Pydantic models for the values document modules exchange through the
discovery engine, plus package-wide constants.
"""

from interlace.models.base import InterlaceBaseModel
from interlace.models.constants import DEFAULT_CHANNEL, DEFAULT_LIMIT, NAVIGATE_CHANNEL
from interlace.models.interactions import (
    MenuItem,
    MessageForward,
    SemanticUri,
    SoftwareObject,
)

__all__ = [
    "DEFAULT_CHANNEL",
    "DEFAULT_LIMIT",
    "NAVIGATE_CHANNEL",
    "InterlaceBaseModel",
    "MenuItem",
    "MessageForward",
    "SemanticUri",
    "SoftwareObject",
]
