"""Base Pydantic model configuration for Interlace models.

All Interlace models inherit from InterlaceBaseModel:
- Immutability (frozen=True), so results can be shared between handlers
- Strict validation (extra="forbid") to catch typos and invalid fields
- Flexible field naming (populate_by_name=True) for alias support
"""

from pydantic import BaseModel, ConfigDict


class InterlaceBaseModel(BaseModel):
    """Base model for all Interlace value objects.

    Example:
        >>> class Marker(InterlaceBaseModel):
        ...     name: str
        >>> Marker(name="x") == Marker(name="x")
        True
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        populate_by_name=True,
        validate_default=True,
    )
