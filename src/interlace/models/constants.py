"""Interlace constants."""

# Channel used when a caller or a handler declaration names none
DEFAULT_CHANNEL = "/what"

# Effectively unbounded result count for discover_many
DEFAULT_LIMIT = 1_000_000

# Channel on which document modules offer navigation actions
NAVIGATE_CHANNEL = "navigateTo"
