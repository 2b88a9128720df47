"""Reason code constants for staleness decisions.

These constants prevent stringly-typed reasons and ensure
client code branches on the correct values.
"""

from enum import Enum


class StalenessReason(str, Enum):
    """Why an image must be regenerated (or that it need not be)."""

    # Regenerate
    NO_ARTIFACT = "NO_ARTIFACT"
    NO_METADATA = "NO_METADATA"
    CHECKSUM_CHANGED = "CHECKSUM_CHANGED"
    SOURCE_NEWER = "SOURCE_NEWER"

    # Reuse
    UP_TO_DATE = "UP_TO_DATE"
