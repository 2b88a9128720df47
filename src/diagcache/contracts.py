"""Public result models for diagcache package."""

from typing import Optional
from pydantic import BaseModel

from diagcache.codes import StalenessReason


class StalenessDecision(BaseModel):
    """Outcome of a staleness check for one diagram occurrence."""
    image_name: str
    image_file: str
    checksum: str
    regenerate: bool
    reason: StalenessReason
    metadata_file: Optional[str] = None  # sidecar consulted, if one existed
