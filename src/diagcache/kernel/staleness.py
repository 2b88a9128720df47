"""Staleness policies for generated diagram images.

Each policy returns a StalenessReason when the image must be regenerated and
None when the existing image can be reused.
"""

import os
from typing import Mapping, Optional, Union

from diagcache.codes import StalenessReason
from diagcache.kernel.metadata import MetadataRecord

PathLike = Union[str, "os.PathLike[str]"]
Metadata = Union[MetadataRecord, Mapping[str, object], None]


def _stored_checksum(metadata: Metadata) -> Optional[object]:
    if metadata is None:
        return None
    if isinstance(metadata, MetadataRecord):
        return metadata.checksum
    return metadata.get("checksum")


def artifact_reason(image_file: Optional[PathLike]) -> Optional[StalenessReason]:
    """An image that does not exist is always regenerated."""
    if image_file is None or not os.path.exists(image_file):
        return StalenessReason.NO_ARTIFACT
    return None


def checksum_reason(checksum: str, metadata: Metadata) -> Optional[StalenessReason]:
    """Content identity policy.

    Regenerate iff there is no prior record or its checksum differs. File
    times are deliberately not consulted here.
    """
    stored = _stored_checksum(metadata)
    if stored is None:
        return StalenessReason.NO_METADATA
    if stored != checksum:
        return StalenessReason.CHECKSUM_CHANGED
    return None


def mtime_reason(source_file: Optional[PathLike], image_file: PathLike) -> Optional[StalenessReason]:
    """Regenerate when the source file was modified strictly after the image."""
    if not source_file:
        return None
    if os.stat(source_file).st_mtime_ns > os.stat(image_file).st_mtime_ns:
        return StalenessReason.SOURCE_NEWER
    return None
