"""Public API for diagcache.

High-level functions that tie a diagram source to its image on disk: decide
whether the image is stale and persist fresh metadata after regeneration.
"""

import os
from pathlib import Path
from typing import Union

from loguru import logger

from diagcache.codes import StalenessReason
from diagcache.contracts import StalenessDecision
from diagcache.kernel.metadata import (
    DEFAULT_METADATA_SUFFIX,
    MetadataRecord,
    load_metadata,
    metadata_path_for,
    write_metadata,
)
from diagcache.kernel.source import DiagramSource


def _normalize_path(path: Union[str, os.PathLike, Path]) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


def image_path_for(
    source: DiagramSource,
    output_dir: Union[str, os.PathLike, Path],
    extension: str,
) -> Path:
    """Path of the image a source renders to inside output_dir.

    Args:
        source: Diagram source
        output_dir: Directory images are written to
        extension: Image format extension, with or without a leading dot
    """
    suffix = extension if extension.startswith(".") else f".{extension}"
    return _normalize_path(output_dir) / f"{source.image_name()}{suffix}"


def check(
    source: DiagramSource,
    image_file: Union[str, os.PathLike, Path],
    metadata_suffix: str = DEFAULT_METADATA_SUFFIX,
) -> StalenessDecision:
    """Decide whether the image generated from source must be regenerated.

    Loads the metadata sidecar stored next to image_file (if any) and asks the
    source for its staleness policy.

    Args:
        source: Diagram source
        image_file: Path to the previously generated image (may not exist)
        metadata_suffix: Sidecar suffix appended to the image file name

    Returns:
        StalenessDecision with the reason code
    """
    image_path = _normalize_path(image_file)
    metadata = load_metadata(image_path, metadata_suffix) if image_path.exists() else None

    reason = source.stale_reason(image_path, metadata)
    decision = StalenessDecision(
        image_name=source.image_name(),
        image_file=str(image_path),
        checksum=source.checksum(),
        regenerate=reason is not None,
        reason=reason or StalenessReason.UP_TO_DATE,
        metadata_file=str(metadata_path_for(image_path, metadata_suffix)) if metadata is not None else None,
    )
    logger.debug(f"{decision.image_name}: {decision.reason.value}")
    return decision


def record(
    source: DiagramSource,
    image_file: Union[str, os.PathLike, Path],
    metadata_suffix: str = DEFAULT_METADATA_SUFFIX,
) -> MetadataRecord:
    """Persist fresh metadata after the image has been regenerated.

    Any previous record is replaced wholesale.
    """
    metadata = source.create_metadata()
    write_metadata(_normalize_path(image_file), metadata, metadata_suffix)
    return metadata
