"""Image metadata records and their sidecar persistence.

A record is a flat mapping of string keys to scalar values stored next to a
generated image and reread on the next run. It always carries 'checksum';
source variants may add further keys.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from diagcache._internal.canonical_json import canonical_dumps
from diagcache.errors import MetadataError

DEFAULT_METADATA_SUFFIX = ".cache"

SCALAR_TYPES = (str, int, bool, type(None))


class MetadataRecord(BaseModel):
    """Persisted state for one previously generated image.

    Frozen: a stale record is replaced wholesale, never edited.
    """
    checksum: str

    model_config = ConfigDict(extra="allow", frozen=True)

    @model_validator(mode="after")
    def validate_flat_scalars(self):
        """Extra entries must be scalars so the record stays a flat mapping."""
        for key, value in (self.model_extra or {}).items():
            # Floats are excluded: their text form is not stable enough to hash
            if isinstance(value, float) or not isinstance(value, SCALAR_TYPES):
                raise ValueError(
                    f"Metadata value for '{key}' must be str, int, bool or null, "
                    f"got {type(value).__name__}"
                )
        return self

    @classmethod
    def create(cls, checksum: str, **extra: Any) -> "MetadataRecord":
        try:
            return cls(checksum=checksum, **extra)
        except ValidationError as e:
            raise MetadataError(str(e)) from e

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def to_json(self) -> str:
        return canonical_dumps(self.to_dict()) + "\n"


def metadata_path_for(image_file: Union[str, Path], suffix: str = DEFAULT_METADATA_SUFFIX) -> Path:
    """Sidecar path for an image: the image path with suffix appended."""
    image_path = Path(image_file)
    return image_path.with_name(image_path.name + suffix)


def load_metadata(
    image_file: Union[str, Path],
    suffix: str = DEFAULT_METADATA_SUFFIX,
) -> Optional[MetadataRecord]:
    """Read the metadata stored for an image.

    Returns None when no sidecar exists. A sidecar that cannot be parsed is
    logged and also reported as None, which forces regeneration.
    """
    path = metadata_path_for(image_file, suffix)
    if not path.is_file():
        return None

    try:
        return MetadataRecord.model_validate_json(path.read_bytes())
    except (ValidationError, OSError) as e:
        logger.warning(f"Ignoring unreadable image metadata {path}: {e}")
        return None


def write_metadata(
    image_file: Union[str, Path],
    record: MetadataRecord,
    suffix: str = DEFAULT_METADATA_SUFFIX,
) -> Path:
    """Write a record next to its image, replacing any previous record."""
    path = metadata_path_for(image_file, suffix)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(record.to_json(), encoding="utf-8")
    logger.debug(f"Wrote image metadata {path}")
    return path
