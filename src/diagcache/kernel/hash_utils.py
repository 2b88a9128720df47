"""Checksum computation for diagram sources.

The identity digest is fed, in order, the diagram code followed by each
attribute name and each attribute value as stored. Null names and values are
skipped. The digest is rendered as lowercase hexadecimal.

Key rules:
- Attribute iteration order is the mapping's own order (dicts preserve insertion)
- Names and values are stringified before hashing
- Text is encoded as UTF-8
"""

import hashlib
from typing import Any, Mapping, Optional, Union

HASH_ALGORITHM = "sha256"


def _to_bytes(value: Union[str, bytes, Any]) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, bool):
        # Documents spell boolean attribute values in lowercase
        return ("true" if value else "false").encode("utf-8")
    return str(value).encode("utf-8")


def compute_checksum(code: str, attributes: Optional[Mapping[Any, Any]] = None) -> str:
    """Compute the identity digest of diagram code and its attributes.

    Args:
        code: Diagram source text
        attributes: Attributes specified on the diagram, iterated as stored

    Returns:
        Hex digest string of fixed length
    """
    digest = hashlib.new(HASH_ALGORITHM)
    digest.update(_to_bytes(code))
    for name, value in (attributes or {}).items():
        if name is not None:
            digest.update(_to_bytes(name))
        if value is not None:
            digest.update(_to_bytes(value))
    return digest.hexdigest()
