"""Error taxonomy for diagcache.

Callers observe two distinguishable failure kinds from the kernel:
UnimplementedCapability (a diagram source variant is incomplete) and
MissingExecutable (a required external tool could not be located).
EncodingFailure and MetadataError cover file decoding and sidecar writes.
"""

from typing import Optional, Sequence


class DiagcacheError(Exception):
    """Base class for all diagcache errors."""
    pass


class UnimplementedCapability(DiagcacheError, NotImplementedError):
    """Raised when a diagram source variant does not implement a capability."""

    def __init__(self, capability: str, variant: Optional[str] = None):
        self.capability = capability
        self.variant = variant
        if variant:
            message = f"{variant} does not implement the '{capability}' capability"
        else:
            message = f"The '{capability}' capability is not implemented"
        super().__init__(message)


class MissingExecutable(DiagcacheError):
    """Raised when an external tool cannot be found on PATH or via attributes."""

    def __init__(self, commands: Sequence[str], attribute: str):
        self.commands = list(commands)
        self.attribute = attribute
        names = ", ".join(f"'{c}'" for c in self.commands)
        super().__init__(
            f"Could not find the {names} executable in PATH; add it to the PATH "
            f"or specify its location using the '{attribute}' document attribute"
        )


class EncodingFailure(DiagcacheError, ValueError):
    """Raised when diagram source bytes cannot be decoded to text."""

    def __init__(self, encoding: str, path: Optional[str] = None, reason: str = ""):
        self.encoding = encoding
        self.path = path
        where = f" in {path}" if path else ""
        detail = f": {reason}" if reason else ""
        super().__init__(f"Cannot decode diagram source{where} as {encoding}{detail}")


class MetadataError(DiagcacheError, ValueError):
    """Raised when an image metadata record has an invalid shape."""
    pass
