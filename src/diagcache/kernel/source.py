"""Diagram sources: where diagram code comes from and how its identity is derived.

DiagramSource is the capability contract. Variants implement the subset of
capabilities they need; anything left out raises UnimplementedCapability.
InlineSource reads code from the lines of a document block, FileSource from an
external file. Both compose a SourceContext that carries the attributes, the
host document and the run-scoped command cache.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from diagcache.codes import StalenessReason
from diagcache.errors import UnimplementedCapability
from diagcache.kernel.commands import CommandConfig, find_command
from diagcache.kernel.document import HostDocument, Inherit
from diagcache.kernel.encoding import prepare_source_lines
from diagcache.kernel.hash_utils import compute_checksum
from diagcache.kernel.metadata import MetadataRecord
from diagcache.kernel.staleness import (
    Metadata,
    PathLike,
    artifact_reason,
    checksum_reason,
    mtime_reason,
)

IMAGE_NAME_PREFIX = "diag-"


class DiagramSource:
    """Capability contract for diagram sources.

    Operations with a documented default are implemented here in terms of
    other capabilities; the rest raise UnimplementedCapability.
    """

    def _unimplemented(self, capability: str) -> UnimplementedCapability:
        return UnimplementedCapability(capability, type(self).__name__)

    def image_name(self) -> str:
        raise self._unimplemented("image_name")

    def code(self) -> str:
        """The textual diagram source."""
        raise self._unimplemented("code")

    def checksum(self) -> str:
        raise self._unimplemented("checksum")

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        """Look up an attribute on this diagram.

        Args:
            name: Attribute name
            default: Value returned when the attribute is not found
            inherit: True to fall back to the same name on the document, or a
                prefix string to fall back to '<prefix>-<name>'
        """
        raise self._unimplemented("attr")

    @property
    def config(self) -> CommandConfig:
        """Run-scoped cache shared by every source in a processing run."""
        raise self._unimplemented("config")

    def base_dir(self) -> str:
        """Directory against which relative paths in this diagram resolve."""
        return self.attr("docdir", None, True) or os.getcwd()

    def stale_reason(self, image_file: Optional[PathLike], metadata: Metadata) -> Optional[StalenessReason]:
        raise self._unimplemented("stale_reason")

    def should_process(self, image_file: Optional[PathLike], metadata: Metadata) -> bool:
        """Whether the image must be regenerated.

        Args:
            image_file: Path to the previously generated image
            metadata: Record stored during the previous generation, or None
        """
        return self.stale_reason(image_file, metadata) is not None

    def create_metadata(self) -> MetadataRecord:
        """Record to persist alongside a freshly generated image."""
        raise self._unimplemented("create_metadata")

    def resolve_path(self, target: str, start: Optional[str] = None) -> str:
        raise self._unimplemented("resolve_path")

    def find_command(self, cmd: str, **options: Any) -> Optional[str]:
        """Resolve a tool executable; see diagcache.kernel.commands.find_command."""
        return find_command(cmd, self.config, self.attr, **options)

    def __str__(self) -> str:
        return self.code()


class SourceContext:
    """State and default behaviour shared by the concrete source variants."""

    def __init__(
        self,
        document: HostDocument,
        attributes: Optional[Dict[str, Any]] = None,
        config: Optional[CommandConfig] = None,
    ):
        self.document = document
        self.attributes: Dict[str, Any] = attributes if attributes is not None else {}
        self.config = config

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        value = self.attributes.get(name)
        if value is None and inherit:
            if isinstance(inherit, str):
                value = self.document.attr(f"{inherit}-{name}", default, True)
            else:
                value = self.document.attr(name, default, inherit)
        return default if value is None else value

    def diagram_subs(self) -> List[str]:
        if "subs" in self.attributes:
            return self.document.resolve_block_subs(self.attributes["subs"], None, "diagram")
        return []

    def substitute(self, lines: Sequence[str]) -> str:
        return "\n".join(self.document.apply_subs(lines, self.diagram_subs()))

    def checksum(self, code: str) -> str:
        return compute_checksum(code, self.attributes)

    def resolve_path(self, target: str, start: str) -> str:
        return self.document.normalize_system_path(target, start)

    def image_name(self, checksum: str) -> str:
        return self.attr("target", IMAGE_NAME_PREFIX + checksum)

    def stale_reason(
        self, checksum: str, image_file: Optional[PathLike], metadata: Metadata
    ) -> Optional[StalenessReason]:
        return artifact_reason(image_file) or checksum_reason(checksum, metadata)

    def require_config(self, variant: str) -> CommandConfig:
        if self.config is None:
            raise UnimplementedCapability("config", variant)
        return self.config


class InlineSource(DiagramSource):
    """Diagram code taken from the lines of an enclosing document block.

    Args:
        document: Host document the block belongs to
        lines: Raw lines captured from the block
        attributes: Attributes specified on the block
        config: Run-scoped command cache
    """

    def __init__(
        self,
        document: HostDocument,
        lines: Sequence[str],
        attributes: Optional[Dict[str, Any]] = None,
        config: Optional[CommandConfig] = None,
    ):
        self._context = SourceContext(document, attributes, config)
        self._lines = lines
        self._code: Optional[str] = None
        self._checksum: Optional[str] = None

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._context.attributes

    @property
    def config(self) -> CommandConfig:
        return self._context.require_config(type(self).__name__)

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        return self._context.attr(name, default, inherit)

    def code(self) -> str:
        if self._code is None:
            self._code = self._context.substitute(self._lines)
        return self._code

    def checksum(self) -> str:
        if self._checksum is None:
            self._checksum = self._context.checksum(self.code())
        return self._checksum

    def image_name(self) -> str:
        return self._context.image_name(self.checksum())

    def stale_reason(self, image_file: Optional[PathLike], metadata: Metadata) -> Optional[StalenessReason]:
        return self._context.stale_reason(self.checksum(), image_file, metadata)

    def create_metadata(self) -> MetadataRecord:
        return MetadataRecord.create(self.checksum())

    def resolve_path(self, target: str, start: Optional[str] = None) -> str:
        return self._context.resolve_path(target, start or self.base_dir())


class FileSource(DiagramSource):
    """Diagram code read from an external file.

    Args:
        document: Host document that references the file
        file_name: Path to the source file, or None when there is none yet
        attributes: Attributes specified on the referencing macro
        config: Run-scoped command cache
    """

    def __init__(
        self,
        document: HostDocument,
        file_name: Optional[Union[str, Path]],
        attributes: Optional[Dict[str, Any]] = None,
        config: Optional[CommandConfig] = None,
    ):
        self._context = SourceContext(document, attributes, config)
        self.file_name: Optional[str] = os.fspath(file_name) if file_name else None
        self._code: Optional[str] = None
        self._checksum: Optional[str] = None

    @property
    def attributes(self) -> Dict[str, Any]:
        return self._context.attributes

    @property
    def config(self) -> CommandConfig:
        return self._context.require_config(type(self).__name__)

    def attr(self, name: str, default: Any = None, inherit: Inherit = None) -> Any:
        return self._context.attr(name, default, inherit)

    def base_dir(self) -> str:
        if self.file_name:
            return os.path.dirname(self.file_name) or os.curdir
        return super().base_dir()

    def code(self) -> str:
        if self._code is None:
            self._code = self._read_code()
        return self._code

    def _read_code(self) -> str:
        if not self.file_name:
            return ""
        data = Path(self.file_name).read_bytes()
        return self._context.substitute(prepare_source_lines(data, self.file_name))

    def checksum(self) -> str:
        if self._checksum is None:
            self._checksum = self._context.checksum(self.code())
        return self._checksum

    def image_name(self) -> str:
        if self.attributes.get("target") is not None:
            return self._context.image_name(self.checksum())
        if self.file_name:
            return Path(self.file_name).stem
        return self.checksum()

    def stale_reason(self, image_file: Optional[PathLike], metadata: Metadata) -> Optional[StalenessReason]:
        missing = artifact_reason(image_file)
        if missing is not None:
            return missing
        return mtime_reason(self.file_name, image_file) or self._context.stale_reason(
            self.checksum(), image_file, metadata
        )

    def create_metadata(self) -> MetadataRecord:
        return MetadataRecord.create(self.checksum())

    def resolve_path(self, target: str, start: Optional[str] = None) -> str:
        return self._context.resolve_path(target, start or self.base_dir())
