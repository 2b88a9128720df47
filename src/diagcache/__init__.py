"""diagcache: diagram source identity + staleness detection."""

from importlib.metadata import version, PackageNotFoundError

from loguru import logger

try:
    __version__ = version("diagcache")
except PackageNotFoundError:
    __version__ = "dev"

# Silent by default; the CLI (or the host application) opts in
logger.disable("diagcache")

from diagcache.api import check, record, image_path_for
from diagcache.codes import StalenessReason
from diagcache.contracts import StalenessDecision
from diagcache.errors import (
    DiagcacheError,
    EncodingFailure,
    MetadataError,
    MissingExecutable,
    UnimplementedCapability,
)
from diagcache.kernel.commands import CommandConfig, find_command, which
from diagcache.kernel.document import Document, HostDocument
from diagcache.kernel.metadata import MetadataRecord, load_metadata, write_metadata
from diagcache.kernel.source import DiagramSource, FileSource, InlineSource

__all__ = [
    "__version__",
    "check",
    "record",
    "image_path_for",
    "StalenessReason",
    "StalenessDecision",
    "DiagcacheError",
    "EncodingFailure",
    "MetadataError",
    "MissingExecutable",
    "UnimplementedCapability",
    "CommandConfig",
    "find_command",
    "which",
    "Document",
    "HostDocument",
    "MetadataRecord",
    "load_metadata",
    "write_metadata",
    "DiagramSource",
    "FileSource",
    "InlineSource",
]
