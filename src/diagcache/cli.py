"""diagcache CLI: staleness checks and tool resolution for diagram images."""

import argparse
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Dict, List, Optional


def _parse_attributes(pairs: Optional[List[str]]) -> Dict[str, str]:
    """Parse repeated --attr name=value options (a bare name sets an empty value)."""
    attributes: Dict[str, str] = {}
    for pair in pairs or []:
        name, _, value = pair.partition("=")
        name = name.strip()
        if not name:
            raise argparse.ArgumentTypeError(f"Invalid attribute '{pair}': expected name=value")
        attributes[name] = value
    return attributes


def main():
    """Main CLI entry point for diagcache commands."""
    # Get version for --version argument (handle PackageNotFoundError)
    try:
        diagcache_version = get_version("diagcache")
    except PackageNotFoundError:
        diagcache_version = "dev"

    parser = argparse.ArgumentParser(
        prog="diagcache",
        description="diagcache: Decide whether rendered diagram images are stale"
    )
    parser.add_argument("--version", action="version", version=f"diagcache {diagcache_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to diagcache.yaml (defaults to $DIAGCACHE_CONFIG, then ./diagcache.yaml)"
    )
    parent_parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for diagnostics on stderr (overrides the settings file)"
    )
    parent_parser.add_argument(
        "--attr",
        action="append",
        default=None,
        metavar="NAME=VALUE",
        help="Document attribute (repeatable)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Shared arguments for commands operating on one diagram
    source_parser = argparse.ArgumentParser(add_help=False)
    source_parser.add_argument(
        "source",
        type=Path,
        nargs="?",
        default=None,
        help="Path to the diagram source file"
    )
    source_parser.add_argument(
        "--stdin",
        action="store_true",
        help="Read diagram code from stdin (inline block) instead of a file"
    )
    source_parser.add_argument(
        "--image",
        type=Path,
        required=True,
        help="Path to the generated image"
    )
    source_parser.add_argument(
        "--target",
        default=None,
        help="Explicit image name (the 'target' diagram attribute)"
    )
    source_parser.add_argument(
        "--diagram-attr",
        action="append",
        default=None,
        metavar="NAME=VALUE",
        help="Attribute specified on the diagram itself (repeatable)"
    )

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Report whether an image must be regenerated",
        parents=[parent_parser, source_parser]
    )
    check_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the decision as canonical JSON"
    )
    check_parser.add_argument(
        "--fail-if-stale",
        action="store_true",
        help="Exit with status 1 when the image must be regenerated"
    )

    # record command
    subparsers.add_parser(
        "record",
        help="Write fresh metadata next to a regenerated image",
        parents=[parent_parser, source_parser]
    )

    # which command
    which_parser = subparsers.add_parser(
        "which",
        help="Resolve the executable for an external tool",
        parents=[parent_parser]
    )
    which_parser.add_argument("tool", help="Canonical tool name, e.g. dot")
    which_parser.add_argument(
        "--alt-cmd",
        action="append",
        default=[],
        help="Alternate executable name searched after the tool name (repeatable)"
    )
    which_parser.add_argument(
        "--alt-attr",
        action="append",
        default=[],
        help="Attribute name checked before the tool name (repeatable)"
    )
    which_parser.add_argument(
        "--path",
        default=None,
        help="Search path overriding $PATH and the settings file"
    )

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Lazy imports: only load the kernel once a command is invoked
    from ._internal.logging import configure_logging
    from ._internal.settings import load_settings
    from .errors import DiagcacheError
    from .kernel.commands import CommandConfig, find_command
    from .kernel.document import Document

    try:
        settings = load_settings(args.config)
        configure_logging(args.log_level or settings.log_level)

        document_attributes = dict(settings.attributes)
        document_attributes.update(_parse_attributes(args.attr))
        document = Document(document_attributes)
        config = CommandConfig()

        if args.command == "which":
            path = args.path or settings.search_path
            cmd_path = find_command(
                args.tool,
                config,
                document.attr,
                alt_attrs=args.alt_attr,
                alt_cmds=args.alt_cmd,
                path=path,
            )
            print(cmd_path)
            sys.exit(0)

        source = _build_source(args, document, config)

        if args.command == "check":
            from .api import check
            from ._internal.canonical_json import canonical_dumps

            decision = check(source, args.image, settings.metadata_suffix)
            if args.json:
                print(canonical_dumps(decision.model_dump(mode="json")))
            elif not args.quiet:
                status = "STALE" if decision.regenerate else "OK"
                print(f"[{status}] {decision.image_name}")
                print(f"  Image: {decision.image_file}")
                print(f"  Reason: {decision.reason.value}")
                print(f"  Checksum: {decision.checksum}")
            if decision.regenerate and args.fail_if_stale:
                sys.exit(1)
            sys.exit(0)

        if args.command == "record":
            from .api import record
            from .kernel.metadata import metadata_path_for

            metadata = record(source, args.image, settings.metadata_suffix)
            if not args.quiet:
                print("[OK] Metadata recorded")
                print(f"  Metadata: {metadata_path_for(args.image, settings.metadata_suffix)}")
                print(f"  Checksum: {metadata.checksum}")
            sys.exit(0)

    except argparse.ArgumentTypeError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except (DiagcacheError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


def _build_source(args, document, config):
    from .kernel.source import FileSource, InlineSource

    attributes = _parse_attributes(args.diagram_attr)
    if args.target is not None:
        attributes["target"] = args.target

    if args.stdin:
        if args.source is not None:
            raise argparse.ArgumentTypeError("Cannot combine a source file with --stdin")
        lines = sys.stdin.read().splitlines()
        return InlineSource(document, lines, attributes, config)

    if args.source is None:
        raise argparse.ArgumentTypeError("A source file (or --stdin) is required")
    return FileSource(document, args.source.resolve(), attributes, config)


if __name__ == "__main__":
    main()
